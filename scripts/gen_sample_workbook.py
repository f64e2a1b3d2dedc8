#!/usr/bin/env python3
"""Sample project generator for manual runs of ``siteprogress report``.

Writes a work-item catalog, a daily entry upload, a monthly work schedule and
a matching ``project.yml`` into one directory. Headers use the Turkish display
names a site office would type; numbers in the daily upload are written as
Turkish-formatted text ("1.250,5") so the locale handling gets exercised.
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

import numpy as np
import pandas as pd
import yaml

WORK_ITEMS = [
    # budget code, name, unit, target qty, target man-hours, category
    ("BK-001", "Temel Betonu", "m3", 1200.0, 2400.0, "Temel"),
    ("BK-002", "Üstyapı Betonu", "m3", 3000.0, 7500.0, "Ustyapi"),
    ("BK-003", "Grobeton", "m3", 400.0, 480.0, "Grobeton"),
    ("BK-004", "Kalıp", "m2", 8000.0, 9600.0, "Ustyapi"),
    ("BK-005", "Donatı", "ton", 350.0, 7000.0, "Ustyapi"),
]

MONTHS_TR = ["Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
             "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık"]


def _turkish_number(value: float) -> str:
    text = f"{value:,.1f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def work_item_frame() -> pd.DataFrame:
    return pd.DataFrame(
        WORK_ITEMS,
        columns=["Bütçe Kodu", "İmalat Kalemi", "Birim", "Hedef Miktar", "Hedef Adam-Saat", "İmalat Ayrımı"],
    )


def daily_entry_frame(start: date, days: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        if day.weekday() == 6:  # no work on Sundays
            continue
        for code, _name, _unit, target_qty, target_mh, _cat in WORK_ITEMS:
            quantity = float(np.round(rng.uniform(0.2, 2.0) * target_qty / days, 1))
            rate = target_mh / target_qty
            man_hours = float(np.round(quantity * rate * rng.uniform(0.8, 1.3), 1))
            rows.append((day.strftime("%d.%m.%Y"), code, _turkish_number(man_hours), _turkish_number(quantity)))
    return pd.DataFrame(rows, columns=["Tarih", "Bütçe Kodu", "Adam-Saat", "Miktar"])


def schedule_frame(start: date, months: int, planned_man_hours: float) -> pd.DataFrame:
    rows = []
    per_month = planned_man_hours / months
    year, month = start.year, start.month
    for _ in range(months):
        rows.append(
            (f"{MONTHS_TR[month - 1]} {year}", round(1200 / months, 1), round(3000 / months, 1), round(per_month, 1))
        )
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return pd.DataFrame(rows, columns=["Aylar", "Temel Betonu", "Üstyapı Betonu", "Adam Saat"])


def write_project(output: Path, start: date, days: int, seed: int) -> Path:
    output.mkdir(parents=True, exist_ok=True)
    planned = sum(w[4] for w in WORK_ITEMS)
    work_item_frame().to_excel(output / "work_items.xlsx", index=False, engine="openpyxl")
    daily_entry_frame(start, days, seed).to_excel(output / "daily_entries.xlsx", index=False, engine="openpyxl")
    schedule_frame(start, max(days // 30, 1), planned).to_excel(output / "schedule.xlsx", index=False, engine="openpyxl")

    config = {
        "project": {
            "name": "Örnek Şantiye",
            "planned_man_hours": planned,
            "total_duration_days": days,
            "total_concrete": sum(w[3] for w in WORK_ITEMS if w[2] == "m3"),
        },
        "work_items": {"path": "work_items.xlsx"},
        "entries": [{"path": "daily_entries.xlsx", "kind": "daily_entries"}],
        "schedule": {"path": "schedule.xlsx"},
    }
    config_path = output / "project.yml"
    config_path.write_text(yaml.safe_dump(config, allow_unicode=True, sort_keys=False), encoding="utf-8")
    return config_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a sample site progress project")
    parser.add_argument("output", type=Path, help="Output directory")
    parser.add_argument("--start", type=date.fromisoformat, default=date(2025, 1, 6), help="First day (YYYY-MM-DD)")
    parser.add_argument("--days", type=int, default=90, help="Number of calendar days (default: 90)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.days <= 0:
        print("Error: --days must be positive", file=sys.stderr)
        return 1

    config_path = write_project(args.output, args.start, args.days, args.seed)
    print(f"Created sample project: {config_path}")
    print(f"  Run: siteprogress report --config {config_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
