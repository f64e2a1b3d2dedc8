# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from siteprogress.logging.init import reset_logging

WORK_ITEM_HEADER = ["Bütçe Kodu", "İmalat Kalemi", "Birim", "Hedef Miktar", "Hedef Adam-Saat", "İmalat Ayrımı"]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def lookup() -> dict[str, str]:
    return {
        "BK-001": "wi-1",
        "BK-002": "wi-2",
        "BK-003": "wi-3",
        "BK-004": "wi-4",
        "BK-005": "wi-5",
        "BK-006": "wi-6",
        "BK-007": "wi-7",
    }


def write_sheet(path: Path, rows: list[list[Any]], sheet: str = "Sheet1") -> Path:
    """Write ``rows`` (header first) as a single-sheet workbook."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def xlsx_writer():
    return write_sheet


@pytest.fixture()
def work_item_rows() -> list[list[Any]]:
    return [
        WORK_ITEM_HEADER,
        ["BK-001", "Temel Betonu", "m3", 300, 600, "Temel"],
        ["BK-002", "Üstyapı Betonu", "m3", 1000, 2500, "Ustyapi"],
        ["BK-003", "Kalıp", "m2", 2000, 2400, "Ustyapi"],
    ]


@pytest.fixture()
def sample_project(temp_workdir: Path, work_item_rows) -> Path:
    """Catalog, one daily upload, a schedule and project.yml under ./data."""
    data = temp_workdir / "data"
    write_sheet(data / "work_items.xlsx", work_item_rows)
    write_sheet(
        data / "daily.xlsx",
        [
            ["Tarih", "Bütçe Kodu", "Adam-Saat", "Miktar"],
            ["06.01.2025", "BK-001", "150", "100"],
            ["07.01.2025", "BK-002", "200,5", "40"],
            [date(2025, 2, 3), "BK-003", 120, 90],
        ],
    )
    write_sheet(
        data / "schedule.xlsx",
        [
            ["Aylar", "Temel Betonu", "Adam Saat"],
            ["Ocak 2025", 150, 1000],
            ["Şubat 2025", 150, 1200],
        ],
    )
    config = temp_workdir / "config" / "project.yml"
    config.write_text(
        """project:
  name: Test Şantiyesi
  planned_man_hours: 5500
  total_duration_days: 100
  total_concrete: 1300
work_items:
  path: ../data/work_items.xlsx
entries:
  - path: ../data/daily.xlsx
    kind: daily_entries
schedule:
  path: ../data/schedule.xlsx
error_log_dir: logs
""",
        encoding="utf-8",
    )
    return config
