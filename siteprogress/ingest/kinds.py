from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from ..config.loader import default_column_aliases
from ..models.config_models import AliasConfig, KindAliases
from ..models.records import DailyEntryRow, ManHoursRow, ProgressEntryRow, WorkItemRow

if TYPE_CHECKING:
    from .validator import RowReader

"""Import-kind descriptors for the canonical row validator.

Each descriptor bundles the alias table of one upload type with the business
rule hooks the shared validator applies: which field is a foreign key, which
values make a row a "nothing happened" no-op, which field must be unique
within one upload, and how a typed record is built from a row.
"""

__all__ = [
    "ImportKind",
    "WORK_ITEMS",
    "PROGRESS",
    "MAN_HOURS",
    "DAILY_ENTRIES",
    "WORK_SCHEDULE",
    "ROW_KINDS",
    "build_import_kinds",
    "default_import_kinds",
]

WORK_ITEMS = "work_items"
PROGRESS = "progress"
MAN_HOURS = "man_hours"
DAILY_ENTRIES = "daily_entries"
WORK_SCHEDULE = "work_schedule"

ROW_KINDS = (WORK_ITEMS, PROGRESS, MAN_HOURS, DAILY_ENTRIES)


@dataclass(frozen=True)
class ImportKind:
    """Descriptor driving :func:`siteprogress.ingest.validator.validate_rows`.

    Attributes:
        key: Import kind name
        aliases: Canonical field set (labels + header aliases)
        build: Builds the typed record; returns None when the reader recorded errors
        foreign_key: Field holding a budget code resolved against the caller's lookup
        zero_fields: Record attributes that, when all exactly zero, drop the row with a warning
        zero_message: Warning template for zero rows (``{row}`` placeholder)
        unique_field: Record attribute that must not repeat within one upload
        duplicate_message: Warning template for repeats (``{row}``, ``{value}``)
    """
    key: str
    aliases: KindAliases
    build: Callable[[RowReader, str | None], Any]
    foreign_key: str | None = None
    zero_fields: tuple[str, ...] = ()
    zero_message: str = ""
    unique_field: str | None = None
    duplicate_message: str = ""


def _build_work_item(r: RowReader, _work_item_id: str | None) -> WorkItemRow | None:
    budget_code = r.text("budget_code")
    name = r.text("name")
    unit = r.text("unit")
    target_quantity = r.number("target_quantity")
    target_man_hours = r.number("target_man_hours")
    parent = r.text("parent_budget_code", required=False)
    category = r.text("category", required=False)
    if r.failed:
        return None
    return WorkItemRow(
        budget_code=budget_code,
        name=name,
        unit=unit,
        target_quantity=target_quantity,
        target_man_hours=target_man_hours,
        parent_budget_code=parent or None,
        category=category or None,
    )


def _build_progress(r: RowReader, work_item_id: str | None) -> ProgressEntryRow | None:
    entry_date = r.date("entry_date")
    quantity = r.number("quantity")
    if r.failed:
        return None
    return ProgressEntryRow(
        work_item_id=work_item_id,
        entry_date=entry_date,
        quantity=quantity,
        ratio=r.text("ratio", required=False) or None,
        region=r.text("region", required=False) or None,
    )


def _build_man_hours(r: RowReader, work_item_id: str | None) -> ManHoursRow | None:
    entry_date = r.date("entry_date")
    man_hours = r.number("man_hours")
    if r.failed:
        return None
    return ManHoursRow(work_item_id=work_item_id, entry_date=entry_date, man_hours=man_hours)


def _build_daily_entry(r: RowReader, work_item_id: str | None) -> DailyEntryRow | None:
    entry_date = r.date("entry_date")
    man_hours = r.number("man_hours")
    quantity = r.number("quantity")
    if r.failed:
        return None
    return DailyEntryRow(
        work_item_id=work_item_id,
        entry_date=entry_date,
        man_hours=man_hours,
        quantity=quantity,
        notes=r.text("notes", required=False),
    )


def build_import_kinds(aliases: AliasConfig) -> dict[str, ImportKind]:
    """Descriptors for the row-oriented imports using ``aliases``."""
    return {
        WORK_ITEMS: ImportKind(
            key=WORK_ITEMS,
            aliases=aliases.kinds[WORK_ITEMS],
            build=_build_work_item,
            unique_field="budget_code",
            duplicate_message='Satır {row}: "{value}" bütçe kodu tekrar ediyor, son değer kullanılacak.',
        ),
        PROGRESS: ImportKind(
            key=PROGRESS,
            aliases=aliases.kinds[PROGRESS],
            build=_build_progress,
            foreign_key="budget_code",
            zero_fields=("quantity",),
            zero_message="Satır {row}: Miktar değeri sıfır, kayıt yoksayılıyor.",
        ),
        MAN_HOURS: ImportKind(
            key=MAN_HOURS,
            aliases=aliases.kinds[MAN_HOURS],
            build=_build_man_hours,
            foreign_key="budget_code",
            zero_fields=("man_hours",),
            zero_message="Satır {row}: Adam-saat değeri sıfır, kayıt yoksayılıyor.",
        ),
        DAILY_ENTRIES: ImportKind(
            key=DAILY_ENTRIES,
            aliases=aliases.kinds[DAILY_ENTRIES],
            build=_build_daily_entry,
            foreign_key="budget_code",
            zero_fields=("man_hours", "quantity"),
            zero_message="Satır {row}: Adam-saat ve miktar değerleri sıfır, kayıt yoksayılıyor.",
        ),
    }


@lru_cache(maxsize=1)
def default_import_kinds() -> dict[str, ImportKind]:
    return build_import_kinds(default_column_aliases())
