from __future__ import annotations

from dataclasses import dataclass
from datetime import date

"""Typed rows produced by the import validators.

One dataclass per import kind. Values are already normalized: dates are
``datetime.date``, numbers are floats, text is trimmed, foreign keys are
resolved to work-item ids.
"""

__all__ = [
    "WorkItemRow",
    "ProgressEntryRow",
    "ManHoursRow",
    "DailyEntryRow",
    "WorkScheduleRow",
]


@dataclass(frozen=True)
class WorkItemRow:
    """İmalat kalemi row from a work-item catalog upload."""
    budget_code: str
    name: str
    unit: str
    target_quantity: float
    target_man_hours: float
    parent_budget_code: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class ProgressEntryRow:
    """Daily quantity (metraj) for one work item."""
    work_item_id: str
    entry_date: date
    quantity: float
    ratio: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class ManHoursRow:
    """Daily man-hours for one work item."""
    work_item_id: str
    entry_date: date
    man_hours: float


@dataclass(frozen=True)
class DailyEntryRow:
    """Combined man-hours + quantity row (single-sheet daily upload)."""
    work_item_id: str
    entry_date: date
    man_hours: float
    quantity: float
    notes: str = ""


@dataclass(frozen=True)
class WorkScheduleRow:
    """One planned value of the monthly work schedule (iş programı).

    ``man_hours_column`` marks values taken from the distinguished man-hour
    column; ``planned_quantity`` then holds planned man-hours for the month.
    """
    work_item_name: str
    year: int
    month: int
    planned_quantity: float
    man_hours_column: bool = False
