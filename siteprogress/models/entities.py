from __future__ import annotations

from dataclasses import dataclass
from datetime import date

"""Persisted shapes read by the aggregation engine.

Storage is outside this package; these dataclasses describe what the storage
layer hands back. The aggregation engine only reads them.
"""

__all__ = [
    "WorkItem",
    "DailyEntry",
    "MonthlyTarget",
    "MonthlyWorkItemPlan",
    "ProjectPlan",
]


@dataclass(frozen=True)
class WorkItem:
    id: str
    budget_code: str
    name: str
    unit: str
    target_quantity: float = 0.0
    target_man_hours: float = 0.0
    category: str | None = None
    parent_budget_code: str | None = None

    @property
    def unit_man_hours(self) -> float:
        """Planned man-hours per unit of quantity (0 when no target quantity)."""
        if self.target_quantity <= 0:
            return 0.0
        return self.target_man_hours / self.target_quantity


@dataclass(frozen=True)
class DailyEntry:
    work_item_id: str
    entry_date: date
    man_hours: float = 0.0
    quantity: float = 0.0
    notes: str | None = None


@dataclass(frozen=True)
class MonthlyTarget:
    """Explicit monthly man-hour target (aylık iş programı)."""
    year: int
    month: int
    planned_man_hours: float
    planned_concrete: float = 0.0

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthlyWorkItemPlan:
    """Planned quantity of one schedule column (work item name) in one month."""
    work_item_name: str
    year: int
    month: int
    planned_quantity: float

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class ProjectPlan:
    """Project-level plan figures used for pro-rated targets and the summary."""
    planned_man_hours: float = 0.0
    total_duration_days: int = 0
    total_concrete: float = 0.0
    name: str = ""
