from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .serialize import to_jsonable

"""Report shapes produced by the aggregation engine."""

__all__ = [
    "PeriodBucket",
    "CumulativePoint",
    "MonthlyConcrete",
    "WorkItemStat",
    "CategoryStat",
    "MonthHighlight",
    "ReportSummary",
    "AggregationReport",
]


@dataclass(frozen=True)
class PeriodBucket:
    """Summed actuals of one day, week or month plus its target.

    ``concrete``, ``formwork`` and ``rebar`` split ``quantity`` by the unit of
    the work item (m3, m2, ton by default). The running totals are only set on
    monthly buckets.
    """
    key: str  # YYYY-MM-DD | YYYY-Www | YYYY-MM
    man_hours: float
    quantity: float
    target: float
    earned_man_hours: float = 0.0
    concrete: float = 0.0
    formwork: float = 0.0
    rebar: float = 0.0
    cumulative_man_hours: float | None = None
    cumulative_earned_man_hours: float | None = None

    def to_dict(self, key_name: str) -> dict[str, Any]:
        data = {
            key_name: self.key,
            "manHours": self.man_hours,
            "quantity": self.quantity,
            "target": self.target,
            "earnedManHours": self.earned_man_hours,
            "concrete": self.concrete,
            "formwork": self.formwork,
            "rebar": self.rebar,
        }
        if self.cumulative_man_hours is not None:
            data["cumulativeManHours"] = self.cumulative_man_hours
            data["cumulativeEarnedManHours"] = self.cumulative_earned_man_hours
        return data


@dataclass(frozen=True)
class CumulativePoint:
    date: date
    cumulative_man_hours: float
    cumulative_quantity: float
    cumulative_target: float


@dataclass(frozen=True)
class MonthlyConcrete:
    """Poured vs planned concrete of one month."""
    month: str  # YYYY-MM
    actual: float
    planned: float


@dataclass(frozen=True)
class WorkItemStat:
    budget_code: str
    name: str
    unit: str
    target_quantity: float
    target_man_hours: float
    actual_quantity: float
    actual_man_hours: float
    earned_man_hours: float
    progress_percent: float
    efficiency_percent: float | None  # None when no man-hours were spent


@dataclass(frozen=True)
class CategoryStat:
    """Rollup of all work items sharing an imalat category."""
    category: str
    quantity: float  # only items measured in the concrete unit
    man_hours: float
    earned_man_hours: float
    unit_man_hours: float
    efficiency_percent: float | None


@dataclass(frozen=True)
class MonthHighlight:
    """Figures for the monthly highlight card."""
    year: int
    month: int
    month_name: str
    spent_man_hours: float
    poured_concrete: float
    unit_man_hours: float
    earned_man_hours: float
    efficiency_percent: float | None


@dataclass(frozen=True)
class ReportSummary:
    total_planned_man_hours: float
    total_spent_man_hours: float
    total_earned_man_hours: float
    total_planned_concrete: float
    total_quantity: float


@dataclass(frozen=True)
class AggregationReport:
    daily: list[PeriodBucket]
    weekly: list[PeriodBucket]
    monthly: list[PeriodBucket]
    cumulative: list[CumulativePoint]
    work_items: list[WorkItemStat]
    summary: ReportSummary
    categories: list[CategoryStat] = field(default_factory=list)
    highlight: MonthHighlight | None = None
    monthly_concrete: list[MonthlyConcrete] = field(default_factory=list)

    @property
    def last_day(self) -> PeriodBucket | None:
        return self.daily[-1] if self.daily else None

    @property
    def last_week(self) -> PeriodBucket | None:
        return self.weekly[-1] if self.weekly else None

    def to_dict(self) -> dict[str, Any]:
        """Report JSON consumed by the charts."""
        return {
            "daily": [b.to_dict("date") for b in self.daily],
            "weekly": [b.to_dict("week") for b in self.weekly],
            "monthly": [b.to_dict("month") for b in self.monthly],
            "monthlyConcrete": to_jsonable(self.monthly_concrete),
            "cumulative": to_jsonable(self.cumulative),
            "workItems": to_jsonable(self.work_items),
            "categories": to_jsonable(self.categories),
            "lastDay": self.last_day.to_dict("date") if self.last_day else None,
            "lastWeek": self.last_week.to_dict("week") if self.last_week else None,
            "highlight": to_jsonable(self.highlight),
            "summary": to_jsonable(self.summary),
        }
