from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..models.entities import DailyEntry, MonthlyTarget, MonthlyWorkItemPlan, WorkItem
from ..models.records import (
    DailyEntryRow,
    ManHoursRow,
    ProgressEntryRow,
    WorkItemRow,
    WorkScheduleRow,
)

"""Consumer-side helpers between validation output and the aggregation input.

Validation keeps ambiguity (repeated budget codes stay as separate rows);
deciding which row wins happens here, where the accepted rows are turned into
the persisted shapes.
"""

__all__ = [
    "dedupe_work_items",
    "work_items_from_rows",
    "work_item_lookup",
    "to_daily_entries",
    "monthly_targets_from_schedule",
    "work_item_plans_from_schedule",
]

logger = logging.getLogger(__name__)


def dedupe_work_items(rows: Sequence[WorkItemRow]) -> list[WorkItemRow]:
    """Collapse repeated budget codes: the later row wins, first position kept."""
    latest: dict[str, WorkItemRow] = {}
    for row in rows:
        latest[row.budget_code] = row
    if len(latest) != len(rows):
        logger.debug("work items: %d rows collapsed to %d budget codes", len(rows), len(latest))
    return list(latest.values())


def work_items_from_rows(rows: Sequence[WorkItemRow]) -> list[WorkItem]:
    """Turn accepted catalog rows into WorkItems; the budget code doubles as the id."""
    return [
        WorkItem(
            id=row.budget_code,
            budget_code=row.budget_code,
            name=row.name,
            unit=row.unit,
            target_quantity=row.target_quantity,
            target_man_hours=row.target_man_hours,
            category=row.category,
            parent_budget_code=row.parent_budget_code,
        )
        for row in dedupe_work_items(rows)
    ]


def work_item_lookup(items: Iterable[WorkItem]) -> dict[str, str]:
    """budget code -> work item id map for foreign-key validation."""
    return {item.budget_code: item.id for item in items}


def to_daily_entries(
    rows: Iterable[ProgressEntryRow | ManHoursRow | DailyEntryRow],
) -> list[DailyEntry]:
    entries: list[DailyEntry] = []
    for row in rows:
        if isinstance(row, DailyEntryRow):
            entries.append(
                DailyEntry(row.work_item_id, row.entry_date, row.man_hours, row.quantity, row.notes or None)
            )
        elif isinstance(row, ProgressEntryRow):
            entries.append(DailyEntry(row.work_item_id, row.entry_date, quantity=row.quantity))
        elif isinstance(row, ManHoursRow):
            entries.append(DailyEntry(row.work_item_id, row.entry_date, man_hours=row.man_hours))
        else:
            raise TypeError(f"unsupported entry row: {type(row).__name__}")
    return entries


def monthly_targets_from_schedule(rows: Iterable[WorkScheduleRow]) -> list[MonthlyTarget]:
    """Monthly man-hour targets from the schedule's man-hour column.

    Work-item columns are left to :func:`work_item_plans_from_schedule`. A
    month listed twice keeps its last value.
    """
    targets: dict[tuple[int, int], float] = {}
    for row in rows:
        if row.man_hours_column:
            targets[(row.year, row.month)] = row.planned_quantity
    return [
        MonthlyTarget(year=year, month=month, planned_man_hours=value)
        for (year, month), value in sorted(targets.items())
    ]


def work_item_plans_from_schedule(rows: Iterable[WorkScheduleRow]) -> list[MonthlyWorkItemPlan]:
    """Planned quantities of the schedule's work-item columns, sorted by month then name.

    A column repeated for the same month keeps its last value.
    """
    plans: dict[tuple[int, int, str], float] = {}
    for row in rows:
        if not row.man_hours_column:
            plans[(row.year, row.month, row.work_item_name)] = row.planned_quantity
    return [
        MonthlyWorkItemPlan(work_item_name=name, year=year, month=month, planned_quantity=value)
        for (year, month, name), value in sorted(plans.items())
    ]
