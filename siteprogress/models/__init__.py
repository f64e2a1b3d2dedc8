"""Domain models for the site progress import and reporting core.

Typed import rows, validation diagnostics, persisted entity shapes and the
report structures produced by the aggregation engine.
"""

from .entities import DailyEntry, MonthlyTarget, MonthlyWorkItemPlan, ProjectPlan, WorkItem
from .raw_row import RawRow
from .records import DailyEntryRow, ManHoursRow, ProgressEntryRow, WorkItemRow, WorkScheduleRow
from .report import (
    AggregationReport,
    CategoryStat,
    CumulativePoint,
    MonthHighlight,
    MonthlyConcrete,
    PeriodBucket,
    ReportSummary,
    WorkItemStat,
)
from .validation import ValidationError, ValidationErrorRecord, ValidationResult

__all__ = [
    # Import rows
    "RawRow",
    "WorkItemRow",
    "ProgressEntryRow",
    "ManHoursRow",
    "DailyEntryRow",
    "WorkScheduleRow",
    # Diagnostics
    "ValidationError",
    "ValidationErrorRecord",
    "ValidationResult",
    # Persisted entities
    "WorkItem",
    "DailyEntry",
    "MonthlyTarget",
    "MonthlyWorkItemPlan",
    "ProjectPlan",
    # Report
    "AggregationReport",
    "CategoryStat",
    "CumulativePoint",
    "MonthHighlight",
    "MonthlyConcrete",
    "PeriodBucket",
    "ReportSummary",
    "WorkItemStat",
]
