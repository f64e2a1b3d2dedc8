from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date, timedelta

import pandas as pd

from ..models.entities import DailyEntry, MonthlyTarget, MonthlyWorkItemPlan, ProjectPlan, WorkItem
from ..models.report import (
    AggregationReport,
    CategoryStat,
    CumulativePoint,
    MonthHighlight,
    MonthlyConcrete,
    PeriodBucket,
    ReportSummary,
    WorkItemStat,
)
from ..parsing.dates import TURKISH_MONTH_NAMES, YearMonth
from ..parsing.text import ascii_fold

"""Aggregation engine: accepted daily entries -> period rollups and KPIs.

Inputs are the persisted shapes (entries, work-item catalog, monthly targets,
schedule work-item plans, project plan). Output is an :class:`AggregationReport`. The engine is
stateless and deterministic: the same inputs always give the same report.

Earned man-hours and efficiency are computed by :func:`earned_man_hours` and
:func:`efficiency_percent` only; every rollup (buckets, work items,
categories, highlight, summary) goes through them.
"""

__all__ = [
    "AggregationEngine",
    "aggregate",
    "daily_target",
    "earned_man_hours",
    "efficiency_percent",
    "week_key",
]

logger = logging.getLogger(__name__)

_ENTRY_COLUMNS = ["work_item_id", "entry_date", "man_hours", "quantity"]
_MEASURES = ["man_hours", "quantity", "earned", "concrete", "formwork", "rebar"]


def earned_man_hours(quantity: float, item: WorkItem | None) -> float:
    """Man-hours the plan allots for ``quantity`` of ``item`` (0 for unknown items)."""
    if item is None:
        return 0.0
    return quantity * item.unit_man_hours


def efficiency_percent(earned: float, actual: float) -> float | None:
    """Earned / actual man-hours x 100; None ("-") when nothing was spent."""
    if actual <= 0:
        return None
    return earned / actual * 100.0


def daily_target(plan: ProjectPlan) -> float:
    """Flat pro-rated daily man-hour target (a zero duration counts as one day)."""
    days = plan.total_duration_days or 1
    return plan.planned_man_hours / days


def week_key(day: date) -> str:
    """Approximate Monday-aligned week key ``YYYY-Www``.

    The week start is ``day - weekday + 1`` with Sunday counted as weekday 0,
    so a Sunday belongs to the week of the following Monday. The week number
    is ``ceil((day_of_year(start) + weekday(Jan 1)) / 7)``. This is not ISO
    8601; keys near year boundaries can differ from ISO week numbers. Keys also
    differ from those of the legacy dashboard, which used the day of the month
    where this uses the day of the year, so stored week keys from it do not line
    up with these.
    """
    sunday_based = (day.weekday() + 1) % 7
    start = day - timedelta(days=sunday_based - 1)
    jan1_weekday = (date(start.year, 1, 1).weekday() + 1) % 7
    number = math.ceil((start.timetuple().tm_yday + jan1_weekday) / 7)
    return f"{start.year}-W{number:02d}"


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _in_range(key: str, lo: str | None, hi: str | None) -> bool:
    return not ((lo and key < lo) or (hi and key > hi))


def _combine(key: str, buckets: Sequence[PeriodBucket], target: float) -> PeriodBucket:
    return PeriodBucket(
        key=key,
        man_hours=math.fsum(b.man_hours for b in buckets),
        quantity=math.fsum(b.quantity for b in buckets),
        target=target,
        earned_man_hours=math.fsum(b.earned_man_hours for b in buckets),
        concrete=math.fsum(b.concrete for b in buckets),
        formwork=math.fsum(b.formwork for b in buckets),
        rebar=math.fsum(b.rebar for b in buckets),
    )


class AggregationEngine:
    """Builds reports for one project.

    Args:
        work_items: Work-item catalog (stats keep this order)
        plan: Project plan figures
        monthly_targets: Explicit monthly man-hour targets; for a repeated
            month the last target wins. A non-zero ``planned_concrete``
            replaces the schedule's planned concrete for that month.
        work_item_plans: Planned quantities of the schedule's work-item
            columns. A column counts as planned concrete when its name folds
            to the name or category of a work item in ``concrete_unit``.
        concrete_unit: Unit whose quantities count as poured concrete
        formwork_unit: Unit of formwork (kalıp) items
        rebar_unit: Unit of rebar (donatı) items
    """

    def __init__(
        self,
        work_items: Sequence[WorkItem],
        plan: ProjectPlan | None = None,
        monthly_targets: Iterable[MonthlyTarget] = (),
        *,
        work_item_plans: Iterable[MonthlyWorkItemPlan] = (),
        concrete_unit: str = "m3",
        formwork_unit: str = "m2",
        rebar_unit: str = "ton",
    ) -> None:
        self.work_items = list(work_items)
        self.plan = plan or ProjectPlan()
        self.concrete_unit = concrete_unit
        self.formwork_unit = formwork_unit
        self.rebar_unit = rebar_unit
        self._items_by_id = {w.id: w for w in self.work_items}
        self._planned_concrete = self._concrete_plan(work_item_plans)
        self._targets: dict[str, float] = {}
        for t in monthly_targets:
            self._targets[t.key] = t.planned_man_hours
            if t.planned_concrete > 0:
                self._planned_concrete[t.key] = t.planned_concrete

    def _concrete_plan(self, plans: Iterable[MonthlyWorkItemPlan]) -> dict[str, float]:
        names: set[str] = set()
        for w in self.work_items:
            if w.unit == self.concrete_unit:
                names.add(ascii_fold(w.name))
                if w.category:
                    names.add(ascii_fold(w.category))
        planned: dict[str, float] = {}
        for p in plans:
            if ascii_fold(p.work_item_name) in names:
                planned[p.key] = planned.get(p.key, 0.0) + p.planned_quantity
        return planned

    def _unit_ids(self, unit: str) -> set[str]:
        return {w.id for w in self.work_items if w.unit == unit}

    def _frame(self, entries: Iterable[DailyEntry], start: date | None, end: date | None) -> pd.DataFrame:
        records = [
            (e.work_item_id, e.entry_date, float(e.man_hours or 0), float(e.quantity or 0))
            for e in entries
            if (start is None or e.entry_date >= start) and (end is None or e.entry_date <= end)
        ]
        df = pd.DataFrame.from_records(records, columns=_ENTRY_COLUMNS)
        if df.empty:
            return df.assign(**{name: pd.Series(dtype=float) for name in _MEASURES[2:]})
        df["earned"] = [
            earned_man_hours(q, self._items_by_id.get(i)) for i, q in zip(df["work_item_id"], df["quantity"])
        ]
        for name, unit in (
            ("concrete", self.concrete_unit),
            ("formwork", self.formwork_unit),
            ("rebar", self.rebar_unit),
        ):
            df[name] = df["quantity"].where(df["work_item_id"].isin(self._unit_ids(unit)), 0.0)
        return df

    def build(
        self,
        entries: Iterable[DailyEntry],
        *,
        start: date | None = None,
        end: date | None = None,
        highlight_month: YearMonth | None = None,
    ) -> AggregationReport:
        """Aggregate ``entries`` inside the inclusive ``[start, end]`` range.

        ``highlight_month`` selects the month of the highlight card; by default
        the month of the latest entry is used. Monthly targets and planned
        concrete outside the range's months are dropped.
        """
        df = self._frame(entries, start, end)
        target = daily_target(self.plan)
        lo = _month_key(start) if start else None
        hi = _month_key(end) if end else None

        daily = self._daily(df, target)
        weekly = self._weekly(daily, target)
        monthly = self._monthly(daily, lo, hi)
        cumulative = self._cumulative(daily, target)
        stats = self._work_item_stats(df)
        categories = self._categories(df)
        highlight = self._highlight(df, highlight_month)
        monthly_concrete = self._monthly_concrete(daily, lo, hi)

        summary = ReportSummary(
            total_planned_man_hours=self.plan.planned_man_hours,
            total_spent_man_hours=float(df["man_hours"].sum()),
            total_earned_man_hours=sum(s.earned_man_hours for s in stats),
            total_planned_concrete=self.plan.total_concrete,
            total_quantity=float(df["quantity"].sum()),
        )
        logger.debug(
            "aggregated entries=%d days=%d weeks=%d months=%d", len(df), len(daily), len(weekly), len(monthly)
        )
        return AggregationReport(
            daily=daily,
            weekly=weekly,
            monthly=monthly,
            cumulative=cumulative,
            work_items=stats,
            summary=summary,
            categories=categories,
            highlight=highlight,
            monthly_concrete=monthly_concrete,
        )

    @staticmethod
    def _daily(df: pd.DataFrame, target: float) -> list[PeriodBucket]:
        if df.empty:
            return []
        grouped = df.groupby("entry_date", sort=True)[_MEASURES].sum()
        return [
            PeriodBucket(
                key=day.isoformat(),
                man_hours=float(row.man_hours),
                quantity=float(row.quantity),
                target=target,
                earned_man_hours=float(row.earned),
                concrete=float(row.concrete),
                formwork=float(row.formwork),
                rebar=float(row.rebar),
            )
            for day, row in grouped.iterrows()
        ]

    @staticmethod
    def _weekly(daily: list[PeriodBucket], target: float) -> list[PeriodBucket]:
        weeks: dict[str, list[PeriodBucket]] = {}
        for bucket in daily:
            weeks.setdefault(week_key(date.fromisoformat(bucket.key)), []).append(bucket)
        return [_combine(k, days, target * len(days)) for k, days in sorted(weeks.items())]

    def _monthly(self, daily: list[PeriodBucket], lo: str | None, hi: str | None) -> list[PeriodBucket]:
        months: dict[str, list[PeriodBucket]] = {k: [] for k in self._targets if _in_range(k, lo, hi)}
        for bucket in daily:
            months.setdefault(bucket.key[:7], []).append(bucket)
        buckets: list[PeriodBucket] = []
        spent = earned = 0.0
        for key, days in sorted(months.items()):
            bucket = _combine(key, days, self._targets.get(key, 0.0))
            spent += bucket.man_hours
            earned += bucket.earned_man_hours
            buckets.append(replace(bucket, cumulative_man_hours=spent, cumulative_earned_man_hours=earned))
        return buckets

    def _monthly_concrete(self, daily: list[PeriodBucket], lo: str | None, hi: str | None) -> list[MonthlyConcrete]:
        actual: dict[str, float] = {}
        for bucket in daily:
            if bucket.concrete:
                actual[bucket.key[:7]] = actual.get(bucket.key[:7], 0.0) + bucket.concrete
        planned = {k: v for k, v in self._planned_concrete.items() if _in_range(k, lo, hi)}
        return [
            MonthlyConcrete(month=k, actual=actual.get(k, 0.0), planned=planned.get(k, 0.0))
            for k in sorted(actual.keys() | planned.keys())
        ]

    @staticmethod
    def _cumulative(daily: list[PeriodBucket], target: float) -> list[CumulativePoint]:
        points: list[CumulativePoint] = []
        man_hours = quantity = planned = 0.0
        for bucket in daily:
            man_hours += bucket.man_hours
            quantity += bucket.quantity
            planned += target
            points.append(
                CumulativePoint(
                    date=date.fromisoformat(bucket.key),
                    cumulative_man_hours=man_hours,
                    cumulative_quantity=quantity,
                    cumulative_target=planned,
                )
            )
        return points

    def _work_item_stats(self, df: pd.DataFrame) -> list[WorkItemStat]:
        if df.empty:
            totals = pd.DataFrame(columns=["man_hours", "quantity"])
        else:
            totals = df.groupby("work_item_id")[["man_hours", "quantity"]].sum()
        stats: list[WorkItemStat] = []
        for item in self.work_items:
            if item.id in totals.index:
                actual_mh = float(totals.at[item.id, "man_hours"])
                actual_qty = float(totals.at[item.id, "quantity"])
            else:
                actual_mh = actual_qty = 0.0
            earned = earned_man_hours(actual_qty, item)
            progress = actual_qty / item.target_quantity * 100.0 if item.target_quantity > 0 else 0.0
            stats.append(
                WorkItemStat(
                    budget_code=item.budget_code,
                    name=item.name,
                    unit=item.unit,
                    target_quantity=item.target_quantity,
                    target_man_hours=item.target_man_hours,
                    actual_quantity=actual_qty,
                    actual_man_hours=actual_mh,
                    earned_man_hours=earned,
                    progress_percent=progress,
                    efficiency_percent=efficiency_percent(earned, actual_mh),
                )
            )
        return stats

    def _categories(self, df: pd.DataFrame) -> list[CategoryStat]:
        category_of = {w.id: w.category for w in self.work_items if w.category}
        if not category_of:
            return []
        names = sorted(set(category_of.values()))
        if df.empty:
            totals = pd.DataFrame(index=pd.Index([], name="category"), columns=["man_hours", "earned", "concrete"])
        else:
            tagged = df.assign(category=df["work_item_id"].map(category_of)).dropna(subset=["category"])
            totals = tagged.groupby("category")[["man_hours", "earned", "concrete"]].sum()
        stats: list[CategoryStat] = []
        for name in names:
            if name in totals.index:
                spent = float(totals.at[name, "man_hours"])
                earned = float(totals.at[name, "earned"])
                poured = float(totals.at[name, "concrete"])
            else:
                spent = earned = poured = 0.0
            stats.append(
                CategoryStat(
                    category=name,
                    quantity=poured,
                    man_hours=spent,
                    earned_man_hours=earned,
                    unit_man_hours=spent / poured if poured > 0 else 0.0,
                    efficiency_percent=efficiency_percent(earned, spent),
                )
            )
        return stats

    @staticmethod
    def _highlight(df: pd.DataFrame, month: YearMonth | None) -> MonthHighlight | None:
        if month is None:
            if df.empty:
                return None
            latest = max(df["entry_date"])
            month = YearMonth(latest.year, latest.month)
        if df.empty:
            rows = df
        else:
            in_month = [(d.year, d.month) == (month.year, month.month) for d in df["entry_date"]]
            rows = df[in_month]
        spent = float(rows["man_hours"].sum())
        poured = float(rows["concrete"].sum())
        earned = float(rows["earned"].sum())
        return MonthHighlight(
            year=month.year,
            month=month.month,
            month_name=TURKISH_MONTH_NAMES[month.month - 1],
            spent_man_hours=spent,
            poured_concrete=poured,
            unit_man_hours=spent / poured if poured > 0 else 0.0,
            earned_man_hours=earned,
            efficiency_percent=efficiency_percent(earned, spent),
        )



def aggregate(
    entries: Iterable[DailyEntry],
    work_items: Sequence[WorkItem],
    plan: ProjectPlan | None = None,
    monthly_targets: Iterable[MonthlyTarget] = (),
    *,
    start: date | None = None,
    end: date | None = None,
    work_item_plans: Iterable[MonthlyWorkItemPlan] = (),
    concrete_unit: str = "m3",
) -> AggregationReport:
    """One-shot helper around :class:`AggregationEngine`."""
    engine = AggregationEngine(
        work_items, plan, monthly_targets, work_item_plans=work_item_plans, concrete_unit=concrete_unit
    )
    return engine.build(entries, start=start, end=end)
