from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from ..config.loader import default_column_aliases
from ..excel.reader import FIRST_SHEET, SpreadsheetDecodeError, read_sheet_table
from ..ingest.kinds import ROW_KINDS, WORK_ITEMS, WORK_SCHEDULE
from ..ingest.validator import validate_table, validate_work_schedule
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import AliasConfig, ProjectConfig, SourceConfig
from ..models.processing_result import RunResult, UploadOutcome, UploadStatus
from ..models.report import AggregationReport
from ..models.validation import ValidationError, ValidationErrorRecord, ValidationResult
from .aggregation import AggregationEngine
from .catalog import (
    monthly_targets_from_schedule,
    to_daily_entries,
    work_item_lookup,
    work_item_plans_from_schedule,
    work_items_from_rows,
)
from .progress import ProgressTracker
from .summary import format_validation_summary

"""Upload orchestration: decode -> validate -> commit policy -> report.

Each file is read by the spreadsheet adapter and validated independently; a
decode failure marks only that upload as FAILED and processing continues with
the next file. Field errors of every upload are buffered in one
``ErrorLogBuffer`` and flushed once per run.
"""

__all__ = [
    "ProcessingError",
    "ReportRun",
    "validate_upload_table",
    "process_upload",
    "process_uploads",
    "build_report",
]

logger = logging.getLogger(__name__)

KINDS = ROW_KINDS + (WORK_SCHEDULE,)


class ProcessingError(Exception):
    """Raised for orchestration misuse or a missing work-item catalog."""


@dataclass(frozen=True)
class ReportRun:
    report: AggregationReport
    run: RunResult


def validate_upload_table(
    kind: str,
    table: Sequence[Sequence[Any]],
    lookup: Mapping[str, str] | None = None,
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[Any]:
    """Dispatch a decoded sheet to the validator of ``kind``.

    Raises:
        ProcessingError: unknown kind, or a foreign-key kind without a lookup
    """
    if kind == WORK_SCHEDULE:
        return validate_work_schedule(table, aliases=aliases)
    if kind not in ROW_KINDS:
        raise ProcessingError(f"unknown import kind '{kind}' (expected one of {', '.join(KINDS)})")
    if kind != WORK_ITEMS and lookup is None:
        raise ProcessingError(f"import kind '{kind}' needs a work item catalog for budget code lookup")
    return validate_table(kind, table, lookup, aliases=aliases)


def _data_rows(table: Sequence[Sequence[Any]]) -> int:
    return max(len(table) - 1, 0)


def process_upload(
    path: Path,
    kind: str,
    *,
    sheet: str | None = None,
    lookup: Mapping[str, str] | None = None,
    aliases: AliasConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> UploadOutcome:
    """Decode and validate one upload; never raises for bad file contents."""
    started = time.perf_counter()
    sheet_label = sheet or FIRST_SHEET
    try:
        table = read_sheet_table(path, sheet)
    except SpreadsheetDecodeError as e:
        logger.error(f"{path.name}: {e}")
        if error_log is not None:
            error_log.append(
                ValidationErrorRecord.create(
                    path.name, sheet_label, ValidationError(row=-1, field="<FILE>", value=str(path), message=str(e))
                )
            )
        return UploadOutcome(
            path=path,
            kind=kind,
            sheet=sheet,
            status=UploadStatus.FAILED,
            error=str(e),
            elapsed_seconds=time.perf_counter() - started,
        )

    result = validate_upload_table(kind, table, lookup, aliases=aliases)
    status = UploadStatus.of(result)
    total = _data_rows(table)

    for warning in result.warnings:
        logger.warning(f"{path.name}: {warning}")
    if error_log is not None:
        error_log.extend(path.name, sheet_label, result.errors)
    summary = format_validation_summary(result, total)
    if summary:
        logger.info(f"{path.name} [{kind}]: {summary}")

    return UploadOutcome(
        path=path,
        kind=kind,
        sheet=sheet,
        status=status,
        result=result,
        total_rows=total,
        elapsed_seconds=time.perf_counter() - started,
    )


def process_uploads(
    sources: Sequence[SourceConfig],
    *,
    lookup: Mapping[str, str] | None = None,
    aliases: AliasConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> RunResult:
    """Process several uploads with a progress bar; flushes the error log once."""
    start_time = datetime.now(UTC)
    log = error_log if error_log is not None else ErrorLogBuffer()
    outcomes: list[UploadOutcome] = []

    with ProgressTracker(len(sources)) as progress:
        for source in sources:
            progress.start_file(source.path)
            outcome = process_upload(
                source.path,
                source.kind,
                sheet=source.sheet,
                lookup=lookup,
                aliases=aliases,
                error_log=log,
            )
            outcomes.append(outcome)
            progress.finish_file()
            progress.set_postfix(
                clean=sum(1 for o in outcomes if o.status is UploadStatus.CLEAN),
                failed=sum(1 for o in outcomes if o.status is UploadStatus.FAILED),
            )

    try:
        written = log.flush()
    except OSError as e:
        logger.warning(f"error log could not be written: {e}")
    else:
        if written is not None:
            logger.info(f"error log: {written}")

    end_time = datetime.now(UTC)
    return RunResult(
        outcomes=outcomes,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )


def build_report(
    config: ProjectConfig,
    *,
    start: date | None = None,
    end: date | None = None,
) -> ReportRun:
    """Validate every configured upload and aggregate the accepted rows.

    Rows accepted from uploads that need confirmation are included; only
    FAILED uploads contribute nothing. Explicit ``monthly_targets`` from the
    config override targets derived from the schedule for the same month. The
    schedule's work-item columns feed the planned concrete series.

    Raises:
        ProcessingError: the work-item catalog could not be read
    """
    start_time = datetime.now(UTC)
    aliases = default_column_aliases().extended(config.column_aliases)
    error_log = ErrorLogBuffer(config.error_log_dir)

    catalog = process_upload(
        config.work_items.path,
        WORK_ITEMS,
        sheet=config.work_items.sheet,
        aliases=aliases,
        error_log=error_log,
    )
    if catalog.status is UploadStatus.FAILED:
        error_log.flush()
        raise ProcessingError(f"work item catalog could not be read: {catalog.error}")
    items = work_items_from_rows(catalog.result.valid_items)
    lookup = work_item_lookup(items)

    sources = list(config.entries)
    if config.schedule is not None:
        sources.append(config.schedule)
    uploads = process_uploads(sources, lookup=lookup, aliases=aliases, error_log=error_log)

    entry_rows: list[Any] = []
    schedule_rows: list[Any] = []
    for outcome in uploads.outcomes:
        if outcome.kind == WORK_SCHEDULE:
            schedule_rows.extend(outcome.result.valid_items)
        else:
            entry_rows.extend(outcome.result.valid_items)

    targets = monthly_targets_from_schedule(schedule_rows) + list(config.monthly_targets)
    engine = AggregationEngine(
        items,
        config.project,
        targets,
        work_item_plans=work_item_plans_from_schedule(schedule_rows),
        concrete_unit=config.concrete_unit,
        formwork_unit=config.formwork_unit,
        rebar_unit=config.rebar_unit,
    )
    report = engine.build(to_daily_entries(entry_rows), start=start, end=end)

    end_time = datetime.now(UTC)
    run = RunResult(
        outcomes=[catalog, *uploads.outcomes],
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )
    return ReportRun(report=report, run=run)
