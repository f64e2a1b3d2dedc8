from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from ..config.loader import default_column_aliases
from ..models.config_models import AliasConfig
from ..models.raw_row import RawRow, rows_from_records, rows_from_table
from ..models.records import (
    DailyEntryRow,
    ManHoursRow,
    ProgressEntryRow,
    WorkItemRow,
    WorkScheduleRow,
)
from ..models.validation import ValidationError, ValidationResult
from ..parsing.dates import Unparseable, YearMonth, normalize_date, normalize_period
from ..parsing.numbers import ParseFailure, parse_number
from ..parsing.text import cell_text, is_blank
from .columns import ColumnResolver, resolve_schedule_header
from .kinds import (
    DAILY_ENTRIES,
    MAN_HOURS,
    PROGRESS,
    WORK_ITEMS,
    ImportKind,
    build_import_kinds,
    default_import_kinds,
)
from .result import ValidationResultBuilder

"""Canonical row validator shared by every spreadsheet import.

All imports run through :func:`validate_rows`, parameterized by an
:class:`~siteprogress.ingest.kinds.ImportKind`. For each data row the outcome
is exactly one of:

- a typed record appended to ``valid_items``
- one or more field errors (row dropped, batch continues)
- a warning (row dropped, not a failure), e.g. a zero-value "nothing happened" row

The work schedule import is column-oriented and has its own entry point,
:func:`validate_work_schedule`.

Everything is a pure function of (rows, lookup): no I/O, no persistence, and
no decision on whether a partially valid upload may be committed.
"""

__all__ = [
    "RowReader",
    "EMPTY_FILE_MESSAGE",
    "validate_rows",
    "validate_work_items",
    "validate_progress_entries",
    "validate_man_hours",
    "validate_daily_entries",
    "validate_table",
    "validate_work_schedule",
]

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "Excel dosyası boş veya okunamadı."
MAX_LISTED_CODES = 5


class RowReader:
    """Typed access to one row's cells, collecting field errors as it goes.

    Getter methods never raise; on a bad cell they record a
    :class:`ValidationError` and return None. ``failed`` tells the record
    builder whether to give up on the row.
    """

    def __init__(self, row: RawRow, resolver: ColumnResolver) -> None:
        self.row = row
        self.resolver = resolver
        self.errors: list[ValidationError] = []

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    def label(self, field: str) -> str:
        return self.resolver.kind_aliases.field(field).label

    def raw(self, field: str) -> Any:
        return self.resolver.lookup(self.row, field)

    def error(self, field: str, value: Any, message: str) -> None:
        self.errors.append(
            ValidationError(row=self.row.row_number, field=self.label(field), value=value, message=message)
        )

    def text(self, field: str, *, required: bool = True) -> str | None:
        raw = self.raw(field)
        value = cell_text(raw)
        if not value:
            if required:
                self.error(field, raw if raw is not None else "", f"{self.label(field)} boş olamaz")
                return None
            return ""
        return value

    def number(self, field: str) -> float | None:
        """Non-negative number; a blank cell counts as 0."""
        raw = self.raw(field)
        if is_blank(raw):
            return 0.0
        result = parse_number(raw)
        if isinstance(result, ParseFailure):
            self.error(field, raw, f'"{cell_text(raw)}" geçerli bir sayı değil')
            return None
        if result < 0:
            self.error(field, raw, f"{self.label(field)} değeri 0'dan küçük olamaz")
            return None
        return result

    def date(self, field: str) -> date | None:
        raw = self.raw(field)
        if is_blank(raw):
            self.error(field, raw if raw is not None else "", f"{self.label(field)} boş olamaz")
            return None
        result = normalize_date(raw)
        if isinstance(result, Unparseable):
            self.error(
                field,
                raw,
                f'"{cell_text(raw)}" geçerli bir tarih formatı değil. '
                "Beklenen format: GG.AA.YYYY veya YYYY-MM-DD",
            )
            return None
        if isinstance(result, YearMonth):
            self.error(field, raw, f'"{cell_text(raw)}" gün içermiyor, günlük kayıt için tam tarih gerekli')
            return None
        return result


def _unknown_code_message(code: str, known_codes: Sequence[str]) -> str:
    listed = ", ".join(known_codes[:MAX_LISTED_CODES])
    more = "..." if len(known_codes) > MAX_LISTED_CODES else ""
    return f'"{code}" bütçe kodu bu projede tanımlı değil. Mevcut kodlar: {listed}{more}'


def _resolve_foreign_key(
    reader: RowReader,
    field: str,
    lookup: Mapping[str, str],
    known_codes: Sequence[str],
) -> str | None:
    raw = reader.raw(field)
    code = cell_text(raw)
    if not code:
        reader.error(field, raw if raw is not None else "", f"{reader.label(field)} boş olamaz")
        return None
    work_item_id = lookup.get(code)
    if work_item_id is None:
        reader.error(field, code, _unknown_code_message(code, known_codes))
        return None
    return work_item_id


def validate_rows(
    kind: ImportKind,
    rows: Sequence[Mapping[Any, Any] | RawRow],
    lookup: Mapping[str, str] | None = None,
    *,
    header: Sequence[Any] | None = None,
) -> ValidationResult[Any]:
    """Validate one upload of a row-oriented import kind.

    Parameters
    ----------
    kind: Import-kind descriptor
    rows: Data rows in sheet order (header-keyed dicts or RawRows)
    lookup: Project-scoped budget code -> work item id map (foreign-key kinds)
    header: Header cells; defaults to the keys of the first row
    """
    builder: ValidationResultBuilder[Any] = ValidationResultBuilder()
    raw_rows = rows_from_records(rows)
    if not raw_rows:
        builder.warn(EMPTY_FILE_MESSAGE)
        return builder.build()

    resolver = ColumnResolver(kind.aliases)
    header_keys = list(header) if header is not None else list(raw_rows[0].values.keys())
    mismatch = resolver.header_warning(header_keys)
    if mismatch:
        builder.warn(mismatch)
    logger.debug("kind=%s resolved columns=%s", kind.key, resolver.resolve(header_keys))

    lookup = lookup or {}
    known_codes = sorted(lookup)
    seen: set[Any] = set()

    for row in raw_rows:
        reader = RowReader(row, resolver)
        work_item_id = None
        if kind.foreign_key:
            work_item_id = _resolve_foreign_key(reader, kind.foreign_key, lookup, known_codes)
            if reader.failed:
                builder.extend_errors(reader.errors)
                continue

        record = kind.build(reader, work_item_id)
        if reader.failed or record is None:
            builder.extend_errors(reader.errors)
            continue

        if kind.zero_fields and all(getattr(record, f) == 0 for f in kind.zero_fields):
            builder.warn(kind.zero_message.format(row=row.row_number))
            continue

        if kind.unique_field:
            value = getattr(record, kind.unique_field)
            if value in seen:
                builder.warn(kind.duplicate_message.format(row=row.row_number, value=value))
            seen.add(value)

        builder.add_item(record)

    result = builder.build()
    logger.debug(
        "kind=%s rows=%d valid=%d errors=%d warnings=%d",
        kind.key, len(raw_rows), len(result.valid_items), len(result.errors), len(result.warnings),
    )
    return result


def _kind(name: str, aliases: AliasConfig | None) -> ImportKind:
    if aliases is None:
        return default_import_kinds()[name]
    return build_import_kinds(aliases)[name]


def validate_work_items(
    rows: Sequence[Mapping[Any, Any] | RawRow],
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[WorkItemRow]:
    """Work-item catalog upload. Repeated budget codes warn but both rows are kept."""
    return validate_rows(_kind(WORK_ITEMS, aliases), rows)


def validate_progress_entries(
    rows: Sequence[Mapping[Any, Any] | RawRow],
    lookup: Mapping[str, str],
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[ProgressEntryRow]:
    """Daily quantity upload; zero quantities are skipped with a warning."""
    return validate_rows(_kind(PROGRESS, aliases), rows, lookup)


def validate_man_hours(
    rows: Sequence[Mapping[Any, Any] | RawRow],
    lookup: Mapping[str, str],
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[ManHoursRow]:
    return validate_rows(_kind(MAN_HOURS, aliases), rows, lookup)


def validate_daily_entries(
    rows: Sequence[Mapping[Any, Any] | RawRow],
    lookup: Mapping[str, str],
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[DailyEntryRow]:
    """Combined man-hours + quantity upload; skipped only when both are zero."""
    return validate_rows(_kind(DAILY_ENTRIES, aliases), rows, lookup)


def validate_table(
    kind_name: str,
    table: Sequence[Sequence[Any]],
    lookup: Mapping[str, str] | None = None,
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[Any]:
    """Validate a decoded sheet (header row first) of a row-oriented kind."""
    header, rows = rows_from_table(table)
    header_keys = [cell_text(c) or index for index, c in enumerate(header)]
    return validate_rows(_kind(kind_name, aliases), rows, lookup, header=header_keys)


def validate_work_schedule(
    table: Sequence[Sequence[Any]],
    *,
    aliases: AliasConfig | None = None,
) -> ValidationResult[WorkScheduleRow]:
    """Validate a monthly work schedule (iş programı) sheet.

    Layout: column 0 holds the period (serial date, ISO month, month name);
    every other header cell names a work item, except a man-hour column
    ("Adam Saat") which carries the monthly man-hour target. Rows whose period
    cell cannot be read, or is blank next to filled values, are skipped and
    reported in one batched warning.
    """
    config = aliases or default_column_aliases()

    builder: ValidationResultBuilder[WorkScheduleRow] = ValidationResultBuilder()
    if not table or len(table) < 2:
        builder.warn("Excel dosyası boş veya yeterli veri içermiyor.")
        return builder.build()

    header = list(table[0] or [])
    period_label = config.schedule_period_label
    if len(header) < 2:
        builder.add_error(
            1, "Başlık", [cell_text(c) for c in header],
            f"İş programı en az 2 sütun içermeli ({period_label} + İmalat Kalemi)",
        )
        return builder.build()

    resolved = resolve_schedule_header(header, config.schedule_man_hours_aliases)
    if not resolved.work_items and resolved.man_hours is None:
        builder.add_error(
            1, "Başlık", [cell_text(c) for c in header],
            "En az bir imalat kalemi başlığı bulunamadı.",
        )
        return builder.build()
    for extra in resolved.extra_man_hours:
        builder.warn(
            f'"{extra.label}" sütunu da adam-saat sütunu olarak tanındı; '
            f'yalnızca "{resolved.man_hours.label}" kullanılıyor.'
        )

    columns = [(c, False) for c in resolved.work_items]
    if resolved.man_hours is not None:
        columns.append((resolved.man_hours, True))
    columns.sort(key=lambda pair: pair[0].index)

    skipped_periods: list[int] = []
    for row_index in range(1, len(table)):
        cells = list(table[row_index] or [])
        row_number = row_index + 1
        if not cells or all(is_blank(c) for c in cells):
            continue
        period_raw = cells[resolved.period_index] if cells else None
        if is_blank(period_raw):
            if any(column.index < len(cells) and not is_blank(cells[column.index]) for column, _ in columns):
                skipped_periods.append(row_number)
            continue
        period = normalize_period(period_raw)
        if isinstance(period, Unparseable):
            skipped_periods.append(row_number)
            continue

        for column, is_man_hours in columns:
            raw = cells[column.index] if column.index < len(cells) else None
            if is_blank(raw):
                continue
            value = parse_number(raw)
            if isinstance(value, ParseFailure):
                builder.add_error(row_number, column.label, raw, f'"{cell_text(raw)}" geçerli bir sayı değil')
                continue
            if value < 0:
                builder.add_error(row_number, column.label, raw, "Planlanan miktar negatif olamaz")
                continue
            builder.add_item(
                WorkScheduleRow(
                    work_item_name=column.label,
                    year=period.year,
                    month=period.month,
                    planned_quantity=value,
                    man_hours_column=is_man_hours,
                )
            )

    if skipped_periods:
        listed = ", ".join(str(n) for n in skipped_periods)
        builder.warn(
            f"{len(skipped_periods)} satırda {period_label} sütunu tarih olarak okunamadı, "
            f"satırlar atlandı: {listed}"
        )
    if builder.item_count == 0 and builder.error_count == 0:
        builder.warn("İş programında geçerli veri bulunamadı.")
    return builder.build()
