from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Any, NamedTuple

from .text import ascii_fold, is_blank

"""Date normalization for spreadsheet cells.

Rules are tried in order and the first match wins:

1. numeric spreadsheet serial (days since 1899-12-30)
2. ISO prefix ``YYYY-MM`` (month) or ``YYYY-MM-DD`` (day)
3. ``DD.MM.YYYY`` / ``DD/MM/YYYY`` / ``DD-MM-YYYY`` (day always first)
4. the same with a two digit year (00-50 -> 20xx, 51-99 -> 19xx)
5. month names in Turkish or English, either order ("Ocak 2025", "Jan-25")

Native ``date``/``datetime`` cells (what pandas hands back for date-formatted
cells) are accepted before rule 1. Anything else is :class:`Unparseable`; the
caller decides whether that is an error or a skipped row.
"""

__all__ = [
    "YearMonth",
    "Unparseable",
    "normalize_date",
    "normalize_period",
    "expand_two_digit_year",
    "month_from_name",
    "TURKISH_MONTH_NAMES",
    "SERIAL_UNIX_OFFSET",
    "MIN_YEAR",
    "MAX_YEAR",
]

# Day count between the spreadsheet epoch (1899-12-30) and 1970-01-01
SERIAL_UNIX_OFFSET = 25569
_UNIX_EPOCH = date(1970, 1, 1)

MIN_YEAR = 1950
MAX_YEAR = 2100

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?(?!\d)")
_DMY4_RE = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{4})$")
_DMY2_RE = re.compile(r"^(\d{1,2})[./-](\d{1,2})[./-](\d{2})$")
_NAME_YEAR_RE = re.compile(r"^([^\W\d_]+)\.?[\s-]+(\d{4}|\d{2})$")
_YEAR_NAME_RE = re.compile(r"^(\d{4}|\d{2})[\s-]+([^\W\d_]+)\.?$")

_TURKISH_MONTHS = (
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
)
_TURKISH_ABBR = (
    "Oca", "Şub", "Mar", "Nis", "May", "Haz",
    "Tem", "Ağu", "Eyl", "Eki", "Kas", "Ara",
)
_ENGLISH_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_ENGLISH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _build_month_table() -> dict[str, int]:
    table: dict[str, int] = {}
    for names in (_TURKISH_MONTHS, _TURKISH_ABBR, _ENGLISH_MONTHS, _ENGLISH_ABBR):
        for index, name in enumerate(names, start=1):
            table[ascii_fold(name)] = index
    table["sept"] = 9
    return table


_MONTHS = _build_month_table()

TURKISH_MONTH_NAMES = _TURKISH_MONTHS


class YearMonth(NamedTuple):
    """A calendar month without a day (schedule periods, ``2025-01``)."""
    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class Unparseable:
    """Tagged result for a cell that is not a recognizable date."""
    raw: Any
    reason: str = "unrecognized date format"


def expand_two_digit_year(yy: int) -> int:
    """Pivot a two digit year: 00-50 -> 2000-2050, 51-99 -> 1951-1999."""
    return 2000 + yy if yy <= 50 else 1900 + yy


def month_from_name(name: str) -> int | None:
    """Month number for a Turkish or English month name, full or abbreviated."""
    return _MONTHS.get(ascii_fold(name))


def _in_range(year: int) -> bool:
    return MIN_YEAR <= year <= MAX_YEAR


def _make_date(year: int, month: int, day: int, raw: Any) -> date | Unparseable:
    if not _in_range(year):
        return Unparseable(raw, f"year {year} out of range")
    try:
        return date(year, month, day)
    except ValueError:
        return Unparseable(raw, "invalid calendar date")


def _make_month(year: int, month: int, raw: Any) -> YearMonth | Unparseable:
    if not _in_range(year):
        return Unparseable(raw, f"year {year} out of range")
    if not 1 <= month <= 12:
        return Unparseable(raw, f"month {month} out of range")
    return YearMonth(year, month)


def _from_serial(serial: float, raw: Any) -> date | Unparseable:
    if math.isnan(serial) or math.isinf(serial):
        return Unparseable(raw, "not a finite serial")
    try:
        result = _UNIX_EPOCH + timedelta(days=math.floor(serial) - SERIAL_UNIX_OFFSET)
    except OverflowError:
        return Unparseable(raw, "serial out of range")
    if not _in_range(result.year):
        return Unparseable(raw, f"serial {serial:g} out of range")
    return result


def _from_month_name(text: str, raw: Any) -> YearMonth | Unparseable | None:
    m = _NAME_YEAR_RE.match(text)
    if m:
        name, year_text = m.group(1), m.group(2)
    else:
        m = _YEAR_NAME_RE.match(text)
        if not m:
            return None
        year_text, name = m.group(1), m.group(2)
    month = month_from_name(name)
    if month is None:
        return None
    year = int(year_text)
    if len(year_text) == 2:
        year = expand_two_digit_year(year)
    return _make_month(year, month, raw)


def normalize_date(value: Any) -> date | YearMonth | Unparseable:
    """Normalize one raw cell into a date, a month or :class:`Unparseable`."""
    if is_blank(value):
        return Unparseable(value, "empty")
    if isinstance(value, datetime):
        return _make_date(value.year, value.month, value.day, value)
    if isinstance(value, date):
        return _make_date(value.year, value.month, value.day, value)
    if isinstance(value, Real) and not isinstance(value, bool):
        return _from_serial(float(value), value)
    if not isinstance(value, str):
        return Unparseable(value, f"unsupported cell type {type(value).__name__}")

    text = value.strip()

    m = _ISO_RE.match(text)
    if m:
        year, month = int(m.group(1)), int(m.group(2))
        if m.group(3) is None:
            return _make_month(year, month, value)
        return _make_date(year, month, int(m.group(3)), value)

    m = _DMY4_RE.match(text)
    if m:
        return _make_date(int(m.group(3)), int(m.group(2)), int(m.group(1)), value)

    m = _DMY2_RE.match(text)
    if m:
        year = expand_two_digit_year(int(m.group(3)))
        return _make_date(year, int(m.group(2)), int(m.group(1)), value)

    named = _from_month_name(text, value)
    if named is not None:
        return named

    return Unparseable(value)


def normalize_period(value: Any) -> YearMonth | Unparseable:
    """Normalize a schedule period cell to its calendar month."""
    result = normalize_date(value)
    if isinstance(result, Unparseable) or isinstance(result, YearMonth):
        return result
    return YearMonth(result.year, result.month)
