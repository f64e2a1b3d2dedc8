from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

"""Locale-ambiguous number parsing for spreadsheet cells.

Sheets edited with a Turkish locale write ``1.234,50`` while round-tripped or
English files write ``1,234.50``. The rules below pick the decimal separator
from the string itself instead of from a configured locale:

- both ``,`` and ``.`` present: whichever occurs last is the decimal separator,
  the other one is stripped
- only commas: a single comma followed by at most two digits is decimal,
  otherwise every comma is a thousands separator
- only a dot: handed to the float parser unchanged (``"24.133"`` -> 24.133)

Failures come back as :class:`ParseFailure` values; nothing here raises.
"""

__all__ = [
    "ParseFailure",
    "parse_number",
    "normalize_separators",
]

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParseFailure:
    """Tagged result for a cell that is not a number."""
    raw: Any
    reason: str = "not a number"


def normalize_separators(text: str) -> str:
    """Rewrite ``text`` so that ``.`` is the only (decimal) separator.

    >>> normalize_separators("24.133,50")
    '24133.50'
    >>> normalize_separators("1,234,567")
    '1234567'
    >>> normalize_separators("24,5")
    '24.5'
    """
    s = _WS_RE.sub("", text)
    has_comma = "," in s
    has_dot = "." in s
    if has_comma and has_dot:
        if s.rfind(",") > s.rfind("."):
            return s.replace(".", "").replace(",", ".")
        return s.replace(",", "")
    if has_comma:
        if s.count(",") == 1 and len(s) - s.index(",") - 1 <= 2:
            return s.replace(",", ".")
        return s.replace(",", "")
    return s


def parse_number(value: Any) -> float | ParseFailure:
    """Parse one cell into a float.

    Numeric cells pass through. Booleans, NaN and infinities are failures so a
    stray ``TRUE`` or ``#DIV/0!`` never becomes a data point.
    """
    if isinstance(value, bool):
        return ParseFailure(value, "boolean is not a number")
    if isinstance(value, (int, float)):
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return ParseFailure(value, "not a finite number")
        return number
    if not isinstance(value, str):
        # numpy scalars and Decimal expose __float__
        try:
            number = float(value)
        except (TypeError, ValueError):
            return ParseFailure(value)
        if math.isnan(number) or math.isinf(number):
            return ParseFailure(value, "not a finite number")
        return number

    text = normalize_separators(value)
    if not _NUMBER_RE.match(text):
        return ParseFailure(value)
    return float(text)
