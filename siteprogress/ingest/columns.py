from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from ..models.config_models import KindAliases
from ..models.raw_row import RawRow
from ..parsing.text import cell_text, compact_key, is_blank, turkish_fold

"""Column resolution: header cells -> canonical field slots.

Row-oriented imports resolve every field through its alias list, per row, so a
file with a mangled header can still yield partially valid rows. The work
schedule import is positional: column 0 is the period axis and every other
header cell is a dynamic work-item column, except the man-hour column.
"""

__all__ = [
    "ColumnResolver",
    "ScheduleColumn",
    "ScheduleHeader",
    "resolve_schedule_header",
    "is_man_hours_header",
]

HEADER_MISMATCH_MESSAGE = "Excel dosyasında beklenen sütunlar bulunamadı. Beklenen sütunlar: {columns}"
_BRACKET_SUFFIX = re.compile(r"\s*[\(\[][^\)\]]*[\)\]]\s*$")


class ColumnResolver:
    """Alias lookup for one import kind.

    Header keys are compared after Turkish case folding, so ``"İMALAT KALEMİ"``
    matches the alias ``"İmalat Kalemi"``.
    """

    def __init__(self, kind_aliases: KindAliases) -> None:
        self.kind_aliases = kind_aliases
        self._folded: dict[str, tuple[str, ...]] = {
            name: tuple(turkish_fold(a) for a in spec.aliases)
            for name, spec in kind_aliases.fields.items()
        }

    @staticmethod
    def _fold_keys(keys: Iterable[Any]) -> dict[str, Any]:
        folded: dict[str, Any] = {}
        for key in keys:
            if isinstance(key, str):
                folded.setdefault(turkish_fold(key), key)
        return folded

    def header_warning(self, header_keys: Iterable[Any]) -> str | None:
        """Warning text when no alias of any required field appears in the header."""
        present = self._fold_keys(header_keys)
        for name, aliases in self._folded.items():
            if not self.kind_aliases.fields[name].required:
                continue
            if any(a in present for a in aliases):
                return None
        return HEADER_MISMATCH_MESSAGE.format(
            columns=", ".join(self.kind_aliases.expected_columns)
        )

    def resolve(self, header_keys: Iterable[Any]) -> dict[str, Any]:
        """Map each field to the first matching header key (fields without a match are omitted)."""
        present = self._fold_keys(header_keys)
        resolved: dict[str, Any] = {}
        for name, aliases in self._folded.items():
            for alias in aliases:
                if alias in present:
                    resolved[name] = present[alias]
                    break
        return resolved

    def lookup(self, row: RawRow, field: str) -> Any:
        """Raw value of ``field`` in ``row``.

        Aliases are tried in order and the first one holding a non-blank value
        wins. When every matching column is blank the first match's value is
        returned; ``None`` when no alias column exists in the row.
        """
        present = self._fold_keys(row.values.keys())
        fallback: Any = None
        found = False
        for alias in self._folded[field]:
            key = present.get(alias)
            if key is None:
                continue
            value = row.values[key]
            if not is_blank(value):
                return value
            if not found:
                fallback, found = value, True
        return fallback


@dataclass(frozen=True)
class ScheduleColumn:
    index: int
    label: str


@dataclass(frozen=True)
class ScheduleHeader:
    """Resolved work-schedule header.

    ``work_items`` keeps sheet column order. ``extra_man_hours`` lists further
    man-hour columns that were recognized but not used.
    """
    period_index: int
    work_items: list[ScheduleColumn]
    man_hours: ScheduleColumn | None
    extra_man_hours: list[ScheduleColumn]


def is_man_hours_header(label: str, aliases: Sequence[str]) -> bool:
    """True when ``label`` is a man-hour alias, optionally followed by a bracketed note.

    "Adam Saat" and "adam-saat (A-S)" match; "Kalıp Adam Saat" is a work item.
    """
    key = compact_key(_BRACKET_SUFFIX.sub("", label))
    if not key:
        return False
    return any(compact_key(a) == key for a in aliases)


def resolve_schedule_header(header: Sequence[Any], man_hours_aliases: Sequence[str]) -> ScheduleHeader:
    work_items: list[ScheduleColumn] = []
    man_hours: ScheduleColumn | None = None
    extra: list[ScheduleColumn] = []
    for index, cell in enumerate(header):
        if index == 0:
            continue
        label = cell_text(cell)
        if not label:
            continue
        column = ScheduleColumn(index=index, label=label)
        if is_man_hours_header(label, man_hours_aliases):
            if man_hours is None:
                man_hours = column
            else:
                extra.append(column)
            continue
        work_items.append(column)
    return ScheduleHeader(period_index=0, work_items=work_items, man_hours=man_hours, extra_man_hours=extra)
