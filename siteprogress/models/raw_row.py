from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..parsing.text import cell_text, is_blank

"""RawRow model: one spreadsheet data row before validation.

A RawRow lives only for a single validation pass. ``row_number`` is the row a
user sees in their spreadsheet editor: the header is row 1, so the first data
row is row 2.
"""

__all__ = [
    "RawRow",
    "HEADER_ROW_NUMBER",
    "rows_from_records",
    "rows_from_table",
]

HEADER_ROW_NUMBER = 1


@dataclass(frozen=True)
class RawRow:
    """Logical representation of one data row keyed by header text or index."""
    row_number: int  # 1-based sheet row, header = 1
    values: Mapping[Any, Any]  # column key -> raw cell value

    def is_empty(self) -> bool:
        return all(is_blank(v) for v in self.values.values())


def rows_from_records(records: Sequence[Mapping[Any, Any] | RawRow]) -> list[RawRow]:
    """Wrap header-keyed dicts (one per data row, in sheet order) as RawRows.

    Plain mappings are numbered ``index + 2``; RawRow instances keep their own
    numbers so callers that skipped blank lines still report the sheet row.
    """
    rows: list[RawRow] = []
    for index, record in enumerate(records):
        if isinstance(record, RawRow):
            rows.append(record)
        else:
            rows.append(RawRow(row_number=index + HEADER_ROW_NUMBER + 1, values=record))
    return rows


def rows_from_table(table: Sequence[Sequence[Any]]) -> tuple[list[Any], list[RawRow]]:
    """Split a decoded sheet (header row first) into header and keyed RawRows.

    Fully blank rows are dropped but numbering is preserved. Cells under an
    empty header cell are keyed by their column index.
    """
    if not table:
        return [], []
    header = list(table[0])
    keys: list[Any] = []
    for index, cell in enumerate(header):
        text = cell_text(cell)
        keys.append(text if text else index)

    rows: list[RawRow] = []
    for offset, cells in enumerate(table[1:], start=HEADER_ROW_NUMBER + 1):
        values: dict[Any, Any] = {}
        for index, cell in enumerate(cells):
            key = keys[index] if index < len(keys) else index
            if key in values and not is_blank(values[key]):
                continue
            values[key] = cell
        row = RawRow(row_number=offset, values=values)
        if not row.is_empty():
            rows.append(row)
    return header, rows
