from __future__ import annotations

import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet decoding adapter (pandas / openpyxl).

Turns an uploaded ``.xlsx`` (or ``.csv``) into an ordered list of rows of raw
cell values, header row first. This is the only place a whole upload can
fail; everything after it works row by row.

Cells are handed over close to how the workbook stores them: numbers stay
numbers, date-formatted cells become ``datetime``, text stays text (pandas'
default "NA"/"null" string conversion is switched off) and empty cells become
``None``.
"""

__all__ = [
    "SpreadsheetDecodeError",
    "read_sheet_table",
    "FIRST_SHEET",
]

logger = logging.getLogger(__name__)

FIRST_SHEET = "<FIRST>"
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


class SpreadsheetDecodeError(Exception):
    """Raised when an upload cannot be decoded into rows at all."""


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, datetime):
        return value
    if hasattr(value, "item"):  # numpy scalar
        value = value.item()
        if isinstance(value, float) and value != value:
            return None
    return value


def _frame_to_table(df: pd.DataFrame) -> list[list[Any]]:
    table: list[list[Any]] = []
    for raw in df.itertuples(index=False, name=None):
        table.append([_cell(v) for v in raw])
    # trailing fully-empty rows carry no row numbers worth reporting
    while table and all(v is None or (isinstance(v, str) and not v.strip()) for v in table[-1]):
        table.pop()
    return table


def read_sheet_table(path: Path, sheet: str | None = None) -> list[list[Any]]:
    """Read one sheet as rows of raw cell values.

    Parameters
    ----------
    path: Spreadsheet path (``.xlsx``/``.xlsm``, or ``.csv`` read as text)
    sheet: Sheet name; None selects the first sheet

    Raises
    ------
    SpreadsheetDecodeError: file missing, not a spreadsheet, or unknown sheet
    """
    path = Path(path)
    if not path.exists():
        raise SpreadsheetDecodeError(f"file not found: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, skip_blank_lines=False)
        elif suffix in _EXCEL_SUFFIXES:
            with pd.ExcelFile(path, engine="openpyxl") as xls:
                names = [str(n) for n in xls.sheet_names]
                if sheet is not None and sheet not in names:
                    raise SpreadsheetDecodeError(f"sheet '{sheet}' not found in {path.name} (sheets: {names})")
                target = sheet if sheet is not None else xls.sheet_names[0]
                df = xls.parse(target, header=None, keep_default_na=False, na_values=[""])
        else:
            raise SpreadsheetDecodeError(f"unsupported file type '{suffix}': {path.name}")
    except SpreadsheetDecodeError:
        raise
    except pd.errors.EmptyDataError:
        return []
    except (ValueError, OSError, KeyError, zipfile.BadZipFile) as e:
        raise SpreadsheetDecodeError(f"cannot read {path.name}: {e}") from e

    table = _frame_to_table(df)
    logger.debug("read %s sheet=%s rows=%d", path.name, sheet or FIRST_SHEET, len(table))
    return table
