from __future__ import annotations

import re
from typing import Any

import pandas as pd

"""Locale-aware text helpers for header and month-name matching.

Spreadsheet headers arrive in Turkish ("Bütçe Kodu", "İmalat Kalemi") as well as
machine keys ("budgetCode"). Python's ``str.lower()`` folds ``I`` to ``i`` and
``İ`` to ``i̇`` (i + combining dot), which is wrong for Turkish text, so every
comparison goes through :func:`turkish_fold` instead.
"""

__all__ = [
    "turkish_fold",
    "ascii_fold",
    "compact_key",
    "is_blank",
    "cell_text",
]

# Turkish upper -> lower pairs that differ from the default Unicode mapping
_TURKISH_LOWER = str.maketrans({"I": "ı", "İ": "i"})

# Diacritics flattened for lenient month-name matching ("Subat" == "Şubat")
_ASCII_MAP = str.maketrans({
    "ı": "i",
    "ş": "s",
    "ğ": "g",
    "ü": "u",
    "ö": "o",
    "ç": "c",
    "â": "a",
    "î": "i",
    "û": "u",
})

_WS_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^0-9a-z]+")


def turkish_fold(text: str) -> str:
    """Case-fold ``text`` with Turkish rules and collapse inner whitespace.

    >>> turkish_fold("  İMALAT   Kalemi ")
    'imalat kalemi'
    >>> turkish_fold("BIRIM")
    'bırım'
    """
    folded = text.translate(_TURKISH_LOWER).lower()
    return _WS_RE.sub(" ", folded).strip()


def ascii_fold(text: str) -> str:
    """Turkish fold followed by diacritic flattening."""
    return turkish_fold(text).translate(_ASCII_MAP)


def compact_key(text: str) -> str:
    """Turkish fold with every non-alphanumeric character removed.

    Used for alias families where punctuation varies ("Adam-Saat", "adam saat").
    """
    return _NON_ALNUM_RE.sub("", ascii_fold(text))


def is_blank(value: Any) -> bool:
    """True for absent cells: None, NaN, NaT and whitespace-only strings."""
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """Trimmed string form of a cell; blank cells become ``""``.

    Whole floats read back from spreadsheets ("101.0") are rendered as ints so
    numeric budget codes survive the round trip.
    """
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
