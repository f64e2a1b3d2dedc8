from __future__ import annotations

import math

import pytest

from siteprogress.parsing.text import ascii_fold, cell_text, compact_key, is_blank, turkish_fold


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("İMALAT KALEMİ", "imalat kalemi"),
        ("BIRIM", "bırım"),
        ("  Bütçe   Kodu ", "bütçe kodu"),
        ("budgetCode", "budgetcode"),
    ],
)
def test_turkish_fold(raw, expected):
    assert turkish_fold(raw) == expected


def test_turkish_fold_differs_from_str_lower_for_dotted_capital_i():
    assert turkish_fold("İ") == "i"
    assert "İ".lower() != "i"


def test_ascii_fold_flattens_diacritics():
    assert ascii_fold("Şubat") == "subat"
    assert ascii_fold("AĞUSTOS") == "agustos"
    assert ascii_fold("Kasım") == "kasim"


def test_compact_key_drops_punctuation():
    assert compact_key("Adam-Saat") == "adamsaat"
    assert compact_key("ADAM SAAT (A/S)") == "adamsaatas"
    assert compact_key("---") == ""


@pytest.mark.parametrize("value", [None, "", "   ", math.nan, float("nan")])
def test_is_blank_true(value):
    assert is_blank(value) is True


@pytest.mark.parametrize("value", [0, 0.0, "0", "x", False])
def test_is_blank_false(value):
    assert is_blank(value) is False


def test_cell_text_renders_whole_floats_as_ints():
    assert cell_text(101.0) == "101"
    assert cell_text(12.5) == "12.5"
    assert cell_text("  BK-001 ") == "BK-001"
    assert cell_text(None) == ""
