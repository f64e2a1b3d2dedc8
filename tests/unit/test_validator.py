from __future__ import annotations

import json
from datetime import date

import pytest

from siteprogress.ingest.validator import (
    EMPTY_FILE_MESSAGE,
    validate_daily_entries,
    validate_man_hours,
    validate_progress_entries,
    validate_table,
    validate_work_items,
)
from siteprogress.models.raw_row import RawRow
from siteprogress.models.records import DailyEntryRow, ManHoursRow, ProgressEntryRow, WorkItemRow


def progress_row(day="01.06.2024", code="BK-001", qty="24,5", **extra):
    row = {"Tarih": day, "Bütçe Kodu": code, "Miktar": qty}
    row.update(extra)
    return row


class TestProgressEntries:
    def test_valid_row_is_normalized(self, lookup):
        result = validate_progress_entries([progress_row()], lookup)
        assert result.valid_items == [ProgressEntryRow("wi-1", date(2024, 6, 1), 24.5)]
        assert result.errors == []
        assert result.warnings == []
        assert result.is_clean

    def test_unknown_budget_code_gives_exactly_one_error(self, lookup):
        result = validate_progress_entries([progress_row(code="BK-999")], lookup)
        assert result.valid_items == []
        assert len(result.errors) == 1
        err = result.errors[0]
        assert err.row == 2
        assert err.field == "Bütçe Kodu"
        assert err.value == "BK-999"
        assert err.message == (
            '"BK-999" bütçe kodu bu projede tanımlı değil. '
            "Mevcut kodlar: BK-001, BK-002, BK-003, BK-004, BK-005..."
        )

    def test_unknown_budget_code_short_circuits_other_fields(self, lookup):
        result = validate_progress_entries([progress_row(day="yarın", code="BK-999", qty="abc")], lookup)
        assert len(result.errors) == 1
        assert result.errors[0].field == "Bütçe Kodu"

    def test_known_codes_listed_without_ellipsis_when_few(self):
        result = validate_progress_entries([progress_row(code="X")], {"B": "2", "A": "1"})
        assert result.errors[0].message.endswith("Mevcut kodlar: A, B")

    def test_blank_budget_code(self, lookup):
        result = validate_progress_entries([progress_row(code="  ")], lookup)
        assert [e.message for e in result.errors] == ["Bütçe Kodu boş olamaz"]

    def test_optional_columns_alone_still_warn_about_the_header(self, lookup):
        result = validate_progress_entries([{"Oranlar": "1/2", "Foo": 3}], lookup)
        assert result.warnings[0].startswith("Excel dosyasında beklenen sütunlar bulunamadı.")
        assert result.valid_items == []

    def test_zero_quantity_is_a_warning(self, lookup):
        result = validate_progress_entries([progress_row(qty="0")], lookup)
        assert result.valid_items == []
        assert result.errors == []
        assert result.warnings == ["Satır 2: Miktar değeri sıfır, kayıt yoksayılıyor."]

    def test_blank_quantity_counts_as_zero(self, lookup):
        result = validate_progress_entries([progress_row(qty=None)], lookup)
        assert result.errors == []
        assert len(result.warnings) == 1

    def test_negative_quantity_is_an_error(self, lookup):
        result = validate_progress_entries([progress_row(qty="-5")], lookup)
        assert [e.message for e in result.errors] == ["Miktar değeri 0'dan küçük olamaz"]

    def test_non_numeric_quantity(self, lookup):
        result = validate_progress_entries([progress_row(qty="abc")], lookup)
        assert result.errors[0].message == '"abc" geçerli bir sayı değil'
        assert result.errors[0].value == "abc"

    def test_bad_date(self, lookup):
        result = validate_progress_entries([progress_row(day="yarın")], lookup)
        assert len(result.errors) == 1
        assert result.errors[0].field == "Tarih"
        assert result.errors[0].message.startswith('"yarın" geçerli bir tarih formatı değil')

    def test_blank_date(self, lookup):
        result = validate_progress_entries([progress_row(day="")], lookup)
        assert [e.message for e in result.errors] == ["Tarih boş olamaz"]

    def test_month_only_date_is_rejected_for_daily_rows(self, lookup):
        result = validate_progress_entries([progress_row(day="Ocak 2025")], lookup)
        assert len(result.errors) == 1
        assert result.errors[0].field == "Tarih"

    def test_all_field_errors_of_a_row_are_reported(self, lookup):
        result = validate_progress_entries([progress_row(day="yarın", qty="abc")], lookup)
        assert [e.field for e in result.errors] == ["Tarih", "Miktar"]
        assert result.error_rows == [2]

    def test_english_and_machine_headers(self, lookup):
        rows = [
            {"Date": "2024-06-01", "Budget Code": "BK-002", "Quantity": 3},
            {"entryDate": 45292, "budgetCode": "BK-003", "quantity": "1.234,5"},
        ]
        result = validate_progress_entries(rows, lookup)
        assert result.errors == []
        assert [r.work_item_id for r in result.valid_items] == ["wi-2", "wi-3"]
        assert result.valid_items[1].entry_date == date(2024, 1, 1)
        assert result.valid_items[1].quantity == pytest.approx(1234.5)

    def test_uppercase_turkish_headers(self, lookup):
        rows = [{"TARİH": "01.06.2024", "BÜTÇE KODU": "BK-001", "MİKTAR": 7}]
        result = validate_progress_entries(rows, lookup)
        assert result.warnings == []
        assert len(result.valid_items) == 1

    def test_first_alias_with_a_value_wins(self, lookup):
        rows = [{"Tarih": "01.06.2024", "Bütçe Kodu": "BK-001", "Miktar": None, "quantity": 7}]
        result = validate_progress_entries(rows, lookup)
        assert result.valid_items[0].quantity == 7.0

    def test_optional_columns(self, lookup):
        rows = [progress_row(Oranlar="%50", **{"İmalat Bölgesi": "A Blok"})]
        item = validate_progress_entries(rows, lookup).valid_items[0]
        assert item.ratio == "%50"
        assert item.region == "A Blok"

    def test_header_mismatch_warns_but_does_not_abort(self, lookup):
        result = validate_progress_entries([{"foo": 1, "bar": 2}], lookup)
        assert result.warnings[0].startswith("Excel dosyasında beklenen sütunlar bulunamadı.")
        assert "Tarih, Bütçe Kodu, Miktar" in result.warnings[0]
        assert [e.message for e in result.errors] == ["Bütçe Kodu boş olamaz"]

    def test_empty_upload_warns(self, lookup):
        result = validate_progress_entries([], lookup)
        assert result.warnings == [EMPTY_FILE_MESSAGE]
        assert result.valid_items == [] and result.errors == []

    def test_row_numbers_follow_sheet_order(self, lookup):
        rows = [progress_row(), progress_row(qty="x"), progress_row(code="nope")]
        result = validate_progress_entries(rows, lookup)
        assert result.error_rows == [3, 4]

    def test_every_row_has_exactly_one_outcome(self, lookup):
        rows = [
            progress_row(),
            progress_row(qty="0"),
            progress_row(code="BK-404"),
            progress_row(day="??", qty="-1"),
            progress_row(qty="5"),
        ]
        result = validate_progress_entries(rows, lookup)
        warned_rows = {int(w.split(":")[0].removeprefix("Satır ")) for w in result.warnings}
        assert len(result.valid_items) == 2
        assert warned_rows == {3}
        assert result.error_rows == [4, 5]
        assert len(result.valid_items) + len(warned_rows) + len(result.error_rows) == len(rows)

    def test_idempotent(self, lookup):
        rows = [progress_row(), progress_row(qty="0"), progress_row(code="BK-404")]
        first = validate_progress_entries(rows, lookup)
        second = validate_progress_entries(rows, lookup)
        assert first == second
        assert first.to_json() == second.to_json()

    def test_diagnostic_shape(self, lookup):
        data = json.loads(validate_progress_entries([progress_row(), progress_row(code="X")], lookup).to_json())
        assert set(data) == {"validItems", "errors", "warnings"}
        assert data["validItems"][0] == {
            "workItemId": "wi-1",
            "entryDate": "2024-06-01",
            "quantity": 24.5,
            "ratio": None,
            "region": None,
        }
        assert set(data["errors"][0]) == {"row", "field", "value", "message"}


class TestWorkItems:
    def row(self, code="BK-001", name="Temel Betonu", unit="m3", qty="300", mh="600", **extra):
        row = {"Bütçe Kodu": code, "İmalat Kalemi": name, "Birim": unit, "Hedef Miktar": qty, "Hedef Adam-Saat": mh}
        row.update(extra)
        return row

    def test_valid(self):
        result = validate_work_items([self.row(**{"İmalat Ayrımı": "Temel"})])
        assert result.valid_items == [
            WorkItemRow("BK-001", "Temel Betonu", "m3", 300.0, 600.0, parent_budget_code=None, category="Temel")
        ]

    def test_duplicate_budget_code_warns_and_keeps_both(self):
        rows = [self.row(qty="100"), self.row(qty="200")]
        result = validate_work_items(rows)
        assert [r.target_quantity for r in result.valid_items] == [100.0, 200.0]
        assert result.warnings == ['Satır 3: "BK-001" bütçe kodu tekrar ediyor, son değer kullanılacak.']
        assert result.errors == []

    def test_required_text_fields(self):
        result = validate_work_items([self.row(name="", unit=None)])
        assert [e.message for e in result.errors] == ["İmalat Kalemi boş olamaz", "Birim boş olamaz"]

    def test_blank_targets_count_as_zero(self):
        result = validate_work_items([self.row(qty=None, mh="")])
        assert result.valid_items[0].target_quantity == 0.0
        assert result.valid_items[0].target_man_hours == 0.0

    def test_numeric_budget_code_keeps_integer_form(self):
        result = validate_work_items([self.row(code=101.0)])
        assert result.valid_items[0].budget_code == "101"

    def test_negative_target(self):
        result = validate_work_items([self.row(mh="-1")])
        assert result.errors[0].field == "Hedef Adam-Saat"

    def test_legacy_ascii_header_alias(self):
        result = validate_work_items([self.row(**{"Butce kodu ust oge": "BK-000"})])
        assert result.valid_items[0].parent_budget_code == "BK-000"


class TestManHours:
    def test_quantity_labelled_column_holds_man_hours(self, lookup):
        rows = [{"Tarih": "02.06.2024", "Bütçe Kodu": "BK-001", "Miktar": "8,5"}]
        result = validate_man_hours(rows, lookup)
        assert result.valid_items == [ManHoursRow("wi-1", date(2024, 6, 2), 8.5)]

    def test_zero_man_hours_warns(self, lookup):
        rows = [{"Tarih": "02.06.2024", "Bütçe Kodu": "BK-001", "Miktar": 0}]
        result = validate_man_hours(rows, lookup)
        assert result.warnings == ["Satır 2: Adam-saat değeri sıfır, kayıt yoksayılıyor."]


class TestDailyEntries:
    def row(self, mh="10", qty="5", **extra):
        row = {"Tarih": "03.06.2024", "Bütçe Kodu": "BK-002", "Adam-Saat": mh, "Miktar": qty}
        row.update(extra)
        return row

    def test_valid(self, lookup):
        result = validate_daily_entries([self.row(Notlar="gece vardiyası")], lookup)
        assert result.valid_items == [DailyEntryRow("wi-2", date(2024, 6, 3), 10.0, 5.0, "gece vardiyası")]

    def test_one_zero_value_is_kept(self, lookup):
        result = validate_daily_entries([self.row(mh="0"), self.row(qty="0")], lookup)
        assert len(result.valid_items) == 2
        assert result.warnings == []

    def test_both_zero_warns(self, lookup):
        result = validate_daily_entries([self.row(mh="0", qty=None)], lookup)
        assert result.valid_items == []
        assert result.warnings == ["Satır 2: Adam-saat ve miktar değerleri sıfır, kayıt yoksayılıyor."]


class TestValidateTable:
    def test_blank_rows_are_skipped_and_numbering_preserved(self, lookup):
        table = [
            ["Tarih", "Bütçe Kodu", "Miktar"],
            ["01.06.2024", "BK-001", 1],
            [None, None, None],
            ["02.06.2024", "BK-404", 1],
        ]
        result = validate_table("progress", table, lookup)
        assert len(result.valid_items) == 1
        assert result.error_rows == [4]

    def test_header_only_table_warns_empty(self, lookup):
        result = validate_table("progress", [["Tarih", "Bütçe Kodu", "Miktar"]], lookup)
        assert result.warnings == [EMPTY_FILE_MESSAGE]

    def test_raw_rows_keep_their_numbers(self, lookup):
        rows = [RawRow(row_number=7, values=progress_row(qty="x"))]
        result = validate_progress_entries(rows, lookup)
        assert result.error_rows == [7]
