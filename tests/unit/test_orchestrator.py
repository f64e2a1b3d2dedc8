from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from siteprogress.config.loader import load_config
from siteprogress.logging.error_log import ErrorLogBuffer
from siteprogress.models.config_models import SourceConfig
from siteprogress.models.processing_result import UploadStatus
from siteprogress.services.orchestrator import (
    ProcessingError,
    build_report,
    process_upload,
    process_uploads,
    validate_upload_table,
)

PROGRESS_HEADER = ["Tarih", "Bütçe Kodu", "Miktar"]


def test_clean_upload(tmp_path: Path, xlsx_writer, lookup):
    path = xlsx_writer(tmp_path / "metraj.xlsx", [PROGRESS_HEADER, ["06.01.2025", "BK-001", "12,5"]])
    outcome = process_upload(path, "progress", lookup=lookup)
    assert outcome.status is UploadStatus.CLEAN
    assert outcome.total_rows == 1
    assert outcome.result.valid_items[0].quantity == 12.5
    assert outcome.result.valid_items[0].work_item_id == "wi-1"


def test_partial_upload_needs_confirmation(tmp_path: Path, xlsx_writer, lookup):
    path = xlsx_writer(
        tmp_path / "metraj.xlsx",
        [
            PROGRESS_HEADER,
            ["06.01.2025", "BK-001", 5],
            ["07.01.2025", "BK-999", 5],
            ["08.01.2025", "BK-002", 0],
        ],
    )
    buf = ErrorLogBuffer(tmp_path / "logs")
    outcome = process_upload(path, "progress", lookup=lookup, error_log=buf)
    assert outcome.status is UploadStatus.NEEDS_CONFIRMATION
    assert len(outcome.result.valid_items) == 1
    assert [e.row for e in outcome.result.errors] == [3]
    assert len(outcome.result.warnings) == 1
    assert len(buf) == 1


def test_decode_failure_is_failed_outcome(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    outcome = process_upload(tmp_path / "missing.xlsx", "work_items", error_log=buf)
    assert outcome.status is UploadStatus.FAILED
    assert "file not found" in outcome.error
    written = buf.flush()
    record = json.loads(written.read_text(encoding="utf-8").splitlines()[0])
    assert record["row"] == -1
    assert record["field"] == "<FILE>"
    assert record["sheet"] == "<FIRST>"


def test_fk_kind_without_lookup_is_misuse():
    with pytest.raises(ProcessingError):
        validate_upload_table("man_hours", [["Tarih", "Bütçe Kodu", "Miktar"]])


def test_unknown_kind_is_misuse():
    with pytest.raises(ProcessingError) as e:
        validate_upload_table("invoices", [])
    assert "unknown import kind" in str(e.value)


def test_process_uploads_continues_after_failure(tmp_path: Path, xlsx_writer, lookup):
    good = xlsx_writer(tmp_path / "good.xlsx", [PROGRESS_HEADER, ["06.01.2025", "BK-001", 1]])
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"garbage")
    run = process_uploads(
        [SourceConfig(bad, "progress"), SourceConfig(good, "progress")],
        lookup=lookup,
        error_log=ErrorLogBuffer(tmp_path / "logs"),
    )
    assert [o.status for o in run.outcomes] == [UploadStatus.FAILED, UploadStatus.CLEAN]
    assert run.failed_files == 1 and run.clean_files == 1
    assert run.valid_rows == 1
    assert len(list((tmp_path / "logs").glob("errors-*.log"))) == 1


def test_build_report_from_project(sample_project: Path):
    result = build_report(load_config(sample_project))
    report = result.report

    assert [o.status for o in result.run.outcomes] == [UploadStatus.CLEAN] * 3
    assert [b.key for b in report.daily] == ["2025-01-06", "2025-01-07", "2025-02-03"]
    assert report.daily[1].man_hours == pytest.approx(200.5)
    assert report.daily[0].target == pytest.approx(55.0)
    assert [b.key for b in report.weekly] == ["2025-W02", "2025-W06"]
    assert [(b.key, b.target) for b in report.monthly] == [("2025-01", 1000.0), ("2025-02", 1200.0)]

    assert report.summary.total_spent_man_hours == pytest.approx(470.5)
    assert report.summary.total_quantity == pytest.approx(230.0)
    assert report.summary.total_earned_man_hours == pytest.approx(408.0)

    assert [c.category for c in report.categories] == ["Temel", "Ustyapi"]
    assert report.categories[1].quantity == pytest.approx(40.0)  # m2 item excluded
    assert report.highlight.month_name == "Şubat"
    assert report.highlight.efficiency_percent == pytest.approx(90.0)


def test_build_report_plans_concrete_from_schedule_columns(sample_project: Path):
    report = build_report(load_config(sample_project)).report
    assert [(c.month, c.actual, c.planned) for c in report.monthly_concrete] == [
        ("2025-01", pytest.approx(140.0), 150.0),
        ("2025-02", 0.0, 150.0),
    ]
    assert report.daily[2].formwork == pytest.approx(90.0)
    assert report.monthly[-1].cumulative_man_hours == pytest.approx(470.5)


def test_config_targets_override_schedule(sample_project: Path):
    sample_project.write_text(
        sample_project.read_text(encoding="utf-8")
        + "monthly_targets:\n  - {year: 2025, month: 1, planned_man_hours: 800}\n",
        encoding="utf-8",
    )
    report = build_report(load_config(sample_project)).report
    assert report.monthly[0].target == 800.0
    assert report.monthly[1].target == 1200.0


def test_build_report_date_range(sample_project: Path):
    report = build_report(load_config(sample_project), end=date(2025, 1, 31)).report
    assert [b.key for b in report.daily] == ["2025-01-06", "2025-01-07"]
    assert [b.key for b in report.monthly] == ["2025-01"]
    assert [c.month for c in report.monthly_concrete] == ["2025-01"]


def test_missing_catalog_is_fatal(sample_project: Path, temp_workdir: Path):
    (temp_workdir / "data" / "work_items.xlsx").unlink()
    with pytest.raises(ProcessingError) as e:
        build_report(load_config(sample_project))
    assert "work item catalog could not be read" in str(e.value)
