from __future__ import annotations

from pathlib import Path

from siteprogress.cli.__main__ import main as cli_main

"""Exit code contract: 0 all clean, 2 partial (confirmation or decode failure), 1 fatal."""


def test_exit_code_fatal_missing_config(temp_workdir: Path, capsys):
    code = cli_main(["report"])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_invalid_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "project.yml").write_text("project: {}\n", encoding="utf-8")
    assert cli_main(["report"]) == 1
    assert "config validation failed" in capsys.readouterr().out


def test_exit_code_fatal_missing_catalog(sample_project: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "work_items.xlsx").unlink()
    assert cli_main(["report"]) == 1
    assert "ERROR processing: work item catalog could not be read" in capsys.readouterr().out


def test_exit_code_all_clean(sample_project: Path, capsys):
    assert cli_main(["report", "--output", "report.json"]) == 0


def test_exit_code_partial_when_entry_file_unreadable(sample_project: Path, temp_workdir: Path):
    (temp_workdir / "data" / "daily.xlsx").write_bytes(b"not a workbook")
    assert cli_main(["report", "--output", "report.json"]) == 2
    assert (temp_workdir / "report.json").exists()


def test_exit_code_partial_when_rows_rejected(sample_project: Path, temp_workdir: Path, xlsx_writer):
    xlsx_writer(
        temp_workdir / "data" / "daily.xlsx",
        [["Tarih", "Bütçe Kodu", "Adam-Saat", "Miktar"], ["32.01.2025", "BK-001", 8, 1]],
    )
    assert cli_main(["validate", "daily_entries", "data/daily.xlsx", "--catalog", "data/work_items.xlsx"]) == 2
