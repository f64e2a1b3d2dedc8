from __future__ import annotations

import json
from pathlib import Path

from siteprogress.logging.error_log import ErrorLogBuffer
from siteprogress.models.validation import ValidationError, ValidationErrorRecord

KEYS = {"timestamp", "file", "sheet", "row", "field", "value", "message"}


def test_error_record_creation_and_json_line():
    err = ValidationError(row=5, field="Miktar", value="abc", message='"abc" geçerli bir sayı değil')
    rec = ValidationErrorRecord.create("gunluk.xlsx", "Sheet1", err)
    data = json.loads(rec.to_json_line())
    assert set(data) == KEYS
    assert data["row"] == 5
    assert data["value"] == "abc"
    assert data["timestamp"].endswith("Z")
    # non-ASCII kept readable
    assert "geçerli" in rec.to_json_line()


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.extend(
        "f1.xlsx",
        "<FIRST>",
        [
            ValidationError(2, "Tarih", "yarın", "bad date"),
            ValidationError(3, "Bütçe Kodu", "X", "unknown"),
        ],
    )
    assert len(buf) == 2
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw)) == KEYS
    assert len(buf) == 0


def test_empty_buffer_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "nested" / "logs")
    assert buf.flush() is None
    assert not (temp_workdir / "nested").exists()


def test_multiple_flushes_append_to_the_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ValidationErrorRecord.create("f.xlsx", "S", ValidationError(2, "A", 1, "m")))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ValidationErrorRecord.create("f.xlsx", "S", ValidationError(3, "A", 1, "m")))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
