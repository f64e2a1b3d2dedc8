from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.validation import ValidationError, ValidationErrorRecord

"""Error log buffering: field errors of a run as JSON Lines.

- fixed key set per line (``ValidationErrorRecord``)
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on first flush
- records are buffered and written in one go
"""

__all__ = [
    "ValidationErrorRecord",
    "ErrorLogBuffer",
    "DEFAULT_LOGS_DIR",
]

DEFAULT_LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    The file path is fixed on first access so every flush of a run lands in
    the same file. No thread safety (uploads are processed serially).
    """
    def __init__(self, log_dir: Path = DEFAULT_LOGS_DIR) -> None:
        self.log_dir = Path(log_dir)
        self._records: list[ValidationErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.log_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ValidationErrorRecord) -> None:
        self._records.append(record)

    def extend(self, file: str, sheet: str, errors: list[ValidationError]) -> None:
        """Buffer every field error of one upload."""
        for error in errors:
            self._records.append(ValidationErrorRecord.create(file, sheet, error))

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, None when nothing was written."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
