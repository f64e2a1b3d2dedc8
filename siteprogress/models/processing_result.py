from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .validation import ValidationResult

"""Upload outcomes and run-level aggregation for the CLI and report builder.

``UploadStatus`` is the caller-side commit policy on top of a
``ValidationResult``: a clean batch may be committed automatically, anything
with errors or warnings is held for the uploader to confirm.
"""

__all__ = [
    "UploadStatus",
    "UploadOutcome",
    "RunResult",
]


class UploadStatus(Enum):
    CLEAN = "clean"  # no errors, no warnings: auto-commit
    NEEDS_CONFIRMATION = "needs_confirmation"  # partial success, ask the uploader
    FAILED = "failed"  # file could not be decoded

    @classmethod
    def of(cls, result: ValidationResult[Any]) -> UploadStatus:
        return cls.CLEAN if result.is_clean else cls.NEEDS_CONFIRMATION


@dataclass(frozen=True)
class UploadOutcome:
    """Result of one uploaded file (one sheet of one import kind)."""
    path: Path
    kind: str
    sheet: str | None
    status: UploadStatus
    result: ValidationResult[Any] = field(default_factory=ValidationResult)
    total_rows: int = 0  # data rows offered to the validator
    error: str | None = None  # decode failure message
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "file": self.path.name,
            "kind": self.kind,
            "sheet": self.sheet,
            "status": self.status.value,
            "totalRows": self.total_rows,
        }
        if self.error is not None:
            data["error"] = self.error
        data.update(self.result.to_dict())
        return data


@dataclass(frozen=True)
class RunResult:
    """Aggregated outcomes of one CLI run; feeds the SUMMARY line."""
    outcomes: list[UploadOutcome]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    def _count(self, status: UploadStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def clean_files(self) -> int:
        return self._count(UploadStatus.CLEAN)

    @property
    def confirmation_files(self) -> int:
        return self._count(UploadStatus.NEEDS_CONFIRMATION)

    @property
    def failed_files(self) -> int:
        return self._count(UploadStatus.FAILED)

    @property
    def valid_rows(self) -> int:
        return sum(len(o.result.valid_items) for o in self.outcomes)

    @property
    def error_count(self) -> int:
        return sum(len(o.result.errors) for o in self.outcomes)

    @property
    def warning_count(self) -> int:
        return sum(len(o.result.warnings) for o in self.outcomes)
