from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from .serialize import to_jsonable

"""Validation diagnostics: per-field errors and the partial-success result.

``ValidationResult`` is what every import validator returns. It never raises
for bad data: rows either contribute items, contribute errors, or contribute a
warning. Whether a result with errors or warnings may be committed is decided
by the caller (see ``services.orchestrator.UploadStatus``).
"""

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationErrorRecord",
]

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationError:
    """One field problem on one row; the row is dropped, the batch continues.

    Attributes:
        row: 1-based sheet row number (header = row 1)
        field: Display name of the column the problem was found in
        value: Original cell value, untouched
        message: Human readable explanation shown to the uploader
    """
    row: int
    field: str
    value: Any
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row,
            "field": self.field,
            "value": to_jsonable(self.value),
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Outcome of validating one upload.

    ``valid_items`` keeps sheet row order and may contain duplicates; removing
    them is the consumer's job.
    """
    valid_items: list[T] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.errors and not self.warnings

    @property
    def error_rows(self) -> list[int]:
        """Distinct row numbers that carry at least one error, in order."""
        seen: dict[int, None] = {}
        for err in self.errors:
            seen.setdefault(err.row, None)
        return list(seen)

    def to_dict(self) -> dict[str, Any]:
        """Diagnostic shape handed back to the upload dialog."""
        return {
            "validItems": to_jsonable(self.valid_items),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass(frozen=True)
class ValidationErrorRecord:
    """Structured JSON Lines record for the error log.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Uploaded file name
        sheet: Sheet name (``"<FIRST>"`` when the first sheet was used)
        row: Sheet row number, -1 for file-level problems
        field: Column display name
        value: Raw cell value rendered as JSON-compatible data
        message: Error message
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    field: str
    value: Any
    message: str

    @staticmethod
    def create(file: str, sheet: str, error: ValidationError) -> ValidationErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ValidationErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=error.row,
            field=error.field,
            value=to_jsonable(error.value),
            message=error.message,
        )

    def to_json_line(self) -> str:
        # fixed key set: dataclass -> dict -> json
        return json.dumps(asdict(self), ensure_ascii=False)
