from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from ..models.validation import ValidationError, ValidationResult

"""Accumulator for per-row outcomes of one upload."""

__all__ = [
    "ValidationResultBuilder",
]

T = TypeVar("T")


class ValidationResultBuilder(Generic[T]):
    """Collects items, field errors and warnings in row order.

    The builder performs no I/O and takes no commit decision; ``build()`` hands
    the caller an immutable :class:`ValidationResult`.
    """

    def __init__(self) -> None:
        self._items: list[T] = []
        self._errors: list[ValidationError] = []
        self._warnings: list[str] = []

    def add_item(self, item: T) -> None:
        self._items.append(item)

    def add_error(self, row: int, field: str, value: Any, message: str) -> None:
        self._errors.append(ValidationError(row=row, field=field, value=value, message=message))

    def extend_errors(self, errors: Iterable[ValidationError]) -> None:
        self._errors.extend(errors)

    def warn(self, message: str) -> None:
        self._warnings.append(message)

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def error_count(self) -> int:
        return len(self._errors)

    def build(self) -> ValidationResult[T]:
        return ValidationResult(
            valid_items=list(self._items),
            errors=list(self._errors),
            warnings=list(self._warnings),
        )
