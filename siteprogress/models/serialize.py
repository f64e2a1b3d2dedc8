from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from datetime import date
from typing import Any

"""Serialization helpers shared by the diagnostic and report shapes.

Python attributes are snake_case; the JSON handed to callers uses the camelCase
keys the upload dialog and report charts already consume.
"""

__all__ = [
    "camel_case",
    "to_jsonable",
    "dumps",
]


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclasses, dates and containers to JSON types."""
    if is_dataclass(value) and not isinstance(value, type):
        return {camel_case(f.name): to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, float) and value != value:
        return None
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "item"):  # numpy scalar
        return to_jsonable(value.item())
    return str(value)


def dumps(value: Any) -> str:
    """Deterministic JSON (stable key order, UTF-8 text kept readable)."""
    return json.dumps(to_jsonable(value), ensure_ascii=False, sort_keys=False)
