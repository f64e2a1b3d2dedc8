from __future__ import annotations

from typing import Any

from ..models.processing_result import RunResult
from ..models.validation import ValidationResult

"""Summary rendering: the SUMMARY line of a run and the per-upload sentence.

SUMMARY line format::

    SUMMARY files={n} clean={c} needs_confirmation={w} failed={f} rows={r}
    errors={e} warnings={x} elapsed_sec={s}
"""

__all__ = [
    "render_summary_line",
    "format_validation_summary",
]


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very short runs
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(run: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> render_summary_line(RunResult(outcomes=[], start_time=t, end_time=t, elapsed_seconds=2.0))
        'SUMMARY files=0 clean=0 needs_confirmation=0 failed=0 rows=0 errors=0 warnings=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={len(run.outcomes)} "
        f"clean={run.clean_files} "
        f"needs_confirmation={run.confirmation_files} "
        f"failed={run.failed_files} "
        f"rows={run.valid_rows} "
        f"errors={run.error_count} "
        f"warnings={run.warning_count} "
        f"elapsed_sec={_format_seconds(run.elapsed_seconds)}"
    )


def format_validation_summary(result: ValidationResult[Any], total_rows: int) -> str:
    """One-sentence Turkish summary shown under the upload dialog.

    Parts are omitted when their count is zero; an empty string means nothing
    was accepted, rejected or flagged.
    """
    parts: list[str] = []
    if result.valid_items:
        parts.append(f"{len(result.valid_items)}/{total_rows} kayıt başarıyla işlendi.")
    if result.errors:
        parts.append(f"{len(result.errors)} satırda hata bulundu.")
    if result.warnings:
        parts.append(f"{len(result.warnings)} uyarı var.")
    return " ".join(parts)
