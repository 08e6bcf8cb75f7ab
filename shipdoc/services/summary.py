from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering.

Format (one line, space separated key=value pairs):

    SUMMARY files={n}/{n} success={s} failed={f} rows={r} records={u} errors={e} elapsed_sec={t}

``failed`` counts both invalid (validation errors) and failed (malformed
source, serialization) files. ``records`` is the number of ShipmentRecords
emitted after quantity duplication.
"""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Integers without a decimal point, tiny values without scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=1, total_rows=12, total_records=15,
        ...     total_errors=2, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(2, result)
        'SUMMARY files=2/2 success=1 failed=1 rows=12 records=15 errors=2 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"records={result.total_records} "
        f"errors={result.total_errors} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
