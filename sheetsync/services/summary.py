from __future__ import annotations

from ..models.sync_result import SyncResult

"""SUMMARY line rendering.

Push:
    op=push sheets=N skipped_sheets=N processed=N succeeded=N failed=N
    incomplete=0|1 elapsed_sec=X
Pull adds ``misses=N unknown_locale=N`` before ``incomplete``.
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
    "render_failure_lines",
]


def format_seconds(value: float) -> str:
    """Integers without decimals, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: SyncResult) -> str:
    """Render the SUMMARY line content (without the SUMMARY label).

    Examples:
        >>> from datetime import datetime, timezone
        >>> from sheetsync.models.sync_result import PushResult
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = SyncResult("push", [PushResult("Menu", processed=5, created=4, failed=1)], 0, t, t, 2.0)
        >>> render_summary_line(r)
        'op=push sheets=1 skipped_sheets=0 processed=5 succeeded=4 failed=1 incomplete=0 elapsed_sec=2'
    """
    parts = [
        f"op={result.operation}",
        f"sheets={len(result.sheets)}",
        f"skipped_sheets={result.skipped_sheets}",
        f"processed={result.processed}",
        f"succeeded={result.succeeded}",
        f"failed={result.failed}",
    ]
    if result.operation == "pull":
        parts.append(f"misses={result.misses}")
        parts.append(f"unknown_locale={result.unknown_locale}")
    parts.append(f"incomplete={1 if result.incomplete else 0}")
    parts.append(f"elapsed_sec={format_seconds(result.elapsed_seconds)}")
    return " ".join(parts)


def render_failure_lines(result: SyncResult) -> list[str]:
    """First few failure messages (bounded by MAX_REPORTED_FAILURES)."""
    return [f"failure: {m}" for m in result.failures]
