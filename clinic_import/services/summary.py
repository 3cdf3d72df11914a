from __future__ import annotations

from ..models.import_result import CommitResult

"""SUMMARY line rendering for a committed batch.

Format:
SUMMARY entity={entity} staged={n} imported={n} skipped={n} failed={n}
possible_duplicates={n} elapsed_sec={elapsed}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: CommitResult) -> str:
    """Render the SUMMARY line for ``result``.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)
        >>> r = CommitResult(entity="patients", staged=3, imported=2, skipped=1, failed=0,
        ...                  start_time=t, end_time=t, elapsed_seconds=2.0)
        >>> render_summary_line(r)
        'SUMMARY entity=patients staged=3 imported=2 skipped=1 failed=0 possible_duplicates=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY entity={result.entity} "
        f"staged={result.staged} "
        f"imported={result.imported} "
        f"skipped={result.skipped} "
        f"failed={result.failed} "
        f"possible_duplicates={result.possible_duplicates} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
