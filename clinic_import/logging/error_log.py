from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-commit error log.

Rejected saves are collected while a batch is committed and written once,
as JSON Lines, to ``<logs_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC time of the
first write). A commit with no rejected row leaves no file behind.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "STORE_SAVE_ERROR",
    "UNEXPECTED_ERROR",
]

STORE_SAVE_ERROR = "STORE_SAVE_ERROR"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

DEFAULT_LOGS_DIR = Path("./logs")


class ErrorLogBuffer:
    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else DEFAULT_LOGS_DIR
        self.path: Path | None = None  # set by the first flush that writes
        self._pending: list[ErrorRecord] = []

    def __len__(self) -> int:
        return len(self._pending)

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def record(self, file: str, entity: str, row: int, error_type: str, error: Exception | str) -> ErrorRecord:
        """Buffer one rejected row; exceptions are logged by their message."""
        rec = ErrorRecord.create(file, entity, row, error_type, str(error).strip())
        self._pending.append(rec)
        return rec

    def counts(self) -> Counter[str]:
        """Pending records per error type."""
        return Counter(r.error_type for r in self._pending)

    def flush(self) -> Path | None:
        """Write pending records; returns the log path, or None when nothing was pending.

        Later flushes of the same buffer append to the same file.
        """
        if not self._pending:
            return None
        if self.path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self.path = self.logs_dir / f"errors-{datetime.now(UTC):%Y%m%d-%H%M%S}.log"
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._pending.clear()
        return self.path
