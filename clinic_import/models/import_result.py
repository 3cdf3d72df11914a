from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Result models for the staging and commit steps of an import session."""


@dataclass(frozen=True)
class MappingResult:
    """Outcome of mapping one sheet into drafts.

    ``excluded_rows`` lists the sheet rows dropped before staging (ledger
    rows whose amount did not coerce to a positive value). They are not
    counted as skipped in the commit summary.
    """
    header_row: int  # 0-based grid index of the located header
    mapped_rows: int
    excluded_rows: tuple[int, ...] = ()


@dataclass(frozen=True)
class CommitResult:
    """Aggregated results of committing one staged batch (SUMMARY line)."""
    entity: str
    staged: int
    imported: int
    skipped: int  # duplicates (patients only)
    failed: int  # rows the store rejected
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    possible_duplicates: int = 0  # same name, blank phone; imported anyway
    failed_rows: tuple[int, ...] = ()

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
