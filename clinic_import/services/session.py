from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from pathlib import Path
from typing import Any

from ..excel.reader import EmptySheetError, locate_header_row, read_first_sheet, to_headered_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import DatabaseConfig, ImportConfig, StoreConfig
from ..models.drafts import Draft, ImportKind
from ..models.import_result import CommitResult, MappingResult
from ..models.row_data import RowData
from ..store.base import RecordStore
from . import keywords as kw
from .committer import commit_batch
from .dedup import ExistingPatient, PatientIndex
from .ledger_mapper import map_ledger_row
from .patient_mapper import DEFAULT_BIRTH_DATE, map_patient_row
from .staging import StagedBatch

"""Import session: file -> staged batch -> review -> commit.

One session handles one file of one kind. Loading parses the whole first
sheet before anything is staged, so a file that cannot be read leaves no
partial batch behind. The batch is discarded after commit or cancel.
"""

logger = logging.getLogger(__name__)


class ImportSessionError(Exception):
    """Session used out of order (commit without a batch, ...)."""


def map_rows(
    rows: Iterable[RowData],
    kind: ImportKind,
    *,
    default_date: str,
    birth_date_fallback: str = DEFAULT_BIRTH_DATE,
    patients: Sequence[ExistingPatient] = (),
) -> tuple[list[Draft], list[int]]:
    """Map sheet rows to drafts; returns (drafts, excluded sheet row numbers)."""
    drafts: list[Draft] = []
    excluded: list[int] = []
    for row in rows:
        if kind is ImportKind.PATIENTS:
            drafts.append(map_patient_row(row, birth_date_fallback))
            continue
        draft = map_ledger_row(row, kind, default_date, patients)
        if draft is None:
            excluded.append(row.row_number)
        else:
            drafts.append(draft)
    return drafts, excluded


class ImportSession:
    def __init__(
        self,
        kind: ImportKind,
        store: RecordStore,
        config: ImportConfig | None = None,
        *,
        default_date: str | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.kind = kind
        self.store = store
        self.config = config or ImportConfig(store=StoreConfig(), database=DatabaseConfig())
        # Fallback date for ledger rows whose date cannot be read (per batch)
        self.default_date = default_date or date.today().isoformat()
        self.error_log = error_log
        self.batch: StagedBatch | None = None
        self.mapping: MappingResult | None = None
        self.source_name = ""

    def _existing_patients(self) -> PatientIndex:
        return PatientIndex.from_records(self.store.list("patients"))

    def load(self, path: Path) -> StagedBatch:
        """Read ``path`` and stage its rows.

        Raises:
            UnreadableFileError: the file cannot be parsed
            EmptySheetError: no data rows below the header
            StoreError: existing patients could not be listed (revenues)
        """
        self.discard()
        grid = read_first_sheet(path)
        signals = kw.PATIENT_HEADER_SIGNALS if self.kind is ImportKind.PATIENTS else kw.LEDGER_HEADER_SIGNALS
        header_row = locate_header_row(grid, signals, self.config.header_scan_rows)
        rows = to_headered_rows(grid, header_row)
        if not rows:
            raise EmptySheetError(f"no readable data in {path.name}")

        patients: Sequence[ExistingPatient] = ()
        if self.kind is ImportKind.REVENUES:
            patients = list(self._existing_patients())

        drafts, excluded = map_rows(
            rows,
            self.kind,
            default_date=self.default_date,
            birth_date_fallback=self.config.birth_date_placeholder,
            patients=patients,
        )
        self.source_name = path.name
        self.batch = StagedBatch(self.kind, drafts)
        self.mapping = MappingResult(
            header_row=header_row, mapped_rows=len(rows), excluded_rows=tuple(excluded)
        )
        logger.info(
            "%s: header at row %d, %d rows staged, %d excluded, %d to review",
            path.name, header_row + 1, len(self.batch), len(excluded), len(self.batch.needs_review()),
        )
        return self.batch

    def _require_batch(self) -> StagedBatch:
        if self.batch is None:
            raise ImportSessionError("no staged batch: load a file first")
        return self.batch

    def remove(self, index: int) -> Draft:
        return self._require_batch().remove(index)

    def replace(self, index: int, **changes: Any) -> Draft:
        return self._require_batch().replace(index, **changes)

    def discard(self) -> None:
        if self.batch is not None:
            self.batch.discard()
        self.batch = None
        self.mapping = None

    def cancel(self) -> None:
        if self.batch is not None:
            logger.info("import of %s cancelled, %d staged rows discarded", self.source_name, len(self.batch))
        self.discard()

    def commit(self) -> CommitResult:
        """Save the staged rows; the batch is discarded afterwards."""
        batch = self._require_batch()
        if len(batch) == 0:
            raise ImportSessionError("staged batch is empty")
        index = self._existing_patients() if self.kind is ImportKind.PATIENTS else None
        try:
            return commit_batch(
                batch,
                self.store,
                index=index,
                error_log=self.error_log,
                source_name=self.source_name,
            )
        finally:
            self.discard()
