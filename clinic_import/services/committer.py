from __future__ import annotations

import logging
import time
import uuid
from datetime import UTC, datetime

from ..logging.error_log import STORE_SAVE_ERROR, UNEXPECTED_ERROR, ErrorLogBuffer
from ..models.drafts import DraftPatient, ImportKind
from ..models.import_result import CommitResult
from ..store.base import RecordStore, StoreError
from .dedup import PatientIndex, is_duplicate, possible_duplicate
from .progress import CommitProgress
from .staging import StagedBatch

logger = logging.getLogger(__name__)

ID_PREFIXES = {
    ImportKind.PATIENTS: "P-IMP",
    ImportKind.EXPENSES: "EXP-IMP",
    ImportKind.REVENUES: "INV-IMP",
}


def new_record_id(kind: ImportKind) -> str:
    return f"{ID_PREFIXES[kind]}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:5]}"


def commit_batch(
    batch: StagedBatch,
    store: RecordStore,
    *,
    index: PatientIndex | None = None,
    error_log: ErrorLogBuffer | None = None,
    source_name: str = "",
) -> CommitResult:
    """Save every staged draft, one at a time, in staged order.

    Best effort, no transaction: a rejected save is logged, written to the
    error log and counted, and the remaining rows are still attempted.
    Patient drafts matching ``index`` are skipped as duplicates.
    """
    start_time = datetime.now(UTC)
    entity = batch.kind.entity
    imported = skipped = failed = possible = 0
    failed_rows: list[int] = []
    index = index if index is not None else PatientIndex()

    with CommitProgress(len(batch), description=f"Saving {entity}") as progress:
        for position, draft in enumerate(batch):
            row = draft.source_row if draft.source_row is not None else -1

            if isinstance(draft, DraftPatient):
                if is_duplicate(draft, index):
                    skipped += 1
                    logger.debug("row %d skipped: duplicate of an existing patient", row)
                    progress.advance(imported=imported, skipped=skipped, failed=failed)
                    continue
                match = possible_duplicate(draft, index)
                if match is not None:
                    possible += 1
                    logger.warning(
                        "row %d: %s %s may duplicate patient %s (phone missing), imported for manual merge",
                        row, draft.last_name, draft.first_name, match.id,
                    )

            record = draft.to_record(
                new_record_id(batch.kind), datetime.now(UTC).isoformat().replace("+00:00", "Z")
            )
            try:
                store.save(entity, record)
            except StoreError as e:
                failed += 1
                failed_rows.append(row)
                logger.warning("row %d (#%d) not saved: %s", row, position, e)
                if error_log is not None:
                    error_log.record(source_name, entity, row, STORE_SAVE_ERROR, e)
            except Exception as e:
                failed += 1
                failed_rows.append(row)
                logger.error("row %d (#%d) unexpected save error: %s", row, position, e)
                if error_log is not None:
                    error_log.record(source_name, entity, row, UNEXPECTED_ERROR, e)
            else:
                imported += 1
            progress.advance(imported=imported, skipped=skipped, failed=failed)

    if error_log is not None:
        by_type = error_log.counts()
        try:
            path = error_log.flush()
        except OSError as e:
            logger.error("could not write error log: %s", e)
        else:
            if path is not None:
                counts = ", ".join(f"{t}={n}" for t, n in sorted(by_type.items()))
                logger.info("error log written to %s (%s)", path, counts)

    end_time = datetime.now(UTC)
    return CommitResult(
        entity=entity,
        staged=len(batch),
        imported=imported,
        skipped=skipped,
        failed=failed,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        possible_duplicates=possible,
        failed_rows=tuple(failed_rows),
    )
