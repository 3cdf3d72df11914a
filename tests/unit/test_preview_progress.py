from __future__ import annotations

from unittest.mock import patch

from clinic_import.models.drafts import (
    LAST_NAME_SENTINEL,
    DraftExpense,
    DraftPatient,
    DraftRevenue,
    ImportKind,
)
from clinic_import.services.preview import render_preview
from clinic_import.services.progress import CommitProgress
from clinic_import.services.staging import StagedBatch


def test_preview_empty_batch():
    assert render_preview(StagedBatch(ImportKind.EXPENSES)) == "(no staged rows)"


def test_preview_patients_marks_review():
    batch = StagedBatch(
        ImportKind.PATIENTS,
        [
            DraftPatient(last_name="MARTIN", first_name="Sophie", birth_date="1985-06-01", birth_date_detected=True),
            DraftPatient(last_name=LAST_NAME_SENTINEL, first_name="Ali", birth_date="1990-01-01", birth_date_detected=False),
        ],
    )
    lines = render_preview(batch).splitlines()
    assert len(lines) == 3
    assert "MARTIN Sophie" in lines[1]
    assert "1985-06-01" in lines[1]
    assert "!" not in lines[1]
    assert "!" in lines[2]
    assert "1990-01-01?" in lines[2]


def test_preview_ledger_rows():
    batch = StagedBatch(
        ImportKind.REVENUES,
        [DraftRevenue(date="2024-03-15", date_detected=True, amount=150.0, description="Recette importée",
                      patient_name="Dupont Jean")],
    )
    out = render_preview(batch)
    assert "Dupont Jean (divers) / Recette importée" in out
    assert "150.00" in out
    assert "ESPECES" in out

    batch = StagedBatch(
        ImportKind.EXPENSES,
        [DraftExpense(date="2024-04-01", date_detected=False, amount=45.5, description="Gants")],
    )
    out = render_preview(batch)
    assert "OTHER / Gants" in out
    assert "2024-04-01?" in out


def test_progress_disabled_without_tty():
    with patch("sys.stdout.isatty", return_value=False):
        with CommitProgress(3) as progress:
            assert progress.pbar is None
            progress.advance(imported=1)


def test_progress_enabled_on_tty():
    with patch("sys.stdout.isatty", return_value=True):
        progress = CommitProgress(2, description="Saving patients")
    assert progress.pbar is not None
    progress.advance(imported=1, skipped=0, failed=0)
    assert progress.pbar.n == 1
    progress.close()
    assert progress.pbar is None
