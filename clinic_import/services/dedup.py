from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..models.drafts import DraftPatient

"""Existing-patient snapshot and duplicate detection for patient imports.

A draft is a duplicate when EITHER
  (a) both sides carry the same non-empty national id, OR
  (b) last and first name are equal AND the phones are equal and non-empty.
Rule (b) needs the phone so common names do not collapse into one patient.
Same-name rows where a phone is missing are reported by
``possible_duplicate`` for a manual merge; they are still imported.
"""

__all__ = [
    "ExistingPatient",
    "PatientIndex",
    "is_duplicate",
    "possible_duplicate",
]


@dataclass(frozen=True)
class ExistingPatient:
    id: str
    last_name: str
    first_name: str
    national_id: str = ""
    phone: str = ""


def _text(record: Mapping[str, Any], key: str) -> str:
    val = record.get(key)
    return "" if val is None else str(val)


class PatientIndex:
    """Read-only snapshot of the patients already in the store."""

    def __init__(self, patients: Iterable[ExistingPatient] = ()) -> None:
        self._patients = tuple(patients)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> PatientIndex:
        return cls(
            ExistingPatient(
                id=_text(r, "id"),
                last_name=_text(r, "lastName"),
                first_name=_text(r, "firstName"),
                national_id=_text(r, "cin"),
                phone=_text(r, "phone"),
            )
            for r in records
        )

    def __iter__(self) -> Iterator[ExistingPatient]:
        return iter(self._patients)

    def __len__(self) -> int:
        return len(self._patients)


def _same_name(draft: DraftPatient, patient: ExistingPatient) -> bool:
    return patient.last_name == draft.last_name and patient.first_name == draft.first_name


def is_duplicate(draft: DraftPatient, index: PatientIndex) -> bool:
    for patient in index:
        if draft.national_id and patient.national_id == draft.national_id:
            return True
        if draft.phone and _same_name(draft, patient) and patient.phone == draft.phone:
            return True
    return False


def possible_duplicate(draft: DraftPatient, index: PatientIndex) -> ExistingPatient | None:
    """Same-name patient that rule (b) could not confirm because a phone is blank."""
    for patient in index:
        if _same_name(draft, patient) and (not draft.phone or not patient.phone):
            return patient
    return None
