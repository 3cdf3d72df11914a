from __future__ import annotations

from ..excel.coercers import coerce_date, coerce_list, coerce_text
from ..excel.fields import extract_field, find_header, match_vocabulary, normalize
from ..models.drafts import (
    FIRST_NAME_PLACEHOLDER,
    FIRST_NAME_SENTINEL,
    LAST_NAME_SENTINEL,
    DraftPatient,
    InsuranceType,
)
from ..models.row_data import RowData
from . import keywords as kw

"""Row mapper for patient rosters.

Identity is resolved first: separate last/first name columns, else a
combined "full name" column split on whitespace (first token is the last
name). Rows whose names cannot be resolved are kept with visible sentinels
so the reviewer can fix or drop them.
"""

DEFAULT_BIRTH_DATE = "1990-01-01"


def _split_full_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    if len(parts) >= 2:
        return parts[0].upper(), " ".join(parts[1:])
    return full_name.upper(), FIRST_NAME_PLACEHOLDER


_FULL_NAME_HEADERS = frozenset(normalize(k) for k in kw.FULL_NAME)


def resolve_names(values: dict) -> tuple[str, str]:
    # "Nom complet" and "Prénom" contain "nom": they never answer the last name
    combined = [h for h in values if normalize(h) in _FULL_NAME_HEADERS]
    first_header = find_header(values.keys(), kw.FIRST_NAME, exclude=combined)
    last_header = find_header(values.keys(), kw.LAST_NAME, exclude=[*combined, first_header])

    last_name = coerce_text(values[last_header]).upper() if last_header else ""
    first_name = coerce_text(values[first_header]) if first_header else ""

    # One combined column answers both groups: compare on normalized text
    if not last_name or not first_name or normalize(last_name) == normalize(first_name):
        full_name = coerce_text(extract_field(values, kw.FULL_NAME))
        if len(full_name) > 2:
            last_name, first_name = _split_full_name(full_name)

    if len(last_name) < 2:
        last_name = LAST_NAME_SENTINEL
    if not first_name:
        first_name = FIRST_NAME_SENTINEL
    return last_name, first_name


def map_patient_row(row: RowData, birth_date_fallback: str = DEFAULT_BIRTH_DATE) -> DraftPatient:
    values = row.values
    last_name, first_name = resolve_names(values)

    birth = coerce_date(extract_field(values, kw.BIRTH_DATE), birth_date_fallback)
    insurance = match_vocabulary(
        coerce_text(extract_field(values, kw.INSURANCE)), kw.INSURANCE_VOCABULARY, InsuranceType.NONE
    )

    return DraftPatient(
        last_name=last_name,
        first_name=first_name,
        birth_date=birth.date,
        birth_date_detected=birth.was_detected,
        national_id=coerce_text(extract_field(values, kw.NATIONAL_ID)).upper(),
        phone=coerce_text(extract_field(values, kw.PHONE)),
        email=coerce_text(extract_field(values, kw.EMAIL)).lower(),
        insurance_type=insurance,
        insurance_number=coerce_text(extract_field(values, kw.INSURANCE_NUMBER)),
        address=coerce_text(extract_field(values, kw.ADDRESS)),
        medical_history=coerce_list(extract_field(values, kw.MEDICAL_HISTORY)),
        allergies=coerce_list(extract_field(values, kw.ALLERGIES)),
        source_row=row.row_number,
    )
