from __future__ import annotations

import logging
from collections.abc import Iterable

from ..excel.coercers import coerce_amount, coerce_date, coerce_text
from ..excel.fields import extract_field, match_vocabulary, normalize
from ..models.drafts import (
    UNSPECIFIED_PATIENT_ID,
    UNSPECIFIED_PATIENT_NAME,
    DraftExpense,
    DraftRevenue,
    ExpenseCategory,
    ImportKind,
    PaymentMethod,
)
from ..models.row_data import RowData
from . import keywords as kw
from .dedup import ExistingPatient

logger = logging.getLogger(__name__)


def resolve_patient_id(patient_name: str, patients: Iterable[ExistingPatient]) -> str:
    """Match free-text patient name against the store.

    Normalized full name contained in the cell text (or the reverse) wins;
    otherwise the first patient whose last name occurs in the text. Returns
    ``UNSPECIFIED_PATIENT_ID`` when nothing matches.
    """
    wanted = normalize(patient_name)
    if not wanted:
        return UNSPECIFIED_PATIENT_ID
    candidates = list(patients)
    for p in candidates:
        full = normalize(f"{p.last_name} {p.first_name}")
        if full and (full in wanted or wanted in full):
            return p.id
    for p in candidates:
        last = normalize(p.last_name)
        if last and last in wanted:
            return p.id
    return UNSPECIFIED_PATIENT_ID


def map_ledger_row(
    row: RowData,
    kind: ImportKind,
    default_date: str,
    patients: Iterable[ExistingPatient] = (),
) -> DraftExpense | DraftRevenue | None:
    """Map one ledger row; ``None`` when the amount is not positive."""
    values = row.values
    raw_amount = extract_field(values, kw.AMOUNT)
    amount = coerce_amount(raw_amount)
    if amount <= 0:
        logger.debug("row %d excluded: amount %r -> %s", row.row_number, raw_amount, amount)
        return None

    when = coerce_date(extract_field(values, kw.LEDGER_DATE), default_date)
    payment = match_vocabulary(
        coerce_text(extract_field(values, kw.PAYMENT_METHOD)), kw.PAYMENT_VOCABULARY, PaymentMethod.CASH
    )

    if kind is ImportKind.EXPENSES:
        category = match_vocabulary(
            coerce_text(extract_field(values, kw.EXPENSE_CATEGORY)),
            kw.CATEGORY_VOCABULARY,
            ExpenseCategory.OTHER,
        )
        return DraftExpense(
            date=when.date,
            date_detected=when.was_detected,
            amount=amount,
            description=coerce_text(extract_field(values, kw.EXPENSE_DESCRIPTION))
            or kw.EXPENSE_DESCRIPTION_DEFAULT,
            category=category,
            payment_method=payment,
            source_row=row.row_number,
        )

    if kind is ImportKind.REVENUES:
        patient_name = coerce_text(extract_field(values, kw.REVENUE_PATIENT))
        return DraftRevenue(
            date=when.date,
            date_detected=when.was_detected,
            amount=amount,
            description=coerce_text(extract_field(values, kw.REVENUE_DESCRIPTION))
            or kw.REVENUE_DESCRIPTION_DEFAULT,
            patient_id=resolve_patient_id(patient_name, patients),
            patient_name=patient_name or UNSPECIFIED_PATIENT_NAME,
            payment_method=payment,
            source_row=row.row_number,
        )

    raise ValueError(f"not a ledger import: {kind}")
