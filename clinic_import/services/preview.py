from __future__ import annotations

from typing import Any

import pandas as pd

from ..models.drafts import DraftExpense, DraftPatient, DraftRevenue
from .staging import StagedBatch

"""Plain-text preview of a staged batch for the review step.

The ``review`` column is ``!`` when the row carries a sentinel name or a
fallback date and must be checked before commit.
"""


def _preview_row(draft: Any) -> dict[str, Any]:
    flag = "!" if draft.needs_review else ""
    if isinstance(draft, DraftPatient):
        return {
            "review": flag,
            "row": draft.source_row,
            "name": f"{draft.last_name} {draft.first_name}",
            "birth_date": draft.birth_date if draft.birth_date_detected else f"{draft.birth_date}?",
            "cin": draft.national_id or "---",
            "phone": draft.phone,
            "insurance": draft.insurance_type.value,
            "history": len(draft.medical_history),
            "allergies": len(draft.allergies),
        }
    if isinstance(draft, DraftExpense):
        label = f"{draft.category.value} / {draft.description}"
    elif isinstance(draft, DraftRevenue):
        label = f"{draft.patient_name} ({draft.patient_id}) / {draft.description}"
    else:  # pragma: no cover
        raise TypeError(f"unknown draft type: {type(draft).__name__}")
    return {
        "review": flag,
        "row": draft.source_row,
        "date": draft.date if draft.date_detected else f"{draft.date}?",
        "label": label,
        "mode": draft.payment_method.value,
        "amount": f"{draft.amount:.2f}",
    }


def render_preview(batch: StagedBatch) -> str:
    """Table of staged rows; the index column is the position used for removal."""
    if len(batch) == 0:
        return "(no staged rows)"
    frame = pd.DataFrame([_preview_row(d) for d in batch])
    return frame.to_string()
