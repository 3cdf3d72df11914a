from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model: one data row of the imported sheet, keyed by header text."""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """A data row after header location.

    ``values`` maps the header text as found in the file to the cell value
    (``None`` when blank), in column order. Lookups always go through
    ``excel.fields.extract_field`` so header spelling does not matter.
    """
    row_number: int  # 1-based sheet row
    values: dict[str, Any]
