from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

"""Total converters from loosely typed spreadsheet cells to domain values.

None of these functions raise. Where a conversion can silently fall back,
the result says so (``CoercedDate.was_detected``) so that the staging step
can flag the row for a human instead of passing the fallback off as data.
"""

__all__ = [
    "CoercedDate",
    "SERIAL_EPOCH_OFFSET_DAYS",
    "coerce_date",
    "coerce_amount",
    "coerce_list",
    "coerce_text",
]

# Days between the spreadsheet serial epoch (1899-12-30) and 1970-01-01
SERIAL_EPOCH_OFFSET_DAYS = 25569
_UNIX_EPOCH = datetime(1970, 1, 1)

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DATE_SEPARATORS = re.compile(r"[/\-.]")
_AMOUNT_NOISE = re.compile(r"[\sA-Za-z€$£]")
_LEADING_DECIMAL = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_LIST_SEPARATORS = re.compile(r"[;,/|\n]+")


@dataclass(frozen=True)
class CoercedDate:
    date: str  # ISO YYYY-MM-DD
    was_detected: bool


def _is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def _is_blank(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, float) and math.isnan(val):
        return True
    return isinstance(val, str) and val.strip() == ""


def _valid_iso(year: str, month: str, day: str) -> str | None:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def coerce_date(val: Any, fallback: str) -> CoercedDate:
    """Best-effort date parse; ``fallback`` with ``was_detected=False`` on failure.

    Accepted inputs, in order:
    - date / datetime cells (including pandas Timestamps)
    - spreadsheet serial numbers (``val - 25569`` days after 1970-01-01)
    - strings starting with ``YYYY-MM-DD`` (first 10 characters are kept)
    - ``D/M/YYYY``, ``D-M-YYYY``, ``D.M.YYYY`` and ``YYYY/M/D`` variants
    """
    if isinstance(val, datetime):
        return CoercedDate(val.date().isoformat(), True)
    if isinstance(val, date):
        return CoercedDate(val.isoformat(), True)
    if _is_blank(val):
        return CoercedDate(fallback, False)

    if _is_number(val):
        try:
            moment = _UNIX_EPOCH + timedelta(days=float(val) - SERIAL_EPOCH_OFFSET_DAYS)
        except (OverflowError, ValueError):
            return CoercedDate(fallback, False)
        return CoercedDate(moment.date().isoformat(), True)

    if isinstance(val, str):
        text = val.strip()
        if _ISO_PREFIX.match(text):
            return CoercedDate(text[:10], True)
        parts = _DATE_SEPARATORS.split(text)
        if len(parts) == 3 and all(p.isdigit() for p in parts):
            if len(parts[0]) == 4:
                year, month, day = parts
            else:
                day, month, year = parts
            if len(year) == 4:
                iso = _valid_iso(year, month.zfill(2), day.zfill(2))
                if iso is not None:
                    return CoercedDate(iso, True)

    return CoercedDate(fallback, False)


def coerce_amount(val: Any) -> float:
    """Parse a currency cell such as ``"1 234,56 MAD"``; unparsable -> 0.0.

    Negative values are returned as is; admissibility is the caller's call.
    """
    if val is None or isinstance(val, bool):
        return 0.0
    if _is_number(val):
        number = float(val)
        return 0.0 if math.isnan(number) else number
    text = _AMOUNT_NOISE.sub("", str(val)).replace(",", ".", 1)
    match = _LEADING_DECIMAL.match(text)
    if match is None:
        return 0.0
    return float(match.group(0))


def coerce_list(val: Any) -> tuple[str, ...]:
    """Split free text on ``; , / |`` or newlines into trimmed, non-empty items."""
    if _is_blank(val):
        return ()
    return tuple(p.strip() for p in _LIST_SEPARATORS.split(str(val)) if p.strip())


def coerce_text(val: Any) -> str:
    """Cell as display text. Phone numbers typed as numbers lose their ``.0``."""
    if _is_blank(val):
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    if isinstance(val, datetime):
        return val.date().isoformat()
    if isinstance(val, date):
        return val.isoformat()
    return str(val).strip()
