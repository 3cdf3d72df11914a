from __future__ import annotations

import io
import logging
import math
from collections.abc import Collection, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

import chardet
import pandas as pd

from ..models.row_data import RowData
from .fields import normalize

"""Workbook reader and header-row location.

Only the first sheet is read. The sheet is loaded without a header
(``header=None``) as a raw grid; the header row is located afterwards
because exported rosters often carry a title banner or blank rows above
the real column titles.
"""

__all__ = [
    "ImportFileError",
    "UnreadableFileError",
    "EmptySheetError",
    "RawGrid",
    "DEFAULT_HEADER_SCAN_ROWS",
    "read_first_sheet",
    "locate_header_row",
    "to_headered_rows",
]

logger = logging.getLogger(__name__)

RawGrid = tuple[tuple[Any, ...], ...]

DEFAULT_HEADER_SCAN_ROWS = 10
EMPTY_HEADER = "__EMPTY"

# Decode attempts for text exports: UTF-8 first, then the Windows code page
# French Excel uses for "CSV (separateur: point-virgule)"
CSV_FALLBACK_ENCODING = "cp1252"
CHARDET_MIN_CONFIDENCE = 0.9

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv", ".txt"}


class ImportFileError(Exception):
    """Base error for a file that cannot be staged."""


class UnreadableFileError(ImportFileError):
    """Corrupt, password protected or unsupported workbook."""


class EmptySheetError(ImportFileError):
    """The first sheet holds no data rows below its header."""


def _clean_cell(val: Any) -> Any:
    # NaN / NaT -> None, Timestamp -> datetime, numpy scalars -> builtins
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        if pd.isna(val):
            return None
        return val.to_pydatetime()
    if isinstance(val, float) and math.isnan(val):
        return None
    if isinstance(val, str):
        return val if val.strip() else None
    if isinstance(val, (datetime, date, int, float)):
        return val
    if pd.isna(val):
        return None
    if hasattr(val, "item"):
        return val.item()
    return val


def _decode_text(raw: bytes, name: str = "") -> str:
    """Decode a text export: UTF-8 (BOM stripped), a confident chardet guess, cp1252.

    latin-1 maps every byte, so decoding never fails outright.
    """
    guess = chardet.detect(raw)
    detected = guess.get("encoding") if (guess.get("confidence") or 0.0) >= CHARDET_MIN_CONFIDENCE else None
    for encoding in ("utf-8-sig", detected, CSV_FALLBACK_ENCODING, "latin-1"):
        if not encoding:
            continue
        try:
            text = raw.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue
        logger.debug("%s decoded as %s", name, encoding)
        return text.replace("\x00", "")
    raise UnreadableFileError(f"cannot decode {name}")  # pragma: no cover


def read_first_sheet(path: Path) -> RawGrid:
    """Read the first sheet of ``path`` as a raw grid (no header applied).

    Raises:
        UnreadableFileError: file missing, corrupt, encrypted or of an
            unsupported format.
    """
    suffix = path.suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            # sep=None sniffs ';' vs ',' (French exports use ';')
            df = pd.read_csv(
                io.StringIO(_decode_text(path.read_bytes(), path.name)),
                header=None, sep=None, engine="python", keep_default_na=False, dtype=object
            )
        elif suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(path, sheet_name=0, header=None, keep_default_na=False)
        else:
            raise UnreadableFileError(f"unsupported file type: {path.name}")
    except ImportFileError:
        raise
    except Exception as e:
        raise UnreadableFileError(f"cannot read {path.name}: {e}") from e

    return tuple(tuple(_clean_cell(v) for v in row) for row in df.itertuples(index=False, name=None))


def locate_header_row(
    grid: Sequence[Sequence[Any]],
    signal_headers: Collection[str],
    max_scan: int = DEFAULT_HEADER_SCAN_ROWS,
) -> int:
    """Index of the first row (within ``max_scan``) holding a signal header.

    A row qualifies when one of its cells normalizes exactly to one of
    ``signal_headers``. Falls back to 0 when no row qualifies.
    """
    signals = {normalize(s) for s in signal_headers} - {""}
    for index, row in enumerate(grid[:max_scan]):
        if any(normalize(cell) in signals for cell in row if cell is not None):
            return index
    return 0


def _header_names(header_row: Sequence[Any]) -> list[str]:
    names: list[str] = []
    seen: dict[str, int] = {}
    for cell in header_row:
        base = str(cell).strip() if cell is not None else EMPTY_HEADER
        if not base:
            base = EMPTY_HEADER
        count = seen.get(base, 0)
        seen[base] = count + 1
        names.append(base if count == 0 else f"{base}_{count}")
    return names


def to_headered_rows(grid: Sequence[Sequence[Any]], header_index: int) -> list[RowData]:
    """Turn the rows below ``header_index`` into header -> value mappings.

    Every header is present in every mapping; a blank cell maps to ``None``
    so that an empty "Nom" column still wins the exact header match.
    Fully blank rows are skipped. ``RowData.row_number`` is the 1-based
    sheet row.
    """
    if header_index >= len(grid):
        return []
    headers = _header_names(grid[header_index])
    rows: list[RowData] = []
    for offset, raw in enumerate(grid[header_index + 1:], start=header_index + 2):
        values = {h: (raw[i] if i < len(raw) else None) for i, h in enumerate(headers)}
        if all(v is None for v in values.values()):
            continue
        rows.append(RowData(row_number=offset, values=values))
    return rows
