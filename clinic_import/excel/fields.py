from __future__ import annotations

import re
import unicodedata
from collections.abc import Collection, Iterable, Mapping
from typing import Any, TypeVar

"""Header / identity normalization and keyword-driven field extraction.

Source spreadsheets have no fixed schema: a column answering "last name" may
be titled "Nom", "NOM ", "Nom du patient" or "Nóm". Every comparison between
a header (or a name) and a keyword goes through ``normalize`` so that all of
these collapse to the same token.
"""

__all__ = [
    "normalize",
    "extract_field",
    "find_header",
    "match_vocabulary",
]

T = TypeVar("T")

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(value: Any) -> str:
    """Casefold, strip accents and drop every non ``[a-z0-9]`` character.

    ``None`` normalizes to the empty string. The function is idempotent:
    ``normalize(normalize(s)) == normalize(s)``.
    """
    if value is None:
        return ""
    text = str(value).lower().strip()
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped)


def find_header(
    headers: Iterable[str], keywords: Iterable[str], exclude: Collection[str] = ()
) -> str | None:
    """Return the header answering ``keywords`` (exact match, then containment).

    Headers are scanned in column order, so ties go to the leftmost column.
    Headers listed in ``exclude`` are never returned.
    """
    wanted = [k for k in (normalize(kw) for kw in keywords) if k]
    if not wanted:
        return None
    normalized = [(h, normalize(h)) for h in headers if h not in exclude]

    for header, norm in normalized:
        if norm in wanted:
            return header
    for header, norm in normalized:
        if any(kw in norm for kw in wanted):
            return header
    return None


def extract_field(row: Mapping[str, Any], keywords: Iterable[str], exclude: Collection[str] = ()) -> Any:
    """Value of the column answering ``keywords`` in ``row``, else ``None``."""
    header = find_header(row.keys(), keywords, exclude)
    if header is None:
        return None
    return row[header]


def match_vocabulary(
    text: Any, vocabulary: Iterable[tuple[Iterable[str], T]], default: T
) -> T:
    """First vocabulary value whose fragment occurs in the normalized ``text``."""
    norm = normalize(text)
    if not norm:
        return default
    for fragments, value in vocabulary:
        if any(f in norm for f in fragments):
            return value
    return default
