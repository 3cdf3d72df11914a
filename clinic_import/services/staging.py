from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator
from typing import Any

from ..models.drafts import Draft, ImportKind

"""Staging area between mapping and commit.

The batch is owned by one import session. The reviewer removes or edits
rows by their position in the preview; indexes shift after a removal, as in
any list.
"""

__all__ = [
    "StagedBatch",
]


class StagedBatch:
    def __init__(self, kind: ImportKind, drafts: Iterable[Draft] = ()) -> None:
        self.kind = kind
        self._drafts: list[Draft] = list(drafts)

    def __len__(self) -> int:
        return len(self._drafts)

    def __iter__(self) -> Iterator[Draft]:
        return iter(self._drafts)

    def __getitem__(self, index: int) -> Draft:
        return self._drafts[index]

    @property
    def drafts(self) -> tuple[Draft, ...]:
        return tuple(self._drafts)

    def remove(self, index: int) -> Draft:
        """Drop the row at ``index`` and return it."""
        if not 0 <= index < len(self._drafts):
            raise IndexError(f"no staged row at index {index}")
        return self._drafts.pop(index)

    def remove_many(self, indexes: Iterable[int]) -> list[Draft]:
        """Drop several rows given by their current indexes."""
        wanted = sorted(set(indexes), reverse=True)
        for i in wanted:
            if not 0 <= i < len(self._drafts):
                raise IndexError(f"no staged row at index {i}")
        return [self._drafts.pop(i) for i in wanted][::-1]

    def replace(self, index: int, **changes: Any) -> Draft:
        """Edit the row at ``index`` (fields by name) and return the new draft."""
        if not 0 <= index < len(self._drafts):
            raise IndexError(f"no staged row at index {index}")
        updated = dataclasses.replace(self._drafts[index], **changes)
        self._drafts[index] = updated
        return updated

    def needs_review(self) -> list[int]:
        """Indexes of rows carrying a sentinel name or a fallback date."""
        return [i for i, d in enumerate(self._drafts) if d.needs_review]

    def discard(self) -> None:
        self._drafts.clear()
