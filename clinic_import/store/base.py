from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

"""Record store interface consumed by the import core.

The importer only calls ``list`` (existing patients) and ``save``; the
delete operations complete the interface shared by both backends.
"""

__all__ = [
    "Record",
    "RecordStore",
    "StoreError",
    "ENTITIES",
]

Record = dict[str, Any]

ENTITIES = ("patients", "expenses", "invoices")


class StoreError(Exception):
    """Raised by a backend when a read or write is rejected."""


class RecordStore(Protocol):
    def list(self, entity: str) -> list[Record]: ...

    def save(self, entity: str, record: Record) -> None:
        """Insert or replace ``record`` (matched on its ``id``)."""
        ...

    def delete(self, entity: str, record_id: str) -> None: ...

    def delete_bulk(self, entity: str, record_ids: Sequence[str]) -> None: ...

    def close(self) -> None: ...


def check_entity(entity: str) -> str:
    if entity not in ENTITIES:
        raise StoreError(f"unknown entity: {entity}")
    return entity
