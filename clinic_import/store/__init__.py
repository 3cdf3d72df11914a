from __future__ import annotations

from pathlib import Path

from ..models.config_models import ImportConfig
from .base import Record, RecordStore, StoreError
from .local import LocalJsonStore

__all__ = [
    "Record",
    "RecordStore",
    "StoreError",
    "LocalJsonStore",
    "open_store",
]


def open_store(config: ImportConfig) -> RecordStore:
    """Open the backend selected by ``config.store.backend``."""
    if config.store.backend == "postgres":
        from .postgres import PostgresStore

        return PostgresStore.connect(config.database)
    return LocalJsonStore(Path(config.store.local_path))
