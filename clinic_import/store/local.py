from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from .base import Record, StoreError, check_entity

logger = logging.getLogger(__name__)

KEY_PREFIX = "cmhe_"


class LocalJsonStore:
    """Durable local cache: one JSON array file per entity.

    Files are named after the web client's storage keys
    (``cmhe_patients.json`` ...). Each write rewrites the whole file through a
    temporary file and ``os.replace``.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, entity: str) -> Path:
        return self.directory / f"{KEY_PREFIX}{check_entity(entity)}.json"

    def list(self, entity: str) -> list[Record]:
        path = self._path(entity)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"cannot read {path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"{path} does not hold a record list")
        return data

    def _write(self, entity: str, records: list[Record]) -> None:
        path = self._path(entity)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"cannot write {path}: {e}") from e

    def save(self, entity: str, record: Record) -> None:
        if not record.get("id"):
            raise StoreError("record has no id")
        records = self.list(entity)
        for i, existing in enumerate(records):
            if existing.get("id") == record["id"]:
                records[i] = record
                break
        else:
            records.append(record)
        self._write(entity, records)
        logger.debug("saved %s id=%s", entity, record["id"])

    def delete(self, entity: str, record_id: str) -> None:
        self.delete_bulk(entity, [record_id])

    def delete_bulk(self, entity: str, record_ids: Sequence[str]) -> None:
        ids = set(record_ids)
        records = self.list(entity)
        kept = [r for r in records if r.get("id") not in ids]
        if len(kept) != len(records):
            self._write(entity, kept)

    def close(self) -> None:  # pragma: no cover (nothing to release)
        pass
