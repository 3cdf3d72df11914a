# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from clinic_import.logging.init import reset_logging
from clinic_import.store.base import StoreError


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("CLINIC_STORE_BACKEND", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """store:
  backend: local
  local_path: ./data/store
database:
  host: localhost
  port: 5432
  user: clinic
  password: secret
  database: clinic
import:
  header_scan_rows: 10
  birth_date_placeholder: "1990-01-01"
logs_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


def _write_workbook(directory: Path, name: str, rows: list[list[object]]) -> Path:
    p = directory / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Feuil1", header=False, index=False)
    return p


@pytest.fixture()
def make_excel():
    """Factory writing ``rows`` as the first sheet of a new workbook (no header applied)."""
    return _write_workbook


class MemoryStore:
    """In-memory RecordStore; saves whose call number is in ``fail_on_calls`` are rejected."""

    def __init__(self) -> None:
        self.data: dict[str, list[dict]] = {}
        self.saved: list[tuple[str, dict]] = []
        self.fail_on_calls: set[int] = set()
        self.closed = False
        self._calls = 0

    def list(self, entity: str) -> list[dict]:
        return list(self.data.get(entity, []))

    def save(self, entity: str, record: dict) -> None:
        self._calls += 1
        if self._calls in self.fail_on_calls:
            raise StoreError(f"rejected save #{self._calls}")
        self.data.setdefault(entity, []).append(record)
        self.saved.append((entity, record))

    def delete(self, entity: str, record_id: str) -> None:
        self.delete_bulk(entity, [record_id])

    def delete_bulk(self, entity: str, record_ids) -> None:
        ids = set(record_ids)
        self.data[entity] = [r for r in self.data.get(entity, []) if r.get("id") not in ids]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()
