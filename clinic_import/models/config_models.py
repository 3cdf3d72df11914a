from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the clinic spreadsheet importer.

Populated by ``clinic_import.config.loader.load_config`` from
``config/import.yml`` after JSON Schema validation.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection settings.

    Used as fallback when environment variables are not set.
    Environment variables (DATABASE_URL / PGDSN / PG*) take precedence.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class StoreConfig:
    """Which record store backend is active for the process."""
    backend: str = "local"  # local | postgres
    local_path: str = "./data/store"


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    store: StoreConfig
    database: DatabaseConfig
    header_scan_rows: int = 10
    birth_date_placeholder: str = "1990-01-01"
    logs_dir: str = "./logs"
