from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DatabaseConfig, ImportConfig, StoreConfig

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults (local store, 10-row header scan, 1990-01-01 birth date)
- CLINIC_STORE_BACKEND overrides store.backend
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")
BACKEND_ENV = "CLINIC_STORE_BACKEND"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or invalid, or the config
            data fails validation (missing keys, wrong types, extra keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    store_raw = data["store"]
    backend = os.getenv(BACKEND_ENV) or store_raw["backend"]
    if backend not in ("local", "postgres"):
        raise ConfigError(f"unknown store backend in {BACKEND_ENV}: {backend}")
    store = StoreConfig(
        backend=backend,
        local_path=store_raw.get("local_path", StoreConfig.local_path),
    )

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )

    import_raw = data.get("import") or {}
    return ImportConfig(
        store=store,
        database=db,
        header_scan_rows=import_raw.get("header_scan_rows", ImportConfig.header_scan_rows),
        birth_date_placeholder=import_raw.get(
            "birth_date_placeholder", ImportConfig.birth_date_placeholder
        ),
        logs_dir=data.get("logs_dir", ImportConfig.logs_dir),
    )
