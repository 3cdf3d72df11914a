from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

import psycopg2
from psycopg2.extras import Json

from ..models.config_models import DatabaseConfig
from .base import Record, StoreError, check_entity

"""PostgreSQL record store.

Each entity lives in its own table ``(id text primary key, data jsonb)``.
``save`` is an upsert so re-saving a record replaces it, matching the
remote service the web client talks to. Every statement commits on its
own: a rejected row never rolls back rows saved before it.
"""

logger = logging.getLogger(__name__)

CREATE_SQL = "CREATE TABLE IF NOT EXISTS {table} (id text PRIMARY KEY, data jsonb NOT NULL)"
SELECT_SQL = "SELECT data FROM {table} ORDER BY id"
UPSERT_SQL = (
    "INSERT INTO {table} (id, data) VALUES (%s, %s) "
    "ON CONFLICT (id) DO UPDATE SET data = EXCLUDED.data"
)
DELETE_SQL = "DELETE FROM {table} WHERE id = ANY(%s)"


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the connection string.

    Priority:
        1. DATABASE_URL / PGDSN (whole DSN), then ``database.dsn``
        2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. the ``database`` section of config/import.yml
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


class PostgresStore:
    def __init__(self, conn: Any) -> None:
        self.conn = conn
        self._ready: set[str] = set()

    @classmethod
    def connect(cls, db_cfg: DatabaseConfig) -> PostgresStore:
        try:
            conn = psycopg2.connect(resolve_dsn(db_cfg))
        except psycopg2.Error as e:
            raise StoreError(f"cannot connect to database: {e}") from e
        return cls(conn)

    def _execute(self, sql: str, params: tuple[Any, ...] | None = None, fetch: bool = False) -> Any:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                rows = cur.fetchall() if fetch else None
            self.conn.commit()
            return rows
        except psycopg2.Error as e:
            self.conn.rollback()
            raise StoreError(str(e).strip()) from e

    def _table(self, entity: str) -> str:
        table = check_entity(entity)
        if table not in self._ready:
            self._execute(CREATE_SQL.format(table=table))
            self._ready.add(table)
        return table

    def list(self, entity: str) -> list[Record]:
        rows = self._execute(SELECT_SQL.format(table=self._table(entity)), fetch=True)
        return [r[0] for r in rows]

    def save(self, entity: str, record: Record) -> None:
        if not record.get("id"):
            raise StoreError("record has no id")
        self._execute(UPSERT_SQL.format(table=self._table(entity)), (record["id"], Json(record)))
        logger.debug("saved %s id=%s", entity, record["id"])

    def delete(self, entity: str, record_id: str) -> None:
        self.delete_bulk(entity, [record_id])

    def delete_bulk(self, entity: str, record_ids: Sequence[str]) -> None:
        if not record_ids:
            return
        self._execute(DELETE_SQL.format(table=self._table(entity)), (list(record_ids),))

    def close(self) -> None:
        try:
            self.conn.close()
        except psycopg2.Error:  # pragma: no cover
            logger.debug("error closing connection", exc_info=True)
