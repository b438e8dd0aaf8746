"""DuckDB-backed key/value storage for serialized tracker state."""
from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path

import duckdb

from jobtracker.config import settings

logger = logging.getLogger(__name__)

_con: duckdb.DuckDBPyConnection | None = None
_lock = threading.Lock()


def get_connection() -> duckdb.DuckDBPyConnection:
    global _con
    if _con is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        _con = duckdb.connect(str(settings.db_path))
        _initialize_tables(_con)
        logger.info("DuckDB connected at %s", settings.db_path)
    return _con


def _initialize_tables(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key VARCHAR PRIMARY KEY,
            value VARCHAR,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)


def close() -> None:
    global _con
    if _con:
        _con.close()
        _con = None


class DuckDBKeyValueStore:
    """Stores opaque text blobs by key in a single DuckDB table.

    Pass ``database`` to use a dedicated connection (``":memory:"`` or a file
    path); otherwise the shared module connection is used.
    """

    def __init__(self, database: str | Path | None = None) -> None:
        self._con: duckdb.DuckDBPyConnection | None = None
        if database is not None:
            self._con = duckdb.connect(str(database))
            _initialize_tables(self._con)

    def _connection(self) -> duckdb.DuckDBPyConnection:
        return self._con if self._con is not None else get_connection()

    def _get(self, key: str) -> str | None:
        with _lock:
            row = self._connection().execute(
                "SELECT value FROM kv_store WHERE key = ?", [key]
            ).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with _lock:
            self._connection().execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT (key) DO UPDATE
                SET value = excluded.value, updated_at = excluded.updated_at
                """,
                [key, value],
            )

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    def close(self) -> None:
        if self._con is not None:
            self._con.close()
            self._con = None
