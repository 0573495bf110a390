"""
SQLite versioned state store.

Every write is a new row in an append-only ``versions`` table; the latest
row per key is its live version. Stored values that parse as JSON objects
are mirrored into a ``document`` column so selectors can be evaluated
with ``json_extract``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..exceptions import StoreError
from .base import (
    CursorStep,
    KeyModification,
    KeyValue,
    ResultCursor,
    Selector,
    SnapshotCursor,
    Transaction,
    VersionedStateStore,
)
from .memory import parse_document

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

_CREATE_VERSIONS_SQL = """
CREATE TABLE IF NOT EXISTS versions (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL,
    tx_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    is_delete INTEGER NOT NULL DEFAULT 0,
    value BLOB NOT NULL,
    document TEXT
)
"""

# Latest row per key, excluding keys whose latest row is a delete marker
_LATEST_SQL = """
SELECT v.key, v.value FROM versions v
JOIN (SELECT key, MAX(seq) AS seq FROM versions GROUP BY key) latest
  ON v.seq = latest.seq
WHERE v.is_delete = 0
"""


@dataclass
class SQLiteStoreConfig:
    """Configuration for the SQLite store."""

    db_path: str | Path = ":memory:"
    page_size: int = DEFAULT_PAGE_SIZE


class SQLiteCursor(ResultCursor):
    """Cursor that pages rows out of an aiosqlite cursor."""

    def __init__(
        self,
        cursor: aiosqlite.Cursor,
        convert: Callable[[Any], KeyValue | KeyModification],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__()
        self._cursor = cursor
        self._convert = convert
        self._page_size = page_size
        self._buffer: list[Any] = []
        self._exhausted = False

    async def advance(self) -> CursorStep:
        if self._released:
            raise StoreError("advance", cause=RuntimeError("Cursor already released"))

        if not self._buffer and not self._exhausted:
            try:
                rows = await self._cursor.fetchmany(self._page_size)
            except sqlite3.Error as e:
                raise StoreError("advance", cause=e) from e
            self._buffer = list(rows)
            if len(self._buffer) < self._page_size:
                self._exhausted = True

        if not self._buffer:
            return CursorStep(done=True)
        return CursorStep(done=False, value=self._convert(self._buffer.pop(0)))

    async def _close(self) -> None:
        self._buffer = []
        await self._cursor.close()


def _row_to_key_value(row: Any) -> KeyValue:
    return KeyValue(key=row[0], value=bytes(row[1]))


def _row_to_modification(row: Any) -> KeyModification:
    return KeyModification(
        tx_id=row[0],
        timestamp=datetime.fromisoformat(row[1]),
        is_delete=bool(row[2]),
        value=bytes(row[3]),
    )


def _json_path(field_name: str) -> str | None:
    """Build a json_extract path for a top-level field; None if unrepresentable."""
    if '"' in field_name:
        return None
    return f'$."{field_name}"'


class SQLiteVersionedStore(VersionedStateStore):
    """
    SQLite-backed append-only store.

    Features:
    - Single file database (or in-memory)
    - Append-only version log with insertion-sequence ordering
    - Selector queries over latest versions via json_extract
    - Paged cursors that hold an open SQLite cursor until released
    """

    def __init__(self, config: SQLiteStoreConfig | None = None) -> None:
        super().__init__()
        self.config = config or SQLiteStoreConfig()
        self.conn: aiosqlite.Connection | None = None
        self._initialized = False

    @classmethod
    async def create(cls, config: SQLiteStoreConfig | None = None) -> SQLiteVersionedStore:
        """Create and initialize a SQLite store."""
        store = cls(config)
        await store.initialize()
        return store

    async def initialize(self) -> None:
        """Open the connection and create the schema."""
        if self._initialized:
            return

        try:
            self.conn = await aiosqlite.connect(str(self.config.db_path))
            await self.conn.execute(_CREATE_VERSIONS_SQL)
            await self.conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_versions_key ON versions(key, seq)"
            )
            await self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError("initialize", str(self.config.db_path), e) from e

        self._initialized = True
        logger.info(f"SQLite ledger initialized at {self.config.db_path}")

    def _require_conn(self, operation: str) -> aiosqlite.Connection:
        if self.conn is None:
            raise StoreError(operation, cause=RuntimeError("Store not initialized"))
        return self.conn

    async def _append_version(
        self, key: str, value: bytes, tx: Transaction, is_delete: bool
    ) -> None:
        conn = self._require_conn("put")
        document = parse_document(value) if not is_delete else None
        document_json = json.dumps(document) if isinstance(document, dict) else None

        try:
            await conn.execute(
                "INSERT INTO versions (key, tx_id, timestamp, is_delete, value, document) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (key, tx.tx_id, tx.timestamp.isoformat(), int(is_delete), value, document_json),
            )
            await conn.commit()
        except sqlite3.Error as e:
            raise StoreError("put", key, e) from e

    async def get(self, key: str) -> bytes | None:
        conn = self._require_conn("get")
        try:
            async with conn.execute(
                "SELECT value, is_delete FROM versions WHERE key = ? ORDER BY seq DESC LIMIT 1",
                (key,),
            ) as cursor:
                row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError("get", key, e) from e

        if row is None or row[1]:
            return None
        return bytes(row[0])

    async def query(self, selector: Selector) -> ResultCursor:
        conn = self._require_conn("query")

        conditions: list[str] = []
        parameters: list[Any] = []
        for field_name, value in selector.fields.items():
            path = _json_path(field_name)
            if path is None:
                return SnapshotCursor([])
            if value is None:
                # json_extract gives SQL NULL for both JSON null and a missing field
                conditions.append("json_type(v.document, ?) = 'null'")
                parameters.append(path)
                continue
            if isinstance(value, (dict, list)):
                # json_extract returns nested values as minified JSON text
                value = json.dumps(value, separators=(",", ":"))
            conditions.append("json_extract(v.document, ?) = ?")
            parameters.extend([path, value])

        sql = _LATEST_SQL
        for condition in conditions:
            sql += f" AND {condition}"
        sql += " ORDER BY v.key"

        try:
            cursor = await conn.execute(sql, parameters)
        except sqlite3.Error as e:
            raise StoreError("query", str(selector), e) from e
        return SQLiteCursor(cursor, _row_to_key_value, self.config.page_size)

    async def history_of(self, key: str) -> ResultCursor:
        conn = self._require_conn("history_of")
        try:
            cursor = await conn.execute(
                "SELECT tx_id, timestamp, is_delete, value FROM versions "
                "WHERE key = ? ORDER BY seq",
                (key,),
            )
        except sqlite3.Error as e:
            raise StoreError("history_of", key, e) from e
        return SQLiteCursor(cursor, _row_to_modification, self.config.page_size)

    async def close(self) -> None:
        """Close the database connection."""
        if self.conn is not None:
            await self.conn.close()
            self.conn = None
        self._initialized = False
