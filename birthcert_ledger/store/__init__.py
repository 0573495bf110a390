"""
Versioned state store backends.

Provides in-memory, JSONL file and SQLite implementations of the
append-only key-value store the record engines run against.

Example:
    >>> from birthcert_ledger.store import SQLiteVersionedStore, SQLiteStoreConfig
    >>> store = await SQLiteVersionedStore.create(SQLiteStoreConfig(db_path="ledger.db"))
    >>> async with store.transaction() as tx_id:
    ...     await store.put("BC001", b'{"docType": "birthCert"}')
"""

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
from .factory import create_store
from .jsonl import JsonlVersionedStore
from .memory import InMemoryVersionedStore
from .sqlite import SQLiteStoreConfig, SQLiteVersionedStore

__all__ = [
    # Interface
    "VersionedStateStore",
    "ResultCursor",
    "SnapshotCursor",
    "Selector",
    "KeyValue",
    "KeyModification",
    "CursorStep",
    "Transaction",
    # Implementations
    "InMemoryVersionedStore",
    "JsonlVersionedStore",
    "SQLiteVersionedStore",
    "SQLiteStoreConfig",
    "create_store",
]
