"""Store construction from configuration."""

from __future__ import annotations

from ..config import LedgerConfig, StoreBackend
from .base import VersionedStateStore
from .jsonl import JsonlVersionedStore
from .memory import InMemoryVersionedStore
from .sqlite import SQLiteStoreConfig, SQLiteVersionedStore


async def create_store(config: LedgerConfig | None = None) -> VersionedStateStore:
    """Create and initialize the store selected by the configuration.

    Args:
        config: Ledger configuration (default: from environment)

    Returns:
        An initialized store; the caller owns it and must close it
    """
    if config is None:
        config = LedgerConfig.from_env()

    store: VersionedStateStore
    if config.backend is StoreBackend.SQLITE:
        store = SQLiteVersionedStore(
            SQLiteStoreConfig(db_path=config.db_path, page_size=config.page_size)
        )
    elif config.backend is StoreBackend.JSONL:
        store = JsonlVersionedStore(config.log_path)
    else:
        store = InMemoryVersionedStore()

    await store.initialize()
    return store
