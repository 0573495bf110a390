"""
In-memory versioned state store.

Keeps the full version log of every key in process memory.
Useful for tests and for embedding the ledger engines without
persistence.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .base import (
    KeyModification,
    KeyValue,
    ResultCursor,
    Selector,
    SnapshotCursor,
    Transaction,
    VersionedStateStore,
)

logger = logging.getLogger(__name__)


def parse_document(value: bytes) -> Any:
    """Parse a stored value for selector matching; None if it is not JSON."""
    try:
        return json.loads(value.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


class InMemoryVersionedStore(VersionedStateStore):
    """Append-only store backed by a dict of per-key version lists.

    Query results come back in key insertion order. Cursors read a
    snapshot taken when the cursor is opened.
    """

    def __init__(self) -> None:
        super().__init__()
        self._versions: dict[str, list[KeyModification]] = {}

    async def _append_version(
        self, key: str, value: bytes, tx: Transaction, is_delete: bool
    ) -> None:
        entry = KeyModification(
            tx_id=tx.tx_id,
            timestamp=tx.timestamp,
            is_delete=is_delete,
            value=bytes(value),
        )
        self._versions.setdefault(key, []).append(entry)
        logger.debug(f"Appended version {len(self._versions[key])} of {key} in tx {tx.tx_id}")

    def _latest(self, key: str) -> KeyModification | None:
        versions = self._versions.get(key)
        if not versions:
            return None
        latest = versions[-1]
        if latest.is_delete:
            return None
        return latest

    async def get(self, key: str) -> bytes | None:
        latest = self._latest(key)
        return latest.value if latest is not None else None

    async def query(self, selector: Selector) -> ResultCursor:
        matches: list[KeyValue] = []
        for key in self._versions:
            latest = self._latest(key)
            if latest is None:
                continue
            if selector.matches(parse_document(latest.value)):
                matches.append(KeyValue(key=key, value=latest.value))
        return SnapshotCursor(matches)

    async def history_of(self, key: str) -> ResultCursor:
        return SnapshotCursor(list(self._versions.get(key, [])))

    def version_count(self, key: str) -> int:
        """Number of log entries recorded for a key, delete markers included."""
        return len(self._versions.get(key, []))
