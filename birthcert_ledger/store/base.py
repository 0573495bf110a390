"""
Abstract versioned state store interface.

Defines the contract the record engines require from the ledger:
point reads of the latest version, field-equality queries over latest
versions, and the full version log of a key. Every write appends a new
immutable version; nothing is overwritten or removed from history.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..exceptions import StoreError

# Open transactions of the current task, keyed by store identity. Never mutated
# in place; each new transaction sets a fresh mapping.
_open_transactions: ContextVar[Mapping[int, Transaction]] = ContextVar(
    "birthcert_ledger_transactions", default={}
)


@dataclass(frozen=True)
class Selector:
    """Field-equality predicate over stored documents.

    Field names are passed through verbatim. A field the document does not
    carry never matches, so unknown fields yield empty results.
    """

    fields: Mapping[str, Any] = field(default_factory=dict)

    def matches(self, document: Any) -> bool:
        """Check whether a decoded document satisfies every equality."""
        if not isinstance(document, dict):
            return False
        return all(
            name in document and document[name] == value for name, value in self.fields.items()
        )

    def to_query_string(self) -> str:
        """Render as a Mango-style query string (``{"selector": {...}}``)."""
        return json.dumps({"selector": dict(self.fields)})

    def __str__(self) -> str:
        return self.to_query_string()


@dataclass(frozen=True)
class KeyValue:
    """Latest version of a key, as yielded by a query cursor."""

    key: str
    value: bytes


@dataclass(frozen=True)
class KeyModification:
    """One entry of a key's version log."""

    tx_id: str
    timestamp: datetime
    is_delete: bool
    value: bytes


@dataclass(frozen=True)
class CursorStep:
    """Result of advancing a cursor.

    A step may carry a value and signal completion at the same time.
    """

    done: bool
    value: KeyValue | KeyModification | None = None


@dataclass(frozen=True)
class Transaction:
    """An open transaction boundary."""

    tx_id: str
    timestamp: datetime


class ResultCursor(ABC):
    """In-progress read over query or history results.

    Cursors hold store resources until released.
    """

    def __init__(self) -> None:
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @abstractmethod
    async def advance(self) -> CursorStep:
        """Move to the next result.

        Raises:
            StoreError: If the cursor has been released or the read fails
        """
        ...

    async def release(self) -> None:
        """Free the cursor's resources. Further calls are no-ops."""
        if self._released:
            return
        self._released = True
        await self._close()

    async def _close(self) -> None:
        """Backend-specific cleanup."""
        return None


class SnapshotCursor(ResultCursor):
    """Cursor over a materialised list of results."""

    def __init__(self, items: list[KeyValue] | list[KeyModification]) -> None:
        super().__init__()
        self._items = list(items)
        self._position = 0

    async def advance(self) -> CursorStep:
        if self._released:
            raise StoreError("advance", cause=RuntimeError("Cursor already released"))
        if self._position >= len(self._items):
            return CursorStep(done=True)
        item = self._items[self._position]
        self._position += 1
        return CursorStep(done=False, value=item)

    async def _close(self) -> None:
        self._items = []


class VersionedStateStore(ABC):
    """Abstract interface for an append-only, versioned key-value store.

    All store implementations (memory, SQLite, JSONL) must implement
    this interface. Writes are grouped into transactions; each
    transaction gets one ID and one timestamp from the store.
    Transactions on one store run one at a time, so a read and the
    write that depends on it cannot interleave with another writer.
    """

    def __init__(self) -> None:
        self._transaction_lock = asyncio.Lock()

    # =========================================================================
    # Transactions
    # =========================================================================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[str]:
        """Open a transaction boundary, or join the one already open.

        Yields:
            The transaction ID
        """
        async with self._open_transaction() as tx:
            yield tx.tx_id

    @asynccontextmanager
    async def _open_transaction(self) -> AsyncIterator[Transaction]:
        open_transactions = _open_transactions.get()
        current = open_transactions.get(id(self))
        if current is not None:
            yield current
            return

        async with self._transaction_lock:
            tx = Transaction(tx_id=self._new_transaction_id(), timestamp=datetime.now(UTC))
            token = _open_transactions.set({**open_transactions, id(self): tx})
            try:
                yield tx
            finally:
                _open_transactions.reset(token)

    def current_transaction_id(self) -> str:
        """Identify the enclosing write transaction.

        Raises:
            StoreError: If no transaction is open
        """
        current = _open_transactions.get().get(id(self))
        if current is None:
            raise StoreError("current_transaction_id", cause=RuntimeError("No open transaction"))
        return current.tx_id

    def _new_transaction_id(self) -> str:
        return uuid.uuid4().hex

    # =========================================================================
    # Writes
    # =========================================================================

    async def put(self, key: str, value: bytes) -> None:
        """Append a new version of a key.

        Raises:
            StoreError: If the write fails
        """
        if not key:
            raise StoreError("put", cause=ValueError("Key must be non-empty"))
        async with self._open_transaction() as tx:
            await self._append_version(key, value, tx, is_delete=False)

    async def delete(self, key: str) -> None:
        """Append a delete marker for a key.

        The key's history is kept; only its live version goes away.
        """
        async with self._open_transaction() as tx:
            await self._append_version(key, b"", tx, is_delete=True)

    @abstractmethod
    async def _append_version(
        self, key: str, value: bytes, tx: Transaction, is_delete: bool
    ) -> None:
        """Persist one version log entry."""
        ...

    # =========================================================================
    # Reads
    # =========================================================================

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Read the latest live version of a key.

        Returns:
            The stored bytes, or None if the key is absent or deleted
        """
        ...

    @abstractmethod
    async def query(self, selector: Selector) -> ResultCursor:
        """Run a field-equality query over latest live versions.

        Returns:
            Cursor yielding KeyValue steps in store order
        """
        ...

    @abstractmethod
    async def history_of(self, key: str) -> ResultCursor:
        """Open the version log of a key.

        Returns:
            Cursor yielding KeyModification steps oldest first
        """
        ...

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        """Prepare the store for use."""
        return None

    async def close(self) -> None:
        """Close the store and clean up resources."""
        return None

    async def __aenter__(self) -> VersionedStateStore:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
