"""
Birth certificate contract.

The public surface other layers call. Each operation runs as one
transaction against the store and passes through an error boundary
that logs the specific cause under a coarse operation message.

Ledger errors (validation, conflict, not found, decode, store) keep
their type so callers can tell them apart; anything else raised by the
store is wrapped in StoreError carrying the coarse message.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from .codec import RecordCodec
from .exceptions import LedgerError, StoreError, ValidationError
from .history import HistoryReconstructor
from .lifecycle import RecordLifecycleManager
from .logging_utils import RecordLoggerAdapter
from .models import CREATE_ARGUMENTS, UPDATE_ARGUMENTS, HistoryEntry, QueryResult
from .query import QueryEngine
from .store.base import VersionedStateStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def operation_boundary(
    operation: str, message: str, **context: Any
) -> AsyncIterator[RecordLoggerAdapter]:
    """Log and normalise failures of one contract operation.

    Yields:
        A logger carrying the operation context

    Raises:
        LedgerError: The original ledger error, tagged with the operation
        StoreError: Wrapping any other exception, with ``message`` as its text
    """
    log = RecordLoggerAdapter(logger, {"operation": operation, **context})
    try:
        yield log
    except LedgerError as e:
        e.details["contract_operation"] = operation
        log.error(f"{message}: {e}", exc_info=True)
        raise
    except Exception as e:
        log.error(f"{message}: {e}", exc_info=True)
        raise StoreError(operation, context.get("record_id"), e, message) from e


def _bind_arguments(fields: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Check keyword arguments against a field set; absent ones become empty."""
    for name in fields:
        if name not in allowed:
            if name == "user_name":
                raise ValidationError("userName", "cannot be changed after creation")
            raise ValidationError(name, "unexpected field")
    return {name: fields.get(name, "") for name in allowed}


class BirthCertContract:
    """Record management for birth certificates on a versioned ledger.

    Example:
        >>> async with InMemoryVersionedStore() as store:
        ...     contract = BirthCertContract(store)
        ...     tx_id = await contract.create_record("BC001", user_name="alice", ...)
        ...     history = await contract.get_history("BC001")
    """

    def __init__(self, store: VersionedStateStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()
        self.lifecycle = RecordLifecycleManager(store, self.codec)
        self.queries = QueryEngine(store, self.codec)
        self.history = HistoryReconstructor(store, self.codec)

    async def init_ledger(self) -> None:
        """Mark the ledger as initialized. Performs no writes."""
        logger.info("Ledger initialized")

    async def create_record(self, record_id: str, **fields: str) -> str:
        """Create a birth certificate.

        Keyword arguments are the remaining twelve fields in snake_case
        (``user_name``, ``name``, ``father_name``, ...).

        Returns:
            Transaction ID of the write
        """
        async with operation_boundary(
            "create_record", "Failed to create birth certificate", record_id=record_id
        ) as log:
            async with self.store.transaction() as tx_id:
                await self.lifecycle.create(
                    record_id, **_bind_arguments(fields, CREATE_ARGUMENTS)
                )
            log.bind(tx_id=tx_id).debug("Record created")
            return tx_id

    async def update_record(self, record_id: str, **fields: str) -> str:
        """Update a birth certificate; ``user_name`` cannot be changed.

        Returns:
            Transaction ID of the write
        """
        async with operation_boundary(
            "update_record", "Failed to update birth certificate", record_id=record_id
        ) as log:
            async with self.store.transaction() as tx_id:
                await self.lifecycle.update(
                    record_id, **_bind_arguments(fields, UPDATE_ARGUMENTS)
                )
            log.bind(tx_id=tx_id).debug("Record updated")
            return tx_id

    async def list_all(self) -> list[QueryResult]:
        """Every birth certificate on the ledger."""
        async with operation_boundary("list_all", "Failed to fetch certificates"):
            async with self.store.transaction():
                return await self.queries.query_all()

    async def list_by_user(self, user_name: str) -> list[QueryResult]:
        """Certificates whose subject ``name`` equals ``user_name``."""
        async with operation_boundary(
            "list_by_user", "Failed to fetch user certificates", user_name=user_name
        ):
            async with self.store.transaction():
                return await self.queries.query_by_user(user_name)

    async def list_by_field(self, field_name: str, field_value: Any) -> list[QueryResult]:
        """Certificates matching a caller-chosen field equality."""
        async with operation_boundary(
            "list_by_field",
            "Failed to fetch certificates by field",
            field_name=field_name,
        ):
            async with self.store.transaction():
                return await self.queries.query_by_field(field_name, field_value)

    async def get_record(self, record_id: str) -> bytes:
        """Raw bytes of the latest version."""
        async with operation_boundary(
            "get_record", "Failed to fetch birth certificate", record_id=record_id
        ):
            async with self.store.transaction():
                return await self.history.get_by_id(record_id)

    async def get_record_document(self, record_id: str) -> dict[str, Any]:
        """Latest version decoded to a document."""
        async with operation_boundary(
            "get_record_document", "Failed to fetch birth certificate", record_id=record_id
        ):
            async with self.store.transaction():
                value = await self.history.get_by_id(record_id)
            return self.codec.decode(value, record_id)

    async def get_history(self, record_id: str) -> list[HistoryEntry]:
        """Every version of a certificate, oldest first."""
        async with operation_boundary(
            "get_history",
            "Failed to fetch birth certificate history",
            record_id=record_id,
        ):
            async with self.store.transaction():
                return await self.history.get_history(record_id)
