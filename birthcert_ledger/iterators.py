"""
Cursor draining for query and history results.

Stores hand back cursors that may page through results and hold
resources while open. These helpers advance a cursor to exhaustion,
decode each value, and release the cursor exactly once before
returning, whether draining succeeded or not.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .codec import RecordCodec
from .exceptions import LedgerError, StoreError
from .models import HistoryEntry, QueryResult
from .store.base import CursorStep, KeyModification, KeyValue, ResultCursor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def released(cursor: ResultCursor) -> AsyncIterator[ResultCursor]:
    """Scope a cursor so it is released on every exit path."""
    try:
        yield cursor
    finally:
        await cursor.release()


async def _advance(cursor: ResultCursor) -> CursorStep:
    try:
        return await cursor.advance()
    except LedgerError:
        raise
    except Exception as e:
        raise StoreError("advance", cause=e) from e


async def drain_query_results(
    cursor: ResultCursor, codec: RecordCodec | None = None
) -> list[QueryResult]:
    """Materialise a query cursor into key/record pairs.

    Values that are not JSON documents are returned as raw strings.
    Steps without a value, or with an empty one, are skipped.

    Raises:
        StoreError: If the cursor fails or yields something other than KeyValue
    """
    codec = codec or RecordCodec()
    results: list[QueryResult] = []

    async with released(cursor):
        try:
            while True:
                step = await _advance(cursor)
                if step.value is not None:
                    if not isinstance(step.value, KeyValue):
                        raise StoreError(
                            "drain_query_results",
                            cause=TypeError(f"Unexpected step value {type(step.value).__name__}"),
                        )
                    if step.value.value:
                        record = codec.decode_lenient(step.value.value, step.value.key)
                        results.append(QueryResult(key=step.value.key, record=record))
                if step.done:
                    break
        except LedgerError as e:
            logger.error(f"Error filtering query data: {e}")
            raise

    return results


async def drain_history(
    cursor: ResultCursor, codec: RecordCodec | None = None, key: str | None = None
) -> list[HistoryEntry]:
    """Materialise a version-log cursor into history entries, oldest first.

    Every value is decoded strictly. Delete markers carry ``data=None``.

    Raises:
        DecodeError: If a stored version is not a JSON document
        StoreError: If the cursor fails or yields something other than KeyModification
    """
    codec = codec or RecordCodec()
    history: list[HistoryEntry] = []

    async with released(cursor):
        while True:
            step = await _advance(cursor)
            if step.value is not None:
                modification = step.value
                if not isinstance(modification, KeyModification):
                    raise StoreError(
                        "drain_history",
                        key,
                        TypeError(f"Unexpected step value {type(modification).__name__}"),
                    )
                data = None
                if not modification.is_delete:
                    data = codec.decode(modification.value, key)
                history.append(
                    HistoryEntry(
                        tx_id=modification.tx_id,
                        timestamp=modification.timestamp,
                        is_delete=modification.is_delete,
                        data=data,
                    )
                )
            if step.done:
                break

    return history
