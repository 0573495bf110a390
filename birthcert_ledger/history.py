"""
Point reads and revision history of birth certificates.
"""

from __future__ import annotations

import json
import logging

from .codec import RecordCodec
from .exceptions import NotFoundError
from .iterators import drain_history
from .models import HistoryEntry
from .store.base import VersionedStateStore

logger = logging.getLogger(__name__)


class HistoryReconstructor:
    """Reads the latest version or the full version log of a record."""

    def __init__(self, store: VersionedStateStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()

    async def get_by_id(self, record_id: str) -> bytes:
        """Return the latest version's raw bytes, undecoded.

        Raises:
            NotFoundError: If the key holds no live version
        """
        value = await self.store.get(record_id)
        if not value:
            raise NotFoundError(record_id)
        return value

    async def get_history(self, record_id: str) -> list[HistoryEntry]:
        """Replay a record's version log, oldest first.

        Returns:
            One snapshot per version, including delete markers

        Raises:
            NotFoundError: If the key was never written
            DecodeError: If any stored version is not a JSON document
        """
        logger.info(f"Fetching history for birth certificate with ID: {record_id}")
        cursor = await self.store.history_of(record_id)
        history = await drain_history(cursor, self.codec, key=record_id)
        if not history:
            raise NotFoundError(record_id)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"History for ID {record_id}: "
                f"{json.dumps([entry.to_dict() for entry in history], default=str)}"
            )
        return history
