"""
Selector queries over the latest versions of stored records.

All queries are single field-equality selectors delegated to the store.
Results are drained into a list in store order.
"""

from __future__ import annotations

import logging
from typing import Any

from .codec import RecordCodec
from .iterators import drain_query_results
from .models import DOC_TYPE, QueryResult
from .store.base import Selector, VersionedStateStore

logger = logging.getLogger(__name__)


class QueryEngine:
    """Builds selectors and runs them against a versioned store."""

    def __init__(self, store: VersionedStateStore, codec: RecordCodec | None = None) -> None:
        self.store = store
        self.codec = codec or RecordCodec()

    async def run(self, selector: Selector) -> list[QueryResult]:
        """Execute a selector and drain the cursor."""
        logger.debug(f"Running query {selector.to_query_string()}")
        cursor = await self.store.query(selector)
        return await drain_query_results(cursor, self.codec)

    async def query_all(self) -> list[QueryResult]:
        """All birth certificates, scoped by the ``docType`` discriminator."""
        return await self.run(Selector({"docType": DOC_TYPE}))

    async def query_by_user(self, user_name: str) -> list[QueryResult]:
        """Certificates whose ``name`` equals the given value.

        Matches on the subject's ``name`` field, not ``userName``.
        """
        return await self.run(Selector({"name": user_name}))

    async def query_by_field(self, field_name: str, field_value: Any) -> list[QueryResult]:
        """Certificates matching one field equality.

        The field name is passed to the store verbatim and is trusted;
        unknown fields match nothing. Other document types sharing the
        store are not filtered out.
        """
        return await self.run(Selector({field_name: field_value}))
