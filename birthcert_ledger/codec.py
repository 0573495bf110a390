"""
JSON codec for ledger documents.

The store holds raw bytes; records are written as compact UTF-8 JSON.
Query results tolerate legacy non-JSON payloads by falling back to the
raw string, history replay does not.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .exceptions import DecodeError

logger = logging.getLogger(__name__)


class RecordCodec:
    """Encode and decode stored documents."""

    encoding = "utf-8"

    def encode(self, document: dict[str, Any]) -> bytes:
        """Serialize a document to bytes, keeping its key order."""
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode(
            self.encoding
        )

    def decode(self, payload: bytes, key: str | None = None) -> dict[str, Any]:
        """Deserialize bytes to a document.

        Args:
            payload: Raw stored bytes
            key: Store key, for error context

        Raises:
            DecodeError: If the payload is not a UTF-8 JSON object
        """
        try:
            data = json.loads(payload.decode(self.encoding))
        except UnicodeDecodeError as e:
            raise DecodeError("payload is not valid UTF-8", key, e) from e
        except json.JSONDecodeError as e:
            raise DecodeError("payload is not valid JSON", key, e) from e

        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}", key)
        return data

    def decode_lenient(self, payload: bytes, key: str | None = None) -> dict[str, Any] | str:
        """Deserialize bytes, returning the raw string if it is not a document."""
        try:
            return self.decode(payload, key)
        except DecodeError as e:
            logger.debug(f"Returning raw payload for {key}: {e.reason}")
            return payload.decode(self.encoding, errors="replace")
