"""
JSONL file-backed versioned state store.

The whole version log lives in one append-only JSONL file. On open the
log is replayed into memory; every write appends one line.

Line format:
    {"key": ..., "txId": ..., "timestamp": ISO-8601, "isDelete": bool,
     "value": base64}
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from datetime import datetime
from pathlib import Path

import aiofiles
import aiofiles.os

from ..exceptions import StoreError
from .base import KeyModification, ResultCursor, Selector, Transaction
from .memory import InMemoryVersionedStore

logger = logging.getLogger(__name__)


class JsonlVersionedStore(InMemoryVersionedStore):
    """Append-only store persisted as a JSONL version log.

    The log is replayed before the first read or write, so a store that
    was never explicitly initialized (or was closed) still sees every
    version already on disk.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the log directory and replay any existing log."""
        async with self._init_lock:
            if self._initialized:
                return

            self._versions = {}
            try:
                await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
                if await aiofiles.os.path.exists(self.path):
                    await self._replay()
            except OSError as e:
                raise StoreError("initialize", str(self.path), e) from e

            self._initialized = True
            logger.info(f"Opened JSONL ledger at {self.path}")

    async def _replay(self) -> None:
        count = 0
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            line_no = 0
            async for line in f:
                line_no += 1
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                    modification = KeyModification(
                        tx_id=entry["txId"],
                        timestamp=datetime.fromisoformat(entry["timestamp"]),
                        is_delete=bool(entry.get("isDelete", False)),
                        value=base64.b64decode(entry.get("value", "")),
                    )
                    key = entry["key"]
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    raise StoreError(
                        "replay", f"{self.path}:{line_no}", e
                    ) from e
                self._versions.setdefault(key, []).append(modification)
                count += 1
        logger.debug(f"Replayed {count} versions from {self.path}")

    async def _append_version(
        self, key: str, value: bytes, tx: Transaction, is_delete: bool
    ) -> None:
        await self.initialize()

        line = json.dumps(
            {
                "key": key,
                "txId": tx.tx_id,
                "timestamp": tx.timestamp.isoformat(),
                "isDelete": is_delete,
                "value": base64.b64encode(value).decode("ascii"),
            }
        )
        try:
            async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
                await f.write(line + "\n")
        except OSError as e:
            raise StoreError("put", key, e) from e

        # Only index the version once it is on disk
        await super()._append_version(key, value, tx, is_delete)

    async def get(self, key: str) -> bytes | None:
        await self.initialize()
        return await super().get(key)

    async def query(self, selector: Selector) -> ResultCursor:
        await self.initialize()
        return await super().query(selector)

    async def history_of(self, key: str) -> ResultCursor:
        await self.initialize()
        return await super().history_of(key)

    async def close(self) -> None:
        self._versions = {}
        self._initialized = False
