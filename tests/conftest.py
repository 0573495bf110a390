"""
Shared test configuration and fixtures.

Provides store fixtures for every backend and a valid field set for
birth certificates. Store-agnostic tests use the parametrized ``store``
fixture so they run against memory, JSONL and SQLite alike.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from birthcert_ledger.contract import BirthCertContract
from birthcert_ledger.store import (
    CursorStep,
    InMemoryVersionedStore,
    JsonlVersionedStore,
    ResultCursor,
    SQLiteStoreConfig,
    SQLiteVersionedStore,
    VersionedStateStore,
)

logger = logging.getLogger(__name__)


class RecordingCursor(ResultCursor):
    """
    Scripted cursor for testing drain behaviour.

    Replays a fixed list of steps (or raises a given exception when it
    reaches one) and counts how many times release is requested.
    """

    def __init__(self, steps: list[CursorStep | Exception]):
        super().__init__()
        self._steps = list(steps)
        self.release_calls = 0

    async def advance(self) -> CursorStep:
        step = self._steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    async def release(self) -> None:
        self.release_calls += 1
        await super().release()


@pytest.fixture
def birth_fields() -> dict[str, str]:
    """Valid keyword arguments for create_record (everything but the ID)."""
    return {
        "user_name": "alice",
        "name": "Bob Smith",
        "father_name": "John Smith",
        "mother_name": "Jane Smith",
        "dob": "2020-05-01",
        "gender": "male",
        "weight": "3.2kg",
        "country": "India",
        "state": "Karnataka",
        "city": "Bengaluru",
        "hospital_name": "City Hospital",
        "permanent_address": "12 MG Road",
    }


@pytest.fixture
def update_fields(birth_fields: dict[str, str]) -> dict[str, str]:
    """Valid keyword arguments for update_record."""
    fields = dict(birth_fields)
    del fields["user_name"]
    fields["name"] = "Bob A. Smith"
    return fields


@pytest.fixture
async def memory_store() -> AsyncIterator[InMemoryVersionedStore]:
    """Fixture providing an in-memory store."""
    store = InMemoryVersionedStore()
    yield store
    await store.close()


@pytest.fixture
async def sqlite_store() -> AsyncIterator[SQLiteVersionedStore]:
    """Fixture providing an initialized in-memory SQLite store with small pages."""
    store = await SQLiteVersionedStore.create(SQLiteStoreConfig(db_path=":memory:", page_size=2))
    yield store
    await store.close()


@pytest.fixture
async def jsonl_store(tmp_path: Path) -> AsyncIterator[JsonlVersionedStore]:
    """Fixture providing a JSONL store in a temporary directory."""
    store = JsonlVersionedStore(tmp_path / "ledger" / "versions.jsonl")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sqlite", "jsonl"])
async def store(
    request: pytest.FixtureRequest, tmp_path: Path
) -> AsyncIterator[VersionedStateStore]:
    """Fixture providing each store backend in turn."""
    backend: VersionedStateStore
    if request.param == "sqlite":
        backend = SQLiteVersionedStore(SQLiteStoreConfig(db_path=":memory:", page_size=2))
    elif request.param == "jsonl":
        backend = JsonlVersionedStore(tmp_path / "versions.jsonl")
    else:
        backend = InMemoryVersionedStore()

    await backend.initialize()
    logger.debug(f"Using {request.param} store")
    yield backend
    await backend.close()


@pytest.fixture
def contract(store: VersionedStateStore) -> BirthCertContract:
    """Fixture providing a contract over the parametrized store."""
    return BirthCertContract(store)


@pytest.fixture
def make_cursor():
    """Fixture providing the scripted cursor class."""
    return RecordingCursor
