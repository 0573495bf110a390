"""
Birth Certificate Ledger

Record management for birth certificates on an append-only, versioned
key-value ledger.

Provides:
- Create/update with uniqueness and existence invariants
- Field-equality queries scoped by document type
- Full revision history reconstructed from the version log
- Pluggable stores (in-memory, JSONL file, SQLite)

Usage:

    >>> from birthcert_ledger import BirthCertContract, LedgerConfig, create_store
    >>> store = await create_store(LedgerConfig(backend="sqlite", db_path="ledger.db"))
    >>> contract = BirthCertContract(store)
    >>> tx_id = await contract.create_record(
    ...     "BC001",
    ...     user_name="alice",
    ...     name="Bob Smith",
    ...     father_name="John Smith",
    ...     mother_name="Jane Smith",
    ...     dob="2020-05-01",
    ...     gender="male",
    ...     weight="3.2kg",
    ...     country="India",
    ...     state="Karnataka",
    ...     city="Bengaluru",
    ...     hospital_name="City Hospital",
    ...     permanent_address="12 MG Road",
    ... )
    >>> history = await contract.get_history("BC001")
    >>> await store.close()
"""

from .codec import RecordCodec
from .config import LedgerConfig, StoreBackend
from .contract import BirthCertContract, operation_boundary
from .exceptions import (
    ConflictError,
    DecodeError,
    LedgerError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .history import HistoryReconstructor
from .iterators import drain_history, drain_query_results, released
from .lifecycle import RecordLifecycleManager
from .logging_utils import configure_logging, configure_structured_logging
from .models import DOC_TYPE, BirthCertificate, HistoryEntry, QueryResult
from .query import QueryEngine
from .store import (
    InMemoryVersionedStore,
    JsonlVersionedStore,
    ResultCursor,
    Selector,
    SQLiteStoreConfig,
    SQLiteVersionedStore,
    VersionedStateStore,
    create_store,
)

__all__ = [
    # Contract surface
    "BirthCertContract",
    "operation_boundary",
    # Engines
    "RecordLifecycleManager",
    "QueryEngine",
    "HistoryReconstructor",
    "RecordCodec",
    "drain_query_results",
    "drain_history",
    "released",
    # Models
    "DOC_TYPE",
    "BirthCertificate",
    "QueryResult",
    "HistoryEntry",
    # Stores
    "VersionedStateStore",
    "ResultCursor",
    "Selector",
    "InMemoryVersionedStore",
    "JsonlVersionedStore",
    "SQLiteVersionedStore",
    "SQLiteStoreConfig",
    "create_store",
    # Configuration
    "LedgerConfig",
    "StoreBackend",
    "configure_logging",
    "configure_structured_logging",
    # Exceptions
    "LedgerError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "DecodeError",
    "StoreError",
]

__version__ = "0.1.0"
