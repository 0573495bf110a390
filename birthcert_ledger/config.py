"""
Ledger configuration.

Configuration can be provided directly, via environment variables, or
from a YAML settings file.

Environment Variables:
    BIRTHCERT_LEDGER_BACKEND: Store backend - memory, sqlite or jsonl (default: memory)
    BIRTHCERT_LEDGER_DB_PATH: SQLite database path (default: :memory:)
    BIRTHCERT_LEDGER_LOG_PATH: JSONL version log path (default: ledger.jsonl)
    BIRTHCERT_LEDGER_PAGE_SIZE: Rows fetched per cursor page (default: 100)
    BIRTHCERT_LEDGER_LOG_LEVEL: Logging level name (default: INFO)
    BIRTHCERT_LEDGER_STRUCTURED_LOGGING: "true" for JSON log lines

Settings file (``ledger:`` section):

```yaml
ledger:
  backend: sqlite
  db_path: /var/lib/birthcert/ledger.db
  page_size: 50
  log_level: DEBUG
  structured_logging: true
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ValidationError


class StoreBackend(Enum):
    """Available versioned store implementations."""

    MEMORY = "memory"
    SQLITE = "sqlite"
    JSONL = "jsonl"


@dataclass
class LedgerConfig:
    """Configuration for a ledger instance.

    Attributes:
        backend: Which store implementation to use
        db_path: SQLite database path (SQLITE backend)
        log_path: Version log file path (JSONL backend)
        page_size: Rows fetched per cursor page (SQLITE backend)
        log_level: Logging level name
        structured_logging: Emit single-line JSON logs
    """

    backend: StoreBackend = StoreBackend.MEMORY
    db_path: str | Path = ":memory:"
    log_path: str | Path = "ledger.jsonl"
    page_size: int = 100
    log_level: str = "INFO"
    structured_logging: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.backend, str):
            self.backend = _parse_backend(self.backend)
        if self.page_size < 1:
            raise ValidationError("page_size", "must be at least 1", str(self.page_size))

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Create config from environment variables."""
        page_size_str = os.environ.get("BIRTHCERT_LEDGER_PAGE_SIZE", "100")
        try:
            page_size = int(page_size_str)
        except ValueError:
            raise ValidationError("page_size", "must be an integer", page_size_str) from None

        return cls(
            backend=_parse_backend(os.environ.get("BIRTHCERT_LEDGER_BACKEND", "memory")),
            db_path=os.environ.get("BIRTHCERT_LEDGER_DB_PATH", ":memory:"),
            log_path=os.environ.get("BIRTHCERT_LEDGER_LOG_PATH", "ledger.jsonl"),
            page_size=page_size,
            log_level=os.environ.get("BIRTHCERT_LEDGER_LOG_LEVEL", "INFO").upper(),
            structured_logging=os.environ.get("BIRTHCERT_LEDGER_STRUCTURED_LOGGING", "").lower()
            == "true",
        )

    @classmethod
    def from_file(cls, path: str | Path) -> LedgerConfig:
        """Create config from the ``ledger:`` section of a YAML file.

        Missing file or section yields the defaults.
        """
        config_path = Path(path)
        if not config_path.exists():
            return cls()

        with open(config_path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        section = data.get("ledger") or {}
        return cls(
            backend=_parse_backend(str(section.get("backend", "memory"))),
            db_path=section.get("db_path", ":memory:"),
            log_path=section.get("log_path", "ledger.jsonl"),
            page_size=int(section.get("page_size", 100)),
            log_level=str(section.get("log_level", "INFO")).upper(),
            structured_logging=bool(section.get("structured_logging", False)),
        )


def _parse_backend(value: str) -> StoreBackend:
    try:
        return StoreBackend(value.lower())
    except ValueError:
        raise ValidationError("backend", "unknown store backend", value) from None
