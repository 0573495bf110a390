"""
Logging utilities for the ledger.

Modules log through ``logging.getLogger(__name__)``, so everything sits
under the ``birthcert_ledger`` logger. This module configures that logger
from a LedgerConfig, optionally as single-line JSON, and provides an
adapter that stamps record context onto every message of one operation.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from .config import LedgerConfig

PACKAGE_LOGGER = "birthcert_ledger"

# Context fields emitted ahead of any other extras
_CONTEXT_FIELDS = ("operation", "record_id", "tx_id")

# LogRecord attributes that are not caller-supplied context
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats ledger log records as single-line JSON.

    Fields, in order: timestamp (UTC, from the record's creation time),
    level, logger, the record context (operation, record_id, tx_id) when
    present, message, then any other extras and the exception text.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        for name in _CONTEXT_FIELDS:
            if name in record.__dict__:
                log_obj[name] = _json_safe(record.__dict__[name])
        log_obj["message"] = record.getMessage()

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key in log_obj or key.startswith("_"):
                continue
            log_obj[key] = _json_safe(value)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str = PACKAGE_LOGGER,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Send a logger's output to a stream as structured JSON.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure (default: the package logger)
        stream: Destination (default: stdout)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def configure_logging(config: LedgerConfig) -> logging.Logger:
    """Apply the logging settings of a ledger configuration.

    Unknown level names fall back to INFO. Without structured logging
    only the level is set and handlers are left to the application.
    """
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    if config.structured_logging:
        return configure_structured_logging(level)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    return logger


class RecordLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter carrying the context of one contract operation.

    The adapter's context (operation, record_id, ...) is merged into
    every message; per-call ``extra`` values win over the adapter's.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def bind(self, **context: Any) -> "RecordLoggerAdapter":
        """Return an adapter with additional context, e.g. the transaction ID."""
        return RecordLoggerAdapter(self.logger, {**self.extra, **context})
