"""
Custom exceptions for the birth certificate ledger.

All engines and store implementations raise these exceptions
for consistent error handling across backends.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(LedgerError):
    """Raised when a required field is missing or empty."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class ConflictError(LedgerError):
    """Raised when creating a record whose key already holds a live version."""

    def __init__(self, record_id: str):
        super().__init__(
            f"Birth certificate with ID: {record_id} already exists",
            {"record_id": record_id},
        )
        self.record_id = record_id


class NotFoundError(LedgerError):
    """Raised when a record has no live version."""

    def __init__(self, record_id: str):
        super().__init__(
            f"Birth certificate with ID: {record_id} does not exist",
            {"record_id": record_id},
        )
        self.record_id = record_id


class DecodeError(LedgerError):
    """Raised when a stored payload is not a structural document."""

    def __init__(self, reason: str, key: str | None = None, cause: Exception | None = None):
        details: dict = {"reason": reason}
        if key:
            details["key"] = key
        if cause:
            details["cause"] = str(cause)
        message = f"Could not decode payload: {reason}"
        if key:
            message = f"Could not decode payload at {key}: {reason}"
        super().__init__(message, details)
        self.reason = reason
        self.key = key
        self.cause = cause


class StoreError(LedgerError):
    """Raised when the versioned state store fails (I/O, query or cursor)."""

    def __init__(
        self,
        operation: str,
        key: str | None = None,
        cause: Exception | None = None,
        message: str | None = None,
    ):
        details = {"operation": operation}
        if key:
            details["key"] = key
        if cause:
            details["cause"] = str(cause)
        if message is None:
            message = f"Store error during {operation}"
            if key:
                message += f": {key}"
        super().__init__(message, details)
        self.operation = operation
        self.key = key
        self.cause = cause
