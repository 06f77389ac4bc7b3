"""Exceptions raised by the spendlog services and store.

A duplicate idempotency key is not an error: the store reports it as an
insert outcome and the ingestion service turns it into a replay.
"""

from spendlog.domain.validation import FieldErrors


class SpendlogError(Exception):
    """Base class for spendlog errors."""


class MissingIdempotencyKeyError(SpendlogError):
    """The submission carried no usable Idempotency-Key."""

    code = "MISSING_IDEMPOTENCY_KEY"

    def __init__(self, message: str = "Idempotency-Key header is required") -> None:
        super().__init__(message)
        self.message = message


class ExpenseValidationError(SpendlogError):
    """The submission body failed validation on one or more fields."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: FieldErrors) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields


class RecordNotFoundError(SpendlogError):
    """A record the store reported as existing could not be read back."""


class StorageError(SpendlogError):
    """Any persistence failure other than a duplicate idempotency key."""
