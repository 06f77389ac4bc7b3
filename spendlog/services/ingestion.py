"""Ingestion service: validation plus idempotent insert for new expenses.

Each submission ends in exactly one of three states:

- rejected: no usable idempotency key, or the body failed validation
  (raised as MissingIdempotencyKeyError / ExpenseValidationError);
- created: the key was new and the expense was stored;
- replayed: the key was already stored and the original expense is returned.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from spendlog.domain.expenses import Expense
from spendlog.domain.models import IdempotencyKey
from spendlog.domain.validation import ValidationFailure, validate_expense
from spendlog.errors import ExpenseValidationError, MissingIdempotencyKeyError, RecordNotFoundError
from spendlog.logging_setup import get_logger
from spendlog.store.ledger import Created, DuplicateKey, LedgerStore

logger = get_logger(__name__)


class Outcome(str, Enum):
    """How a successful submission was satisfied."""

    CREATED = "created"
    REPLAYED = "replayed"


@dataclass(frozen=True)
class IngestionResult:
    """A stored expense and whether this submission created it."""

    outcome: Outcome
    expense: Expense

    @property
    def created(self) -> bool:
        return self.outcome is Outcome.CREATED


class IngestionService:
    """Turns raw creation requests into stored expenses, at most once per key."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def submit(self, idempotency_key: str | None, body: Any) -> IngestionResult:
        """Validate and store one expense submission.

        The key is checked before anything else, so a submission without one
        never reaches validation or the store.

        Args:
            idempotency_key: Client-generated token for this logical submission.
            body: Decoded request body.

        Returns:
            IngestionResult with outcome CREATED for a new key or REPLAYED for
            a key that was already stored.

        Raises:
            MissingIdempotencyKeyError: If the key is missing or blank.
            ExpenseValidationError: If the body is invalid.
            RecordNotFoundError: If a duplicate key's record cannot be read back.
            StorageError: If the store fails for any other reason.
        """
        if not isinstance(idempotency_key, str) or not idempotency_key.strip():
            raise MissingIdempotencyKeyError()
        key = IdempotencyKey(idempotency_key)

        validated = validate_expense(body)
        if isinstance(validated, ValidationFailure):
            logger.info("Rejected submission %r: %s", key, validated.fields or validated.message)
            raise ExpenseValidationError(validated.message, validated.fields)

        outcome = self.store.insert(validated, key)
        if isinstance(outcome, Created):
            logger.info("Created expense %d for key %r", outcome.expense.id, key)
            return IngestionResult(Outcome.CREATED, outcome.expense)

        assert isinstance(outcome, DuplicateKey)
        existing = self.store.find_by_key(outcome.idempotency_key)
        if existing is None:
            raise RecordNotFoundError(f"Expense for idempotency key {key!r} vanished after a duplicate insert")
        logger.info("Replayed expense %d for key %r", existing.id, key)
        return IngestionResult(Outcome.REPLAYED, existing)
