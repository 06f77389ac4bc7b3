"""Tests for spendlog.services.ingestion."""

import threading
from typing import Any
from unittest.mock import MagicMock

import pytest

from spendlog.errors import ExpenseValidationError, MissingIdempotencyKeyError, RecordNotFoundError, StorageError
from spendlog.services.ingestion import IngestionService, Outcome
from spendlog.store.ledger import DuplicateKey, LedgerStore


class TestSubmit:
    """Tests for IngestionService.submit."""

    def test_first_submission_creates(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should store a new expense and report CREATED."""
        result = ingestion.submit("key-1", make_body())

        assert result.outcome is Outcome.CREATED
        assert result.created
        assert result.expense.id == 1
        assert result.expense.amount_minor == 19950
        assert result.expense.category == "Food"
        assert result.expense.user == "alice"

    def test_repeat_submission_replays(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should return the original expense with REPLAYED."""
        first = ingestion.submit("key-1", make_body())
        second = ingestion.submit("key-1", make_body())

        assert second.outcome is Outcome.REPLAYED
        assert not second.created
        assert second.expense == first.expense

    def test_replay_ignores_new_body(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should return the stored record even if the body changed."""
        first = ingestion.submit("key-1", make_body(amount="1.00"))
        second = ingestion.submit("key-1", make_body(amount="999.00", category="Other"))

        assert second.expense == first.expense
        assert ingestion.store.list_expenses().count == 1

    def test_distinct_keys_create_distinct_rows(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should give each new key its own increasing id."""
        ids = [ingestion.submit(f"key-{i}", make_body()).expense.id for i in range(3)]

        assert ids == [1, 2, 3]

    @pytest.mark.parametrize("key", [None, "", "   ", 42])
    def test_missing_key_rejected(self, ingestion: IngestionService, make_body: Any, key: Any) -> None:
        """Should reject a missing or blank key."""
        with pytest.raises(MissingIdempotencyKeyError):
            ingestion.submit(key, make_body())

    def test_missing_key_checked_before_validation(self) -> None:
        """Should reject the key before touching the body or the store."""
        store = MagicMock(spec=LedgerStore)
        service = IngestionService(store)

        with pytest.raises(MissingIdempotencyKeyError):
            service.submit(None, {"amount": "-1"})

        store.insert.assert_not_called()
        store.find_by_key.assert_not_called()

    def test_validation_failure(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should raise with per-field messages and store nothing."""
        with pytest.raises(ExpenseValidationError) as exc_info:
            ingestion.submit("key-1", make_body(amount="-10.00", date="2025-02-30"))

        assert set(exc_info.value.fields) == {"amount", "date"}
        assert ingestion.store.list_expenses().count == 0

    def test_rejected_key_can_be_reused_after_fix(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should accept a corrected body under the same key after a rejection."""
        with pytest.raises(ExpenseValidationError):
            ingestion.submit("key-1", make_body(amount="abc"))

        result = ingestion.submit("key-1", make_body())

        assert result.outcome is Outcome.CREATED

    def test_vanished_duplicate_is_consistency_fault(self, make_body: Any) -> None:
        """Should raise RecordNotFoundError if a duplicate cannot be read back."""
        store = MagicMock(spec=LedgerStore)
        store.insert.return_value = DuplicateKey("key-1")  # type: ignore[arg-type]
        store.find_by_key.return_value = None

        with pytest.raises(RecordNotFoundError):
            IngestionService(store).submit("key-1", make_body())

    def test_storage_errors_propagate(self, make_body: Any) -> None:
        """Should not retry or swallow other store failures."""
        store = MagicMock(spec=LedgerStore)
        store.insert.side_effect = StorageError("disk I/O error")

        with pytest.raises(StorageError):
            IngestionService(store).submit("key-1", make_body())
        assert store.insert.call_count == 1

    def test_concurrent_identical_submissions(self, ingestion: IngestionService, make_body: Any) -> None:
        """Should create once and replay for every other concurrent attempt."""
        results = []
        barrier = threading.Barrier(6)

        def submit() -> None:
            barrier.wait()
            results.append(ingestion.submit("same-key", make_body()))

        threads = [threading.Thread(target=submit) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert [r.outcome for r in results].count(Outcome.CREATED) == 1
        assert {r.expense.id for r in results} == {1}
        assert ingestion.store.list_expenses().count == 1
