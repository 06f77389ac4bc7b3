"""Shared fixtures: isolated in-memory ledgers and the services around them."""

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from spendlog.api import ExpenseApi, build_api
from spendlog.services.ingestion import IngestionService
from spendlog.services.query import QueryService
from spendlog.store.ledger import LedgerStore


class FakeClock:
    """Returns a fixed start time, one second later on every call."""

    def __init__(self, start: datetime = datetime(2025, 3, 15, 10, 30, tzinfo=UTC)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> Iterator[LedgerStore]:
    ledger = LedgerStore(":memory:", clock=clock)
    yield ledger
    ledger.close()


@pytest.fixture
def ingestion(store: LedgerStore) -> IngestionService:
    return IngestionService(store)


@pytest.fixture
def query(store: LedgerStore) -> QueryService:
    return QueryService(store)


@pytest.fixture
def api(store: LedgerStore) -> ExpenseApi:
    return build_api(store)


def expense_body(**overrides: Any) -> dict[str, Any]:
    """A valid creation body, with any field overridden."""
    body: dict[str, Any] = {
        "amount": "199.50",
        "category": "Food",
        "description": "Lunch",
        "date": "2025-03-15",
        "user": "alice",
    }
    body.update(overrides)
    return body


@pytest.fixture
def make_body() -> Any:
    return expense_body


SEED = [
    # (key, amount, category, date, user)
    ("seed-1", "100.00", "Food", "2025-03-01", "alice"),
    ("seed-2", "250.00", "Travel", "2025-03-05", "bob"),
    ("seed-3", "40.50", "Food", "2025-03-05", "bob"),
    ("seed-4", "999.99", "Rent", "2025-02-28", "alice"),
    ("seed-5", "12.00", "Food", "2025-03-10", "alice"),
    ("seed-6", "250.00", "Books", "2025-03-01", "carol"),
]


@pytest.fixture
def seeded(ingestion: IngestionService) -> IngestionService:
    """Ingestion service whose store already holds the SEED expenses."""
    for key, amount, category, date, user in SEED:
        ingestion.submit(key, expense_body(amount=amount, category=category, date=date, user=user))
    return ingestion
