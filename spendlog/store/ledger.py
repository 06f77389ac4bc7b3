"""Ledger store: the single writer and source of truth for expenses.

Insertion reports duplicates as an outcome value instead of raising, and the
duplicate decision is made by the UNIQUE constraint on idempotency_key
inside one INSERT statement, never by a lookup beforehand.
"""

import sqlite3
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from spendlog.domain.expenses import (
    CategorySummary,
    CategoryTotal,
    Expense,
    ExpenseFilter,
    ExpenseListing,
    NewExpense,
    SortOrder,
    parse_sort,
    summarize_totals,
)
from spendlog.domain.models import CategoryName, IdempotencyKey, MinorUnits, UserLabel
from spendlog.errors import StorageError
from spendlog.logging_setup import get_logger
from spendlog.store.schema import connect, migrate

logger = get_logger(__name__)

Clock = Callable[[], datetime]

EXPENSE_COLUMNS = "id, amount_minor, category, description, date, created_at, idempotency_key, user"

# Only these fixed clauses ever reach the ORDER BY
ORDER_BY = {
    SortOrder.DATE_DESC: "date DESC, id DESC",
    SortOrder.DATE_ASC: "date ASC, id ASC",
}


@dataclass(frozen=True)
class Created:
    """Insert outcome: the key was new and the expense is now stored."""

    expense: Expense


@dataclass(frozen=True)
class DuplicateKey:
    """Insert outcome: a record with this idempotency key already exists."""

    idempotency_key: IdempotencyKey


InsertOutcome = Created | DuplicateKey


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision, e.g. 2025-03-15T10:30:00.000Z."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row["id"],
        amount_minor=MinorUnits(row["amount_minor"]),
        category=CategoryName(row["category"]),
        description=row["description"],
        date=row["date"],
        created_at=row["created_at"],
        idempotency_key=IdempotencyKey(row["idempotency_key"]),
        user=UserLabel(row["user"]),
    )


def _is_duplicate_key(error: sqlite3.IntegrityError) -> bool:
    return (
        getattr(error, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE"
        and "expenses.idempotency_key" in str(error)
    )


def _where(expense_filter: ExpenseFilter) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    if expense_filter.category is not None:
        clauses.append("category = ?")
        params.append(expense_filter.category)
    if expense_filter.user is not None:
        clauses.append("user = ?")
        params.append(expense_filter.user)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


class LedgerStore:
    """SQLite-backed expense table.

    One instance owns one connection and serializes its use with a lock, so
    an instance can be shared between threads. Several instances may point
    at the same database file; SQLite's own locking then applies.
    """

    def __init__(self, db_path: Path | str, *, clock: Clock | None = None, timeout: float = 5.0) -> None:
        """Open the database and bring its schema up to date.

        Args:
            db_path: Path to the database file, or ":memory:".
            clock: Source of created_at timestamps. Defaults to utc_now.
            timeout: Seconds to wait on a locked database.

        Raises:
            StorageError: If the database cannot be opened or migrated.
        """
        self.db_path = db_path
        self._clock = clock or utc_now
        self._lock = threading.Lock()
        try:
            if isinstance(db_path, Path):
                db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = connect(db_path, timeout=timeout)
            migrate(self._conn)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open database at {db_path}: {e}") from e

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "LedgerStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _rollback(self) -> None:
        # A closed connection has nothing to roll back
        with suppress(sqlite3.ProgrammingError):
            self._conn.rollback()

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            try:
                yield self._conn.cursor()
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e

    def insert(self, expense: NewExpense, idempotency_key: IdempotencyKey) -> InsertOutcome:
        """Insert an expense unless its idempotency key is already taken.

        The insert is committed before this returns.

        Args:
            expense: Validated expense data.
            idempotency_key: Client-supplied key, stored verbatim.

        Returns:
            Created with the stored expense, or DuplicateKey if the key exists.

        Raises:
            StorageError: If the insert fails for any other reason.
        """
        created_at = format_timestamp(self._clock())

        with self._lock:
            try:
                cursor = self._conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO expenses (amount_minor, category, description, date, created_at, idempotency_key, user)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        expense.amount_minor,
                        expense.category,
                        expense.description,
                        expense.date,
                        created_at,
                        idempotency_key,
                        expense.user,
                    ),
                )
                self._conn.commit()
            except sqlite3.IntegrityError as e:
                self._rollback()
                if _is_duplicate_key(e):
                    logger.debug("Idempotency key %r already stored", idempotency_key)
                    return DuplicateKey(idempotency_key)
                raise StorageError(str(e)) from e
            except (sqlite3.Error, OverflowError) as e:
                self._rollback()
                raise StorageError(str(e)) from e

            expense_id = cursor.lastrowid

        assert expense_id is not None
        logger.debug("Stored expense %d for key %r", expense_id, idempotency_key)
        return Created(
            Expense(
                id=expense_id,
                amount_minor=expense.amount_minor,
                category=expense.category,
                description=expense.description,
                date=expense.date,
                created_at=created_at,
                idempotency_key=idempotency_key,
                user=expense.user,
            )
        )

    def find_by_key(self, idempotency_key: IdempotencyKey) -> Expense | None:
        """Look up the expense stored under an idempotency key.

        Args:
            idempotency_key: Key to look up.

        Returns:
            The stored expense, or None if no record has this key.

        Raises:
            StorageError: If the query fails.
        """
        with self._reading() as cursor:
            cursor.execute(f"SELECT {EXPENSE_COLUMNS} FROM expenses WHERE idempotency_key = ?", (idempotency_key,))
            row = cursor.fetchone()
        return _row_to_expense(row) if row else None

    def list_expenses(
        self, expense_filter: ExpenseFilter | None = None, sort: SortOrder | str | None = None
    ) -> ExpenseListing:
        """List expenses matching a filter.

        Args:
            expense_filter: Equality filters on category and user.
            sort: date_desc (default) or date_asc. Unknown values fall back to date_desc.

        Returns:
            ExpenseListing whose count and total cover exactly the returned items.

        Raises:
            StorageError: If the query fails.
        """
        where, params = _where(expense_filter or ExpenseFilter())
        order_by = ORDER_BY[parse_sort(sort)]

        with self._reading() as cursor:
            cursor.execute(f"SELECT {EXPENSE_COLUMNS} FROM expenses{where} ORDER BY {order_by}", params)
            items = [_row_to_expense(row) for row in cursor.fetchall()]

        total = MinorUnits(sum(item.amount_minor for item in items))
        return ExpenseListing(items=items, count=len(items), total_minor=total)

    def summarize_by_category(self, user: UserLabel | None = None) -> CategorySummary:
        """Total spending per category, largest first.

        Args:
            user: Only include this user's expenses. None includes everyone.

        Returns:
            CategorySummary with per-category totals and the grand total.

        Raises:
            StorageError: If the query fails.
        """
        query = "SELECT category, SUM(amount_minor) AS total_minor, COUNT(*) AS count FROM expenses"
        params: list[Any] = []
        if user is not None:
            query += " WHERE user = ?"
            params.append(user)
        query += " GROUP BY category ORDER BY total_minor DESC, category ASC"

        with self._reading() as cursor:
            cursor.execute(query, params)
            totals = [
                CategoryTotal(
                    category=CategoryName(row["category"]),
                    total_minor=MinorUnits(row["total_minor"]),
                    count=row["count"],
                )
                for row in cursor.fetchall()
            ]
        return summarize_totals(totals)

    def distinct_users(self) -> list[UserLabel]:
        """Get all user labels that appear on at least one expense.

        Returns:
            Non-empty labels, deduplicated and sorted ascending.

        Raises:
            StorageError: If the query fails.
        """
        with self._reading() as cursor:
            cursor.execute("SELECT DISTINCT user FROM expenses WHERE user != '' ORDER BY user ASC")
            return [UserLabel(row[0]) for row in cursor.fetchall()]
