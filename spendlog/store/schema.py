"""Database schema initialization and migrations."""

import sqlite3
from pathlib import Path

from spendlog.config import get_default_db_path
from spendlog.logging_setup import get_logger

logger = get_logger(__name__)

MEMORY_DB = ":memory:"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_default_db_path()
    return db_path.exists()


def connect(db_path: Path | str, timeout: float = 5.0) -> sqlite3.Connection:
    """Open a connection with the pragmas every spendlog connection uses.

    Args:
        db_path: Path to the database file, or ":memory:".
        timeout: Seconds to wait on a locked database before failing.

    Returns:
        Connection with row_factory configured, usable from any thread.
    """
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    if str(db_path) != MEMORY_DB:
        conn.execute("PRAGMA journal_mode = WAL")
    # Commits must be on disk before a caller is told the insert happened
    conn.execute("PRAGMA synchronous = FULL")
    return conn


def _columns(cursor: sqlite3.Cursor, table: str) -> list[str]:
    cursor.execute(f"PRAGMA table_info({table})")
    return [row[1] for row in cursor.fetchall()]


def migrate(conn: sqlite3.Connection) -> None:
    """Create the schema and upgrade older layouts in place.

    Safe to run on every startup: each step checks the current layout first.
    All steps run in one explicit transaction, so a failure leaves the
    previous layout untouched.

    Args:
        conn: Open connection to the database.

    Raises:
        sqlite3.Error: If any step fails. The whole migration is rolled back.
    """
    cursor = conn.cursor()

    try:
        # sqlite3 does not open a transaction for DDL on its own
        cursor.execute("BEGIN")
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                amount_minor INTEGER NOT NULL CHECK(amount_minor >= 0),
                category TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                date TEXT NOT NULL,
                created_at TEXT NOT NULL,
                idempotency_key TEXT NOT NULL UNIQUE,
                user TEXT NOT NULL DEFAULT ''
            )
        """
        )

        # Migrations for older databases (must run before creating indexes on new columns)
        columns = _columns(cursor, "expenses")

        # Migration: amounts used to be stored in an 'amount_paise' column
        if "amount_paise" in columns and "amount_minor" not in columns:
            logger.info("Renaming expenses.amount_paise to amount_minor")
            cursor.execute("ALTER TABLE expenses RENAME COLUMN amount_paise TO amount_minor")

        # Migration: add 'user' column if missing; existing rows get an empty label
        if "user" not in columns:
            logger.info("Adding expenses.user column")
            cursor.execute("ALTER TABLE expenses ADD COLUMN user TEXT NOT NULL DEFAULT ''")

        # Create indexes for common queries (after migrations ensure columns exist)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses(date DESC)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_user ON expenses(user)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_default_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = connect(db_path)
    try:
        migrate(conn)
    finally:
        conn.close()
