"""Database store layer - provides persistence for the application.

This module re-exports the public store API for easy importing.
"""

from spendlog.store.ledger import Created, DuplicateKey, InsertOutcome, LedgerStore
from spendlog.store.schema import database_exists, init_database

__all__ = [
    # Schema
    "database_exists",
    "init_database",
    # Ledger
    "Created",
    "DuplicateKey",
    "InsertOutcome",
    "LedgerStore",
]
