"""spendlog - an expense ledger with idempotent entry."""

__version__ = "0.1.0"
