"""Helpers shared by CLI commands."""

import sys
import tomllib

from rich.console import Console

from spendlog.config import Settings, load_settings
from spendlog.errors import StorageError
from spendlog.store.ledger import LedgerStore

console = Console()


def get_settings() -> Settings:
    """Load settings, exiting with an error message if the config file is broken."""
    try:
        return load_settings()
    except tomllib.TOMLDecodeError as e:
        console.print(f"[red]Invalid config file: {e}[/red]", style="bold")
        sys.exit(1)


def open_ledger(settings: Settings) -> LedgerStore:
    """Open the ledger named by the settings, migrating it if needed."""
    try:
        return LedgerStore(settings.db_path)
    except StorageError as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
