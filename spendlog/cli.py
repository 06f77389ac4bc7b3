"""CLI entry point for spendlog."""

import typer

from spendlog.commands.admin import init_command
from spendlog.commands.common import get_settings
from spendlog.commands.expenses import add_command, list_command
from spendlog.commands.report import summary_command, users_command
from spendlog.logging_setup import configure_logging

app = typer.Typer(
    name="spendlog",
    help="spendlog - an expense ledger with idempotent entry",
    add_completion=False,
)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default: config or SPENDLOG_LOG_LEVEL)"),
) -> None:
    """spendlog - an expense ledger with idempotent entry."""
    configure_logging(log_level or get_settings().log_level)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Rewrite the config even if it already exists"),
    migrate: bool = typer.Option(False, "--migrate", help="Only upgrade the existing database schema"),
) -> None:
    """Initialize spendlog database and configuration."""
    init_command(force, migrate)


@app.command()
def add(
    amount: str = typer.Argument(..., help="Amount as a decimal string, e.g. 199.50"),
    category: str = typer.Argument(..., help="Category name"),
    date: str = typer.Option(None, "--date", "-d", help="Expense date (YYYY-MM-DD, default: today)"),
    description: str = typer.Option(None, "--description", "-m", help="Optional description"),
    user: str = typer.Option(None, "--user", "-u", help="User label (default: [defaults].user in config)"),
    key: str = typer.Option(None, "--key", "-k", help="Idempotency key; reuse it to safely retry (default: random)"),
) -> None:
    """Add an expense."""
    add_command(amount, category, date, description, user, key)


@app.command(name="list")
def list_expenses(
    category: str = typer.Option(None, "--category", "-c", help="Only this category"),
    user: str = typer.Option(None, "--user", "-u", help="Only this user"),
    sort: str = typer.Option(None, "--sort", help="date_desc (default) or date_asc"),
) -> None:
    """List your expenses."""
    list_command(category, user, sort)


@app.command()
def summary(
    user: str = typer.Option(None, "--user", "-u", help="Only this user"),
) -> None:
    """Show spending totals per category."""
    summary_command(user)


@app.command()
def users() -> None:
    """List the users that have recorded expenses."""
    users_command()


if __name__ == "__main__":
    app()
