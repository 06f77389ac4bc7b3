"""Summary and users commands for viewing aggregated expense data."""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spendlog.commands.common import get_settings, open_ledger
from spendlog.domain.money import format_amount
from spendlog.errors import StorageError
from spendlog.services.query import QueryService

console = Console()


def calculate_share(total: int, grand_total: int) -> float:
    """Percentage of the grand total, 0 when there is nothing to divide."""
    if grand_total <= 0:
        return 0.0
    return total / grand_total * 100


def summary_command(user: str | None = None) -> None:
    """Show spending per category."""
    settings = get_settings()

    with open_ledger(settings) as store:
        try:
            summary = QueryService(store).summarize(user)
        except StorageError as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

    if not summary.categories:
        console.print("[yellow]No expenses found[/yellow]")
        return

    title = f"Spending by category ({escape(user.strip())})" if user and user.strip() else "Spending by category"
    table = Table(title=title)
    table.add_column("Category", style="magenta")
    table.add_column("Count", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Share", justify="right", style="dim")

    for row in summary.categories:
        table.add_row(
            escape(row.category),
            str(row.count),
            format_amount(row.total_minor, settings.currency_symbol),
            f"{calculate_share(row.total_minor, summary.grand_total_minor):.0f}%",
        )

    console.print(table)
    console.print(f"Grand total: [bold]{format_amount(summary.grand_total_minor, settings.currency_symbol)}[/bold]")


def users_command() -> None:
    """List the user labels that have recorded expenses."""
    settings = get_settings()

    with open_ledger(settings) as store:
        try:
            users = QueryService(store).users()
        except StorageError as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    for user in users:
        console.print(escape(user))
