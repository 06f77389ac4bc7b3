"""Expense commands (add, list)."""

import sys
import uuid
from datetime import date

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spendlog.commands.common import get_settings, open_ledger
from spendlog.domain.money import format_amount
from spendlog.errors import ExpenseValidationError, MissingIdempotencyKeyError, RecordNotFoundError, StorageError
from spendlog.services.ingestion import IngestionService
from spendlog.services.query import QueryService

console = Console()


def add_command(
    amount: str,
    category: str,
    expense_date: str | None = None,
    description: str | None = None,
    user: str | None = None,
    key: str | None = None,
) -> None:
    """Record an expense.

    Args:
        amount: Decimal amount string, e.g. "199.50".
        category: Category name.
        expense_date: Expense date (YYYY-MM-DD). Defaults to today.
        description: Optional description.
        user: User label. Defaults to [defaults].user from the config.
        key: Idempotency key. Reusing a key replays the original expense instead of adding another.
    """
    settings = get_settings()
    body = {
        "amount": amount,
        "category": category,
        "date": expense_date or date.today().isoformat(),
        "description": description,
        "user": user or settings.default_user,
    }
    idempotency_key = key or str(uuid.uuid4())

    with open_ledger(settings) as store:
        try:
            result = IngestionService(store).submit(idempotency_key, body)
        except MissingIdempotencyKeyError as e:
            console.print(f"[red]{e.message}[/red]")
            sys.exit(1)
        except ExpenseValidationError as e:
            console.print(f"[red]{e.message}:[/red]", style="bold")
            for field_name, message in e.fields.items():
                console.print(f"  {field_name}: {message}")
            sys.exit(1)
        except (StorageError, RecordNotFoundError) as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

    expense = result.expense
    if result.created:
        console.print(f"[green]✓[/green] Expense added (ID: {expense.id}):")
    else:
        console.print(f"[yellow]Expense already existed (ID: {expense.id}), nothing added[/yellow]")
    console.print(f"  Date: {expense.date}")
    console.print(f"  Amount: {format_amount(expense.amount_minor, settings.currency_symbol)}")
    console.print(f"  Category: {escape(expense.category)}")
    console.print(f"  User: {escape(expense.user)}")
    if expense.description:
        console.print(f"  Description: {escape(expense.description)}")
    console.print(f"[dim]Idempotency key: {escape(idempotency_key)}[/dim]")


def list_command(
    category: str | None = None,
    user: str | None = None,
    sort: str | None = None,
) -> None:
    """List expenses with optional filters."""
    settings = get_settings()

    with open_ledger(settings) as store:
        try:
            listing = QueryService(store).list_expenses(category, user, sort or settings.default_sort)
        except StorageError as e:
            console.print(f"[red]Database error: {e}[/red]", style="bold")
            sys.exit(1)

    if not listing.items:
        console.print("[yellow]No expenses found[/yellow]")
        return

    table = Table(title=f"Expenses (showing {listing.count})")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Description", style="white")
    table.add_column("User")
    table.add_column("Amount", justify="right")

    for expense in listing.items:
        table.add_row(
            str(expense.id),
            expense.date,
            escape(expense.category),
            escape(expense.description) or "[dim]-[/dim]",
            escape(expense.user) or "[dim]-[/dim]",
            format_amount(expense.amount_minor, settings.currency_symbol),
        )

    console.print(table)
    console.print(f"Total: [bold]{format_amount(listing.total_minor, settings.currency_symbol)}[/bold]")
