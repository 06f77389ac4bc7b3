"""Expense records and the pure helpers used by the query path.

This module contains the functional core for expense data:
- Immutable records as they come out of the store
- Filter and sort parameter normalization
- Aggregate result containers

All monetary amounts are in minor units (MinorUnits type).
"""

from dataclasses import dataclass, field
from enum import Enum

from spendlog.domain.models import CategoryName, IdempotencyKey, MinorUnits, UserLabel


class SortOrder(str, Enum):
    """Supported list orderings."""

    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"


DEFAULT_SORT = SortOrder.DATE_DESC


@dataclass(frozen=True)
class NewExpense:
    """Validated expense data ready for insertion."""

    amount_minor: MinorUnits
    category: CategoryName
    date: str
    user: UserLabel
    description: str = ""


@dataclass(frozen=True)
class Expense:
    """Immutable stored expense."""

    id: int
    amount_minor: MinorUnits
    category: CategoryName
    description: str
    date: str
    created_at: str
    idempotency_key: IdempotencyKey
    user: UserLabel


@dataclass(frozen=True)
class ExpenseFilter:
    """Optional equality filters for listing. None means no filter."""

    category: CategoryName | None = None
    user: UserLabel | None = None


@dataclass(frozen=True)
class ExpenseListing:
    """Ordered expenses with the count and total of the same filtered set."""

    items: list[Expense] = field(default_factory=list)
    count: int = 0
    total_minor: MinorUnits = MinorUnits(0)


@dataclass(frozen=True)
class CategoryTotal:
    """Aggregate for one category."""

    category: CategoryName
    total_minor: MinorUnits
    count: int


@dataclass(frozen=True)
class CategorySummary:
    """Per-category totals, largest first, with their grand total."""

    categories: list[CategoryTotal] = field(default_factory=list)
    grand_total_minor: MinorUnits = MinorUnits(0)


def parse_sort(value: str | SortOrder | None) -> SortOrder:
    """Resolve a caller-supplied sort key.

    Args:
        value: Sort key, matched exactly against "date_desc" and "date_asc".

    Returns:
        Matching SortOrder, or DEFAULT_SORT if the value is not recognized.
    """
    if isinstance(value, SortOrder):
        return value
    if value is None:
        return DEFAULT_SORT
    try:
        return SortOrder(value)
    except ValueError:
        return DEFAULT_SORT


def normalize_filter_value(value: str | None) -> str | None:
    """Trim a filter value, treating blank as no filter.

    Args:
        value: Raw filter value from the caller.

    Returns:
        Trimmed value, or None if missing or blank.
    """
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def build_filter(category: str | None = None, user: str | None = None) -> ExpenseFilter:
    """Build an ExpenseFilter from raw caller values."""
    normalized_category = normalize_filter_value(category)
    normalized_user = normalize_filter_value(user)
    return ExpenseFilter(
        category=CategoryName(normalized_category) if normalized_category else None,
        user=UserLabel(normalized_user) if normalized_user else None,
    )


def summarize_totals(totals: list[CategoryTotal]) -> CategorySummary:
    """Order category totals largest first and compute the grand total.

    Ties on total are broken by category name so output is stable.

    Args:
        totals: Unordered per-category totals.

    Returns:
        CategorySummary with sorted categories and their grand total.
    """
    ordered = sorted(totals, key=lambda t: (-t.total_minor, t.category))
    grand_total = MinorUnits(sum(t.total_minor for t in ordered))
    return CategorySummary(categories=ordered, grand_total_minor=grand_total)
