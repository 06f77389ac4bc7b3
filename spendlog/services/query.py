"""Query service: read-only views over the ledger."""

from spendlog.domain.expenses import (
    CategorySummary,
    ExpenseListing,
    SortOrder,
    build_filter,
    normalize_filter_value,
    parse_sort,
)
from spendlog.domain.models import UserLabel
from spendlog.store.ledger import LedgerStore


class QueryService:
    """Maps caller filter and sort parameters onto store queries.

    Blank filter values mean "no filter" and unknown sort keys fall back to
    the default order, so no caller input is ever an error here.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def list_expenses(
        self,
        category: str | None = None,
        user: str | None = None,
        sort: str | SortOrder | None = None,
    ) -> ExpenseListing:
        """List expenses with optional category/user filters."""
        return self.store.list_expenses(build_filter(category, user), parse_sort(sort))

    def summarize(self, user: str | None = None) -> CategorySummary:
        """Per-category totals, optionally for one user."""
        normalized_user = normalize_filter_value(user)
        return self.store.summarize_by_category(UserLabel(normalized_user) if normalized_user else None)

    def users(self) -> list[UserLabel]:
        """Distinct user labels, sorted."""
        return self.store.distinct_users()
