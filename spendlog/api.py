"""HTTP-shaped request handlers.

These handlers take already-decoded headers, query parameters and JSON
bodies and return a status code plus a JSON-ready body. Any web framework
can mount them; nothing here depends on one.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from spendlog.domain.expenses import CategorySummary, Expense, ExpenseListing
from spendlog.errors import ExpenseValidationError, MissingIdempotencyKeyError, RecordNotFoundError, StorageError
from spendlog.logging_setup import get_logger
from spendlog.services.ingestion import IngestionService
from spendlog.services.query import QueryService
from spendlog.store.ledger import LedgerStore

logger = get_logger(__name__)

IDEMPOTENCY_HEADER = "idempotency-key"


@dataclass(frozen=True)
class ApiResponse:
    """Status code and JSON-serializable body."""

    status: int
    body: dict[str, Any] = field(default_factory=dict)


# (headers, query params, body) -> response
Handler = Callable[[Mapping[str, str], Mapping[str, str], Any], ApiResponse]


def error_body(code: str, message: str, fields: dict[str, str] | None = None) -> dict[str, Any]:
    """Build the standard error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if fields is not None:
        error["fields"] = fields
    return {"error": error}


def expense_to_dict(expense: Expense) -> dict[str, Any]:
    """Serialize an expense the way POST /expenses returns it."""
    return {
        "id": expense.id,
        "amount_minor": expense.amount_minor,
        "category": expense.category,
        "description": expense.description,
        "date": expense.date,
        "created_at": expense.created_at,
    }


def listing_to_dict(listing: ExpenseListing) -> dict[str, Any]:
    """Serialize a listing; items also carry the user label."""
    return {
        "items": [{**expense_to_dict(item), "user": item.user} for item in listing.items],
        "count": listing.count,
        "total_minor": listing.total_minor,
    }


def summary_to_dict(summary: CategorySummary) -> dict[str, Any]:
    """Serialize a category summary."""
    return {
        "categories": [
            {"category": row.category, "total_minor": row.total_minor, "count": row.count}
            for row in summary.categories
        ],
        "grand_total_minor": summary.grand_total_minor,
    }


def get_header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def internal_error() -> ApiResponse:
    return ApiResponse(500, error_body("INTERNAL_ERROR", "Internal server error"))


class ExpenseApi:
    """Request handlers for the expense endpoints."""

    def __init__(self, ingestion: IngestionService, query: QueryService) -> None:
        self.ingestion = ingestion
        self.query = query
        self._routes: dict[tuple[str, str], Handler] = {
            ("POST", "/expenses"): lambda headers, params, body: self.create_expense(headers, body),
            ("GET", "/expenses"): lambda headers, params, body: self.list_expenses(params),
            ("GET", "/expenses/summary"): lambda headers, params, body: self.summary(params),
            ("GET", "/users"): lambda headers, params, body: self.users(),
            ("GET", "/health"): lambda headers, params, body: self.health(),
        }

    def create_expense(self, headers: Mapping[str, str], body: Any) -> ApiResponse:
        """POST /expenses.

        201 on creation, 200 on idempotent replay (same body shape), 400 for
        a missing key or invalid body, 500 for storage faults.
        """
        try:
            result = self.ingestion.submit(get_header(headers, IDEMPOTENCY_HEADER), body)
        except MissingIdempotencyKeyError as e:
            return ApiResponse(400, error_body(e.code, e.message))
        except ExpenseValidationError as e:
            return ApiResponse(400, error_body(e.code, e.message, e.fields))
        except (StorageError, RecordNotFoundError):
            logger.exception("Failed to store expense")
            return internal_error()

        return ApiResponse(201 if result.created else 200, expense_to_dict(result.expense))

    def list_expenses(self, params: Mapping[str, str]) -> ApiResponse:
        """GET /expenses?category=&user=&sort=date_desc|date_asc."""
        try:
            listing = self.query.list_expenses(
                category=params.get("category"),
                user=params.get("user"),
                sort=params.get("sort"),
            )
        except StorageError:
            logger.exception("Failed to list expenses")
            return internal_error()
        return ApiResponse(200, listing_to_dict(listing))

    def summary(self, params: Mapping[str, str]) -> ApiResponse:
        """GET /expenses/summary?user=."""
        try:
            summary = self.query.summarize(user=params.get("user"))
        except StorageError:
            logger.exception("Failed to summarize expenses")
            return internal_error()
        return ApiResponse(200, summary_to_dict(summary))

    def users(self) -> ApiResponse:
        """GET /users."""
        try:
            users = self.query.users()
        except StorageError:
            logger.exception("Failed to list users")
            return internal_error()
        return ApiResponse(200, {"users": list(users)})

    def health(self) -> ApiResponse:
        """GET /health."""
        return ApiResponse(200, {"status": "ok"})

    def dispatch(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> ApiResponse:
        """Route a request to its handler.

        Args:
            method: HTTP method.
            path: Request path without query string.
            headers: Request headers.
            params: Decoded query parameters.
            body: Decoded JSON body, if any.

        Returns:
            Handler response, or 404 for an unknown route.
        """
        handler = self._routes.get((method.upper(), path.rstrip("/") or "/"))
        if handler is None:
            return ApiResponse(404, error_body("NOT_FOUND", f"No route for {method.upper()} {path}"))
        return handler(headers or {}, params or {}, body)


def build_api(store: LedgerStore) -> ExpenseApi:
    """Wire services around a store instance."""
    return ExpenseApi(IngestionService(store), QueryService(store))
