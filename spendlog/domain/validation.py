"""Validation of raw expense creation requests.

Every field is checked independently so a client gets all problems at once
and can resubmit with the same idempotency key.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from spendlog.domain.expenses import NewExpense
from spendlog.domain.models import CategoryName, UserLabel
from spendlog.domain.money import parse_amount

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
MAX_CATEGORY_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 200
MAX_USER_LENGTH = 50
# Largest value an SQLite INTEGER column can hold
MAX_AMOUNT_MINOR = 2**63 - 1

FieldErrors = dict[str, str]


@dataclass(frozen=True)
class ValidationFailure:
    """Rejected request: a summary message plus per-field messages."""

    message: str
    fields: FieldErrors = field(default_factory=dict)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _check_label(name: str, value: Any, max_length: int) -> str | None:
    """Check a required label field that is stored trimmed."""
    if _is_missing(value):
        return f"{name} is required"
    if not isinstance(value, str):
        return f"{name} must be a string"
    trimmed = value.strip()
    if not trimmed:
        return f"{name} must not be blank"
    if len(trimmed) > max_length:
        return f"{name} must be at most {max_length} characters"
    return None


def check_amount(value: Any) -> str | None:
    """Return an error message for the amount field, or None if valid."""
    if _is_missing(value):
        return "amount is required"
    if not isinstance(value, str):
        return 'amount must be a string (e.g. "199.50")'
    amount = parse_amount(value)
    if amount is None:
        return "amount must be a non-negative decimal with up to 2 decimal places"
    if amount > MAX_AMOUNT_MINOR:
        return "amount is too large"
    return None


def check_date(value: Any) -> str | None:
    """Return an error message for the date field, or None if valid.

    The date must be YYYY-MM-DD and name a real calendar day, so
    "2025-02-30" is rejected even though it has the right shape.
    """
    if _is_missing(value):
        return "date is required"
    if not isinstance(value, str):
        return "date must be a string in YYYY-MM-DD format"
    if not DATE_RE.fullmatch(value):
        return "date must be in YYYY-MM-DD format"
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return "date is not a valid calendar date"
    if parsed.isoformat() != value:
        return "date is not a valid calendar date"
    return None


def check_description(value: Any) -> str | None:
    """Return an error message for the optional description, or None if valid."""
    if value is None:
        return None
    if not isinstance(value, str):
        return "description must be a string"
    # Length is checked untrimmed; the description is stored as given
    if len(value) > MAX_DESCRIPTION_LENGTH:
        return f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
    return None


def validate_expense(body: Any) -> NewExpense | ValidationFailure:
    """Validate a raw creation request.

    Args:
        body: Decoded JSON body with amount, category, date, user and an
            optional description.

    Returns:
        NewExpense with trimmed category and user, or ValidationFailure
        listing every invalid field.
    """
    if not isinstance(body, dict):
        return ValidationFailure(message="Request body must be a JSON object")

    checks = {
        "amount": check_amount(body.get("amount")),
        "category": _check_label("category", body.get("category"), MAX_CATEGORY_LENGTH),
        "date": check_date(body.get("date")),
        "description": check_description(body.get("description")),
        "user": _check_label("user", body.get("user"), MAX_USER_LENGTH),
    }
    errors: FieldErrors = {name: message for name, message in checks.items() if message is not None}
    if errors:
        return ValidationFailure(message="Validation failed", fields=errors)

    amount_minor = parse_amount(body["amount"])
    assert amount_minor is not None
    description = body.get("description")

    return NewExpense(
        amount_minor=amount_minor,
        category=CategoryName(body["category"].strip()),
        date=body["date"],
        user=UserLabel(body["user"].strip()),
        description=description if isinstance(description, str) else "",
    )
