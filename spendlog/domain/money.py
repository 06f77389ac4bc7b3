"""Money parsing and formatting.

Amounts travel as decimal strings ("199.50") and are stored as integer
minor units (19950). Both directions use integer arithmetic only.
"""

import re

from spendlog.domain.models import MinorUnits

AMOUNT_RE = re.compile(r"(\d+)(?:\.(\d{1,2}))?", re.ASCII)


def parse_amount(text: str) -> MinorUnits | None:
    """Parse a decimal amount string into minor units.

    Args:
        text: Amount such as "199.50", "200" or "0.1".

    Returns:
        Amount in minor units, or None if the string is not a non-negative
        decimal with at most 2 fractional digits.
    """
    match = AMOUNT_RE.fullmatch(text)
    if match is None:
        return None

    whole, fraction = match.groups()
    # A single fractional digit is tenths: "0.1" is 10, not 1
    return MinorUnits(int(whole) * 100 + int((fraction or "").ljust(2, "0")))


def format_amount(amount: int, symbol: str = "") -> str:
    """Format minor units for display.

    Args:
        amount: Amount in minor units.
        symbol: Optional currency symbol prefix.

    Returns:
        Formatted amount, e.g. "₹1,234.50".
    """
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 100)
    return f"{sign}{symbol}{whole:,}.{fraction:02d}"
