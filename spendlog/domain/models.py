"""Domain type definitions for spendlog.

These NewTypes provide semantic clarity and help with type checking:
- MinorUnits: Amount in minor currency units (paise, cents)
- CategoryName: Name of a spending category
- UserLabel: Free-text label naming who spent the money
- IdempotencyKey: Client-supplied token identifying one logical submission
"""

from typing import NewType

# Money amounts are stored as minor units to avoid floating point errors
MinorUnits = NewType("MinorUnits", int)

# Category name, always stored trimmed
CategoryName = NewType("CategoryName", str)

# User label, always stored trimmed (not an identity)
UserLabel = NewType("UserLabel", str)

# Idempotency key supplied by the client, stored verbatim
IdempotencyKey = NewType("IdempotencyKey", str)
