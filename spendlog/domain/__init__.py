"""Domain models and types for spendlog.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from spendlog.domain.models import CategoryName, IdempotencyKey, MinorUnits, UserLabel

__all__ = ["MinorUnits", "CategoryName", "UserLabel", "IdempotencyKey"]
