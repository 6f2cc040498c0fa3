"""Database utilities for the service registry.

This module contains:
- Store error hierarchy
- Alembic migrations
"""

from serviceregistry.db.errors import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)

__all__ = [
    "StoreError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
]
