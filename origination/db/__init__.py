"""Database utilities: connection pool, store errors, Alembic migrations."""

from origination.db.errors import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    StoreError,
)

__all__ = [
    "StoreError",
    "ConnectionError",
    "NotFoundError",
    "ConflictError",
]
