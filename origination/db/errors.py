"""Store error hierarchy for production backends.

Store implementations wrap backend-specific errors in one of these.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the backend is unreachable or a query fails."""


class NotFoundError(StoreError):
    """Raised when a specific entity lookup fails."""


class ConflictError(StoreError):
    """Raised on unique constraint violation."""
