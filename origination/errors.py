"""Domain error hierarchy.

Services raise these; the API layer maps each one to an HTTP status in
``origination.api.exceptions``.
"""


class OriginationError(Exception):
    """Base exception for domain rule violations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ApplicantNotFoundError(OriginationError):
    """Raised when an applicant does not exist for the tenant."""


class ApplicationNotFoundError(OriginationError):
    """Raised when an application does not exist for the tenant."""


class DocumentNotFoundError(OriginationError):
    """Raised when a document does not exist or belongs to another application."""


class InvalidTransitionError(OriginationError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, from_status: str, to_status: str, message: str | None = None) -> None:
        super().__init__(message or f"Cannot move application from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class PermissionDeniedError(OriginationError):
    """Raised when the actor lacks the permission an operation requires."""

    def __init__(self, permission: str) -> None:
        super().__init__(f"Missing permission: {permission}")
        self.permission = permission


class FieldLockedError(OriginationError):
    """Raised when staff try to reject or unverify a locked ledger field."""

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"Field '{field_name}' was verified by an automated source and is locked"
        )
        self.field_name = field_name


class CorrectionNotFoundError(OriginationError):
    """Raised when there is no pending correction for the applicant or field."""


class CorrectionNotAllowedError(OriginationError):
    """Raised when a field is corrected without having been rejected."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Field '{field_name}' has not been rejected and cannot be corrected")
        self.field_name = field_name


class InvalidOperationError(OriginationError):
    """Raised when a request is well-formed but not valid in the current state."""
