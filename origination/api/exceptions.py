"""API exception hierarchy for consistent error handling.

All API exceptions inherit from OriginationAPIError, which provides
status_code and error_code attributes used by the global exception
handler. Domain errors raised by services are translated with
``from_domain_error``.
"""

from origination.api.models.errors import ErrorCode
from origination.errors import (
    ApplicantNotFoundError,
    ApplicationNotFoundError,
    CorrectionNotAllowedError,
    CorrectionNotFoundError,
    DocumentNotFoundError,
    FieldLockedError,
    InvalidOperationError,
    InvalidTransitionError,
    OriginationError,
    PermissionDeniedError,
)


class OriginationAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class ForbiddenError(OriginationAPIError):
    """Raised when the actor lacks a permission or uses the wrong surface."""

    status_code = 403
    error_code = ErrorCode.PERMISSION_DENIED


class ApplicantNotFoundAPIError(OriginationAPIError):
    status_code = 404
    error_code = ErrorCode.APPLICANT_NOT_FOUND


class ApplicationNotFoundAPIError(OriginationAPIError):
    status_code = 404
    error_code = ErrorCode.APPLICATION_NOT_FOUND


class DocumentNotFoundAPIError(OriginationAPIError):
    status_code = 404
    error_code = ErrorCode.DOCUMENT_NOT_FOUND


class CorrectionNotFoundAPIError(OriginationAPIError):
    status_code = 404
    error_code = ErrorCode.CORRECTION_NOT_FOUND


class InvalidTransitionAPIError(OriginationAPIError):
    """Raised when a status change is not allowed from the current status."""

    status_code = 409
    error_code = ErrorCode.INVALID_TRANSITION


class FieldLockedAPIError(OriginationAPIError):
    """Raised when a locked ledger field would be rejected, unverified or corrected."""

    status_code = 409
    error_code = ErrorCode.FIELD_LOCKED


class CorrectionNotAllowedAPIError(OriginationAPIError):
    status_code = 409
    error_code = ErrorCode.CORRECTION_NOT_ALLOWED


class InvalidOperationAPIError(OriginationAPIError):
    status_code = 400
    error_code = ErrorCode.INVALID_OPERATION


class KycProviderAPIError(OriginationAPIError):
    """Raised when the KYC provider fails or is unavailable."""

    status_code = 502
    error_code = ErrorCode.KYC_PROVIDER_ERROR


_DOMAIN_ERRORS: dict[type[OriginationError], type[OriginationAPIError]] = {
    ApplicantNotFoundError: ApplicantNotFoundAPIError,
    ApplicationNotFoundError: ApplicationNotFoundAPIError,
    DocumentNotFoundError: DocumentNotFoundAPIError,
    CorrectionNotFoundError: CorrectionNotFoundAPIError,
    InvalidTransitionError: InvalidTransitionAPIError,
    FieldLockedError: FieldLockedAPIError,
    CorrectionNotAllowedError: CorrectionNotAllowedAPIError,
    PermissionDeniedError: ForbiddenError,
    InvalidOperationError: InvalidOperationAPIError,
}


def from_domain_error(exc: OriginationError) -> OriginationAPIError:
    """Translate a domain error into the API error carrying its HTTP status."""
    for domain_type in type(exc).__mro__:
        api_type = _DOMAIN_ERRORS.get(domain_type)  # type: ignore[arg-type]
        if api_type is not None:
            return api_type(exc.message, field=getattr(exc, "field_name", None))
    return OriginationAPIError(exc.message)
