"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    PERMISSION_DENIED = "PERMISSION_DENIED"
    """The actor lacks the permission the operation requires."""

    APPLICANT_NOT_FOUND = "APPLICANT_NOT_FOUND"
    """The applicant does not exist for this tenant."""

    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    """The application does not exist for this tenant or applicant."""

    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    """The document does not exist or belongs to another application."""

    CORRECTION_NOT_FOUND = "CORRECTION_NOT_FOUND"
    """There is nothing pending correction for the applicant or field."""

    INVALID_TRANSITION = "INVALID_TRANSITION"
    """The status change is not allowed from the current status."""

    FIELD_LOCKED = "FIELD_LOCKED"
    """The field was verified by an automated source and cannot be changed."""

    CORRECTION_NOT_ALLOWED = "CORRECTION_NOT_ALLOWED"
    """The field was not rejected and cannot be corrected."""

    INVALID_OPERATION = "INVALID_OPERATION"
    """The request is well-formed but not valid in the current state."""

    KYC_PROVIDER_ERROR = "KYC_PROVIDER_ERROR"
    """The KYC provider returned an error or was unavailable."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""

    field: str | None = None
    """Field name for locked-field and correction errors."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "FIELD_LOCKED",
                "message": "Field 'curp' was verified by an automated source and is locked",
                "field": "curp"
            }
        }
    """

    error: ErrorBody
