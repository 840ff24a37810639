"""AuditEvent model for the audit domain."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AuditEventType(str, Enum):
    """Classification of audit events."""

    FIELD_VERIFIED = "field_verified"
    FIELD_REJECTED = "field_rejected"
    FIELD_UNVERIFIED = "field_unverified"
    FIELD_CORRECTED = "field_corrected"
    KYC_STATUS_CHANGED = "kyc_status_changed"
    KYC_CHECK = "kyc_check"
    STATUS_CHANGED = "application_status_changed"
    DOCUMENT_REVIEWED = "document_reviewed"


class AuditEvent(BaseModel):
    """Immutable record of something that happened to an applicant or application."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    event_type: AuditEventType = Field(..., description="Event classification")
    event_data: dict[str, Any] = Field(default_factory=dict, description="Event payload")
    applicant_id: UUID | None = Field(default=None, description="Related applicant")
    application_id: UUID | None = Field(default=None, description="Related application")
    actor_id: str | None = Field(default=None, description="Who caused the event")
    timestamp: datetime = Field(default_factory=utc_now, description="Event time")
