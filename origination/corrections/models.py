"""Read models for the applicant correction workflow."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from origination.applications.enums import ApplicationStatus
from origination.documents.enums import DocumentType


class RejectedField(BaseModel):
    """A field staff rejected on at least one pending application."""

    id: str = Field(..., description="<application id>_<field name>")
    application_id: UUID
    field_name: str
    field_label: str
    current_value: str = Field(..., description="Current value formatted for display")
    rejection_reason: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None


class RejectedDocument(BaseModel):
    id: UUID
    application_id: UUID | None = None
    type: DocumentType
    type_label: str
    name: str
    rejection_reason: str | None = None
    rejected_at: datetime | None = None


class CorrectionRecord(BaseModel):
    """One past correction as shown to the applicant."""

    application_id: UUID
    field_name: str
    field_label: str
    old_value: Any = None
    new_value: Any = None
    rejection_reason: str | None = None
    corrected_by: dict[str, Any] = Field(default_factory=dict)
    corrected_at: datetime


class PendingApplicationRef(BaseModel):
    id: UUID
    folio: str
    status: ApplicationStatus
    updated_at: datetime


class PendingCorrections(BaseModel):
    """Everything the applicant still has to fix."""

    rejected_fields: list[RejectedField] = Field(default_factory=list)
    rejected_documents: list[RejectedDocument] = Field(default_factory=list)
    correction_history: list[CorrectionRecord] = Field(
        default_factory=list, description="Newest first"
    )
    pending_applications: list[PendingApplicationRef] = Field(default_factory=list)

    @property
    def has_corrections_pending(self) -> bool:
        return bool(self.rejected_fields or self.rejected_documents)


class CorrectionResult(BaseModel):
    """Outcome of a submitted correction."""

    field_name: str
    status: str = "corrected"
    updated_applications: list[UUID] = Field(default_factory=list)
    advanced_applications: list[UUID] = Field(
        default_factory=list, description="Applications moved back to IN_REVIEW"
    )
