"""Document domain models."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from origination.documents.enums import DocumentStatus, DocumentType


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Document(BaseModel):
    """An uploaded supporting document.

    Documents belong either to the applicant (reused across
    applications) or to a single application. Uploading a new document
    of the same type replaces the current one; only documents with
    ``replaced_at`` unset are current.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    applicant_id: UUID = Field(..., description="Applicant who uploaded it")
    application_id: UUID | None = Field(
        default=None, description="Application, or None for applicant-level documents"
    )
    type: DocumentType = Field(..., description="Document type")
    file_name: str = Field(..., description="Original file name")
    mime_type: str = Field(default="application/octet-stream", description="Content type")
    size_bytes: int = Field(default=0, ge=0, description="File size")
    checksum: str | None = Field(default=None, description="SHA-256 of the content")
    storage_path: str | None = Field(default=None, description="Location in object storage")
    status: DocumentStatus = Field(default=DocumentStatus.PENDING, description="Review state")
    rejection_reason: str | None = Field(default=None, description="Why it was rejected")
    rejection_comment: str | None = Field(default=None, description="Reviewer comment")
    reviewed_at: datetime | None = Field(default=None, description="Review time")
    reviewed_by: str | None = Field(default=None, description="Reviewer")
    replaced_at: datetime | None = Field(default=None, description="When superseded")
    replaced_by_id: UUID | None = Field(default=None, description="Superseding document")
    metadata: dict[str, Any] = Field(default_factory=dict, description="OCR and KYC payloads")
    created_at: datetime = Field(default_factory=utc_now, description="Upload time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    @property
    def is_current(self) -> bool:
        return self.replaced_at is None
