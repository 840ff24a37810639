"""Request and response models for applicant corrections."""

from typing import Any

from pydantic import BaseModel, Field

from origination.corrections.models import (
    CorrectionRecord,
    PendingApplicationRef,
    PendingCorrections,
    RejectedDocument,
    RejectedField,
)


class Geolocation(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0, description="Meters")
    timestamp: str | None = Field(default=None, description="Client timestamp")


class CorrectionRequest(BaseModel):
    """Request body for POST /applicant/corrections."""

    field_name: str = Field(..., min_length=1, description="Rejected field to correct")
    new_value: Any = Field(..., description="Corrected value; objects for address and employment")
    geolocation: Geolocation | None = Field(
        default=None, description="Where the applicant submitted from"
    )


class PendingCorrectionsResponse(BaseModel):
    has_corrections_pending: bool
    rejected_fields: list[RejectedField] = Field(default_factory=list)
    rejected_documents: list[RejectedDocument] = Field(default_factory=list)
    correction_history: list[CorrectionRecord] = Field(default_factory=list)
    pending_applications: list[PendingApplicationRef] = Field(default_factory=list)

    @classmethod
    def from_pending(cls, pending: PendingCorrections) -> "PendingCorrectionsResponse":
        return cls(
            has_corrections_pending=pending.has_corrections_pending,
            rejected_fields=pending.rejected_fields,
            rejected_documents=pending.rejected_documents,
            correction_history=pending.correction_history,
            pending_applications=pending.pending_applications,
        )
