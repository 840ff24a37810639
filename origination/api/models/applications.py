"""Request and response models for application endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from origination.applications.enums import (
    ApplicationStatus,
    PaymentFrequency,
    ReviewAction,
)
from origination.applications.models import (
    Application,
    ChecklistEntry,
    CounterOffer,
    StatusHistoryEntry,
)
from origination.verification.enums import VerificationMethod


class StatusChangeRequest(BaseModel):
    """Request body for POST /staff/applications/{id}/status."""

    status: ApplicationStatus = Field(..., description="Target status")
    reason: str | None = Field(default=None, max_length=1000, description="Reason or comment")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Extra timeline details")


class ApproveRequest(BaseModel):
    approved_amount: Decimal | None = Field(
        default=None, gt=0, description="Defaults to the requested amount"
    )
    notes: str | None = Field(default=None, max_length=1000)


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000, description="Rejection reason")


class CounterOfferRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Offered principal")
    term_months: int = Field(..., gt=0, le=360, description="Offered term")
    interest_rate: Decimal = Field(..., ge=0, le=500, description="Annual rate, percent")
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    reason: str | None = Field(default=None, max_length=1000)


class CounterOfferResponseRequest(BaseModel):
    """Applicant answer to an open counter-offer."""

    accept: bool = Field(..., description="True accepts the offered terms")


class VerifyDataRequest(BaseModel):
    """Request body for PUT /staff/applications/{id}/verify-data."""

    field_name: str = Field(..., min_length=1, description="Applicant field under review")
    action: ReviewAction = Field(..., description="verify, reject or unverify")
    method: VerificationMethod | None = Field(
        default=None, description="Verification method; defaults to MANUAL"
    )
    rejection_reason: str | None = Field(default=None, max_length=1000)
    notes: str | None = Field(default=None, max_length=1000)


class ApplicationResponse(BaseModel):
    """Application as returned to staff and applicants."""

    id: UUID
    folio: str
    applicant_id: UUID
    status: ApplicationStatus
    status_label: str
    requested_amount: Decimal
    approved_amount: Decimal | None = None
    term_months: int
    payment_frequency: PaymentFrequency
    interest_rate: Decimal | None = None
    purpose: str | None = None
    verification_checklist: dict[str, ChecklistEntry] = Field(default_factory=dict)
    counter_offer: CounterOffer | None = None
    rejection_reason: str | None = None
    is_stale: bool = False
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_application(cls, application: Application, is_stale: bool = False) -> "ApplicationResponse":
        return cls(
            id=application.id,
            folio=application.folio,
            applicant_id=application.applicant_id,
            status=application.status,
            status_label=application.status.label,
            requested_amount=application.requested_amount,
            approved_amount=application.approved_amount,
            term_months=application.term_months,
            payment_frequency=application.payment_frequency,
            interest_rate=application.interest_rate,
            purpose=application.purpose,
            verification_checklist=application.verification_checklist,
            counter_offer=application.counter_offer,
            rejection_reason=application.rejection_reason,
            is_stale=is_stale,
            submitted_at=application.submitted_at,
            approved_at=application.approved_at,
            rejected_at=application.rejected_at,
            created_at=application.created_at,
            updated_at=application.updated_at,
        )


class HistoryResponse(BaseModel):
    application_id: UUID
    history: list[StatusHistoryEntry] = Field(default_factory=list, description="Newest first")


class AllowedStatus(BaseModel):
    status: ApplicationStatus
    label: str


class AllowedStatusesResponse(BaseModel):
    current_status: ApplicationStatus
    allowed: list[AllowedStatus] = Field(default_factory=list)


class ReviewResponse(BaseModel):
    """Result of a field or document review."""

    application: ApplicationResponse
    status_changed: bool = False
    new_status: ApplicationStatus | None = None
