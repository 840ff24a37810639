"""Application domain models."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from origination.applications.enums import (
    ActorType,
    ApplicationStatus,
    ChecklistStatus,
    PaymentFrequency,
    TimelineEvent,
)


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Actor(BaseModel):
    """Whoever is performing an operation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Staff user, applicant or system identifier")
    type: ActorType = Field(default=ActorType.STAFF, description="Kind of actor")
    name: str | None = Field(default=None, description="Display name")
    permissions: frozenset[str] = Field(default_factory=frozenset, description="Granted permissions")

    def has_permission(self, permission: str) -> bool:
        if self.type == ActorType.SYSTEM:
            return True
        return "*" in self.permissions or permission in self.permissions

    @classmethod
    def system(cls) -> "Actor":
        return cls(id="system", type=ActorType.SYSTEM, name="Sistema")


class ChecklistEntry(BaseModel):
    """Staff review of one field on an application."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    status: ChecklistStatus = Field(default=ChecklistStatus.PENDING, description="Review state")
    method: str | None = Field(default=None, description="Verification method used")
    rejection_reason: str | None = Field(default=None, description="Why it was rejected")
    notes: str | None = Field(default=None, description="Reviewer notes")
    verified_by: str | None = Field(default=None, description="Reviewer")
    verified_at: datetime | None = Field(default=None, description="Review time")
    rejected_at: datetime | None = Field(default=None, description="Rejection time")
    corrected_at: datetime | None = Field(default=None, description="Correction time")
    corrected_by: str | None = Field(default=None, description="Who corrected")


class StatusHistoryEntry(BaseModel):
    """One entry on the application timeline.

    ``to_status`` is either an ApplicationStatus value or a TimelineEvent
    marker for entries that did not change the status.
    """

    model_config = ConfigDict(frozen=True)

    from_status: ApplicationStatus | None = Field(default=None, description="Status before")
    to_status: ApplicationStatus | TimelineEvent = Field(..., description="Status after, or event")
    changed_by: str | None = Field(default=None, description="Actor id")
    changed_by_type: ActorType = Field(default=ActorType.SYSTEM, description="Actor kind")
    notes: str | None = Field(default=None, description="Reason or comment")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Event details")
    created_at: datetime = Field(default_factory=utc_now, description="Entry time")


class FieldCorrection(BaseModel):
    """A correction as recorded on the application."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    old_value: Any = None
    new_value: Any = None
    rejection_reason: str | None = None
    corrected_by: dict[str, Any] = Field(default_factory=dict)
    corrected_at: datetime = Field(default_factory=utc_now)


class CounterOffer(BaseModel):
    """Terms proposed by staff in place of the requested ones."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    amount: Decimal = Field(..., gt=0, description="Offered principal")
    term_months: int = Field(..., gt=0, description="Offered term")
    interest_rate: Decimal = Field(..., ge=0, description="Annual rate, percent")
    payment_frequency: PaymentFrequency = Field(
        default=PaymentFrequency.MONTHLY, description="Payment frequency"
    )
    payment_amount: Decimal = Field(..., description="Payment per period")
    total_to_pay: Decimal = Field(..., description="Sum of all payments")
    reason: str | None = Field(default=None, description="Why the terms changed")
    offered_by: str | None = Field(default=None, description="Staff member")
    offered_at: datetime = Field(default_factory=utc_now, description="Offer time")
    accepted: bool | None = Field(default=None, description="Applicant response")
    responded_at: datetime | None = Field(default=None, description="Response time")


class Application(BaseModel):
    """A loan application and its review state."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    applicant_id: UUID = Field(..., description="Applicant")
    folio: str = Field(..., description="Human-facing reference")
    requested_amount: Decimal = Field(..., gt=0, description="Requested principal")
    approved_amount: Decimal | None = Field(default=None, description="Approved principal")
    term_months: int = Field(..., gt=0, description="Requested term")
    payment_frequency: PaymentFrequency = Field(
        default=PaymentFrequency.MONTHLY, description="Payment frequency"
    )
    interest_rate: Decimal | None = Field(default=None, description="Annual rate, percent")
    purpose: str | None = Field(default=None, description="Loan purpose")
    status: ApplicationStatus = Field(default=ApplicationStatus.DRAFT, description="Status")
    verification_checklist: dict[str, ChecklistEntry] = Field(
        default_factory=dict, description="Staff review per field"
    )
    correction_history: list[FieldCorrection] = Field(
        default_factory=list, description="Applicant corrections, oldest first"
    )
    status_history: list[StatusHistoryEntry] = Field(
        default_factory=list, description="Timeline, oldest first"
    )
    counter_offer: CounterOffer | None = Field(default=None, description="Open or past offer")
    assigned_to: str | None = Field(default=None, description="Assigned analyst")
    rejection_reason: str | None = Field(default=None, description="Why it was rejected")
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    disbursed_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    def rejected_fields(self) -> list[str]:
        return [
            name
            for name, entry in self.verification_checklist.items()
            if entry.status == ChecklistStatus.REJECTED
        ]

    def has_rejected_fields(self) -> bool:
        return bool(self.rejected_fields())

    def add_history(
        self,
        to_status: ApplicationStatus | TimelineEvent,
        actor: Actor,
        notes: str | None = None,
        metadata: dict[str, Any] | None = None,
        from_status: ApplicationStatus | None = None,
    ) -> StatusHistoryEntry:
        entry = StatusHistoryEntry(
            from_status=from_status,
            to_status=to_status,
            changed_by=actor.id,
            changed_by_type=actor.type,
            notes=notes,
            metadata=metadata or {},
        )
        self.status_history = [*self.status_history, entry]
        return entry


class ReviewOutcome(BaseModel):
    """Result of a staff field review."""

    application: Application
    status_changed: bool = False
    new_status: ApplicationStatus | None = None
