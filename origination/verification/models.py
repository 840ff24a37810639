"""Verification ledger models.

One ``DataVerification`` exists per (tenant, applicant, field). It records
the current value, the method that verified it, whether the value is
locked against lower-precedence sources, and the rejection/correction
trail left by staff review.
"""

import json
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from origination.verification.enums import (
    VerificationMethod,
    VerificationStatus,
    VerificationTier,
)


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def normalize_value(value: Any) -> str | None:
    """Store ledger values as strings; structured values are JSON encoded."""
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_date(value: Any) -> Any:
    """Convert dd/mm/YYYY (as printed on INE and returned by RENAPO) to ISO format."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    if isinstance(value, str) and len(value) == 10 and value[2] == "/" and value[5] == "/":
        day, month, year = value.split("/")
        return f"{year}-{month}-{day}"
    return value


class CorrectorRef(BaseModel):
    """Who submitted a correction."""

    id: str = Field(..., description="Actor identifier")
    name: str | None = Field(default=None, description="Display name")
    type: str = Field(default="applicant", description="staff, applicant or system")


class CorrectionEntry(BaseModel):
    """One applicant correction of a rejected value."""

    model_config = ConfigDict(frozen=True)

    old_value: Any = Field(default=None, description="Value before the correction")
    new_value: Any = Field(default=None, description="Value after the correction")
    rejection_reason: str | None = Field(
        default=None, description="Why staff rejected the old value"
    )
    corrected_by: CorrectorRef | None = Field(default=None, description="Who corrected")
    corrected_at: datetime = Field(default_factory=utc_now, description="Correction time")


class DataVerification(BaseModel):
    """Verification state of one applicant field."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    applicant_id: UUID = Field(..., description="Applicant the field belongs to")
    field_name: str = Field(..., description="Ledger field name")
    field_value: str | None = Field(default=None, description="Verified value")
    method: VerificationMethod = Field(
        default=VerificationMethod.MANUAL, description="Source of the verification"
    )
    is_verified: bool = Field(default=False, description="Value is currently verified")
    is_locked: bool = Field(
        default=False, description="Protected from lower-precedence writes and staff rejection"
    )
    status: VerificationStatus = Field(
        default=VerificationStatus.PENDING, description="Review status"
    )
    metadata: dict[str, Any] = Field(default_factory=dict, description="Source payload")
    notes: str | None = Field(default=None, description="Reviewer or system notes")
    rejection_reason: str | None = Field(default=None, description="Why the value was rejected")
    rejected_at: datetime | None = Field(default=None, description="Rejection time")
    rejected_by: str | None = Field(default=None, description="Reviewer who rejected")
    corrected_at: datetime | None = Field(default=None, description="Last correction time")
    correction_history: list[CorrectionEntry] = Field(
        default_factory=list, description="Corrections, oldest first"
    )
    verified_by: str | None = Field(default=None, description="Reviewer for manual checks")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update")

    @property
    def tier(self) -> VerificationTier:
        return self.method.tier

    @property
    def correction_count(self) -> int:
        return len(self.correction_history)

    @property
    def is_rejected(self) -> bool:
        return self.status == VerificationStatus.REJECTED

    def mark_verified(
        self,
        value: str | None,
        method: VerificationMethod,
        *,
        metadata: dict[str, Any] | None = None,
        notes: str | None = None,
        verified_by: str | None = None,
    ) -> None:
        """Record a successful verification and clear any rejection."""
        now = utc_now()
        self.field_value = value
        self.method = method
        self.is_verified = True
        # A lock is never released by a later write
        self.is_locked = self.is_locked or method.is_automated
        self.status = VerificationStatus.VERIFIED
        self.metadata = {**(metadata or {}), "verified_at": now.isoformat()}
        self.notes = notes
        self.verified_by = verified_by
        self.rejection_reason = None
        self.rejected_at = None
        self.rejected_by = None
        self.updated_at = now

    def reject(self, reason: str, rejected_by: str | None = None) -> None:
        now = utc_now()
        self.status = VerificationStatus.REJECTED
        self.is_verified = False
        self.rejection_reason = reason
        self.rejected_at = now
        self.rejected_by = rejected_by
        self.updated_at = now

    def unverify(self) -> None:
        self.status = VerificationStatus.PENDING
        self.is_verified = False
        self.rejection_reason = None
        self.rejected_at = None
        self.rejected_by = None
        self.updated_at = utc_now()

    def mark_corrected(
        self,
        old_value: Any,
        new_value: Any,
        corrected_by: CorrectorRef | None = None,
    ) -> CorrectionEntry:
        """Append a correction and move the record to CORRECTED."""
        entry = CorrectionEntry(
            old_value=old_value,
            new_value=new_value,
            rejection_reason=self.rejection_reason,
            corrected_by=corrected_by,
        )
        self.correction_history = [*self.correction_history, entry]
        self.field_value = normalize_value(new_value)
        self.status = VerificationStatus.CORRECTED
        self.is_verified = False
        self.corrected_at = entry.corrected_at
        self.updated_at = entry.corrected_at
        return entry


class FieldSummary(BaseModel):
    """Per-field entry of a verification summary."""

    verified: bool
    locked: bool
    method: VerificationMethod
    status: VerificationStatus


class VerificationSummary(BaseModel):
    """Counts and per-field state of an applicant's ledger."""

    total: int = 0
    verified: int = 0
    locked: int = 0
    pending: int = 0
    rejected: int = 0
    fields: dict[str, FieldSummary] = Field(default_factory=dict)


class VerifiedField(BaseModel):
    """A verified value as exposed to callers outside the ledger."""

    value: str | None
    method: VerificationMethod
    method_label: str
    verified_at: datetime
    locked: bool
    metadata: dict[str, Any] = Field(default_factory=dict)
