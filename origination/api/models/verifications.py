"""Response models for the verification ledger."""

from uuid import UUID

from pydantic import BaseModel, Field

from origination.applicants.enums import KycStatus
from origination.verification.models import VerificationSummary, VerifiedField


class VerificationsResponse(BaseModel):
    applicant_id: UUID
    kyc_status: KycStatus
    summary: VerificationSummary
    verified_fields: dict[str, VerifiedField] = Field(default_factory=dict)
    locked_fields: list[str] = Field(default_factory=list)
