"""Verification ledger summaries for staff."""

from uuid import UUID

from fastapi import APIRouter

from origination.api.dependencies import ApplicantStoreDep, VerificationServiceDep
from origination.api.exceptions import ApplicantNotFoundAPIError
from origination.api.middleware.auth import StaffContextDep
from origination.api.models.verifications import VerificationsResponse
from origination.applicants.store import ApplicantStore
from origination.verification.service import VerificationService

router = APIRouter(prefix="/staff/applicants")


async def build_verifications(
    tenant_id: UUID,
    applicant_id: UUID,
    applicants: ApplicantStore,
    verification: VerificationService,
) -> VerificationsResponse:
    applicant = await applicants.get(tenant_id, applicant_id)
    if applicant is None:
        raise ApplicantNotFoundAPIError(f"Applicant {applicant_id} not found")
    return VerificationsResponse(
        applicant_id=applicant_id,
        kyc_status=applicant.kyc_status,
        summary=await verification.get_summary(tenant_id, applicant_id),
        verified_fields=await verification.get_verified_fields(tenant_id, applicant_id),
        locked_fields=await verification.get_locked_fields(tenant_id, applicant_id),
    )


@router.get("/{applicant_id}/verifications", response_model=VerificationsResponse)
async def get_verifications(
    applicant_id: UUID,
    context: StaffContextDep,
    applicants: ApplicantStoreDep,
    verification: VerificationServiceDep,
) -> VerificationsResponse:
    return await build_verifications(context.tenant_id, applicant_id, applicants, verification)
