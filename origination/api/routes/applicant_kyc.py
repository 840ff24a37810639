"""Applicant KYC checks.

Each endpoint runs one provider check for the authenticated applicant.
Passing checks write to the verification ledger; failures are returned
as-is so the client can retry.
"""

from fastapi import APIRouter, status

from origination.api.dependencies import (
    ApplicantStoreDep,
    KycServiceDep,
    VerificationServiceDep,
)
from origination.api.middleware.auth import ApplicantContextDep
from origination.api.models.kyc import (
    BlocklistRequest,
    CurpRequest,
    FaceMatchRequest,
    IneRequest,
    LivenessRequest,
    OtpConfirmation,
    RfcRequest,
)
from origination.api.models.verifications import VerificationsResponse
from origination.api.routes.staff_verifications import build_verifications
from origination.providers.kyc.base import (
    BlocklistResult,
    CurpValidation,
    FaceMatchResult,
    IneValidation,
    LivenessResult,
    RfcValidation,
)

router = APIRouter(prefix="/applicant/kyc")


@router.post("/curp", response_model=CurpValidation)
async def validate_curp(
    request: CurpRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> CurpValidation:
    return await kyc.validate_curp(context.tenant_id, context.applicant_id, request.curp)


@router.post("/rfc", response_model=RfcValidation)
async def validate_rfc(
    request: RfcRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> RfcValidation:
    return await kyc.validate_rfc(context.tenant_id, context.applicant_id, request.rfc)


@router.post("/ine", response_model=IneValidation)
async def validate_ine(
    request: IneRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> IneValidation:
    return await kyc.validate_ine(
        context.tenant_id,
        context.applicant_id,
        request.front_image,
        request.back_image,
        request.validate_list,
    )


@router.post("/face-match", response_model=FaceMatchResult)
async def face_match(
    request: FaceMatchRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> FaceMatchResult:
    return await kyc.face_match(
        context.tenant_id,
        context.applicant_id,
        request.selfie_image,
        request.ine_image,
        request.threshold,
    )


@router.post("/liveness", response_model=LivenessResult)
async def liveness(
    request: LivenessRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> LivenessResult:
    return await kyc.liveness(context.tenant_id, context.applicant_id, request.face_image)


@router.post("/ofac", response_model=BlocklistResult)
async def check_ofac(
    request: BlocklistRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> BlocklistResult:
    return await kyc.check_ofac(
        context.tenant_id, context.applicant_id, request.name, request.similarity
    )


@router.post("/pld", response_model=BlocklistResult)
async def check_pld(
    request: BlocklistRequest, context: ApplicantContextDep, kyc: KycServiceDep
) -> BlocklistResult:
    return await kyc.check_pld(
        context.tenant_id, context.applicant_id, request.name, similarity=request.similarity
    )


@router.post("/otp", status_code=status.HTTP_204_NO_CONTENT)
async def confirm_otp(
    request: OtpConfirmation, context: ApplicantContextDep, kyc: KycServiceDep
) -> None:
    await kyc.record_otp(context.tenant_id, context.applicant_id, request.field_name, request.value)


@router.get("/verifications", response_model=VerificationsResponse)
async def get_my_verifications(
    context: ApplicantContextDep,
    applicants: ApplicantStoreDep,
    verification: VerificationServiceDep,
) -> VerificationsResponse:
    return await build_verifications(
        context.tenant_id, context.applicant_id, applicants, verification
    )
