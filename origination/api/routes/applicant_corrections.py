"""Applicant correction endpoints."""

from fastapi import APIRouter, Request

from origination.api.dependencies import CorrectionServiceDep
from origination.api.middleware.auth import ApplicantContextDep
from origination.api.models.corrections import CorrectionRequest, PendingCorrectionsResponse
from origination.corrections.models import CorrectionResult, RejectedField

router = APIRouter(prefix="/applicant/corrections")


@router.get("", response_model=PendingCorrectionsResponse)
async def list_pending_corrections(
    context: ApplicantContextDep,
    corrections: CorrectionServiceDep,
) -> PendingCorrectionsResponse:
    """Rejected fields and documents across the applicant's open applications."""
    pending = await corrections.list_pending(context.tenant_id, context.applicant_id)
    return PendingCorrectionsResponse.from_pending(pending)


@router.get("/{field_name}", response_model=RejectedField)
async def show_correction(
    field_name: str,
    context: ApplicantContextDep,
    corrections: CorrectionServiceDep,
) -> RejectedField:
    return await corrections.show(context.tenant_id, context.applicant_id, field_name)


@router.post("", response_model=CorrectionResult)
async def submit_correction(
    body: CorrectionRequest,
    request: Request,
    context: ApplicantContextDep,
    corrections: CorrectionServiceDep,
) -> CorrectionResult:
    request_context = getattr(request.state, "context", None)
    request_meta = {
        "ip": request_context.client_ip if request_context else None,
        "user_agent": request_context.user_agent if request_context else None,
    }
    return await corrections.submit(
        context.tenant_id,
        context.applicant_id,
        body.field_name,
        body.new_value,
        context.actor(),
        geolocation=body.geolocation.model_dump() if body.geolocation else None,
        request_meta=request_meta,
    )
