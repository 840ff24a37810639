"""Applicant actions on their own applications."""

from uuid import UUID

from fastapi import APIRouter

from origination.api.dependencies import WorkflowServiceDep
from origination.api.middleware.auth import ApplicantContextDep
from origination.api.models.applications import (
    ApplicationResponse,
    CounterOfferResponseRequest,
)

router = APIRouter(prefix="/applicant/applications")


@router.post("/{application_id}/submit", response_model=ApplicationResponse)
async def submit_application(
    application_id: UUID,
    context: ApplicantContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.submit(
        context.tenant_id, application_id, context.actor(), context.applicant_id
    )
    return ApplicationResponse.from_application(application)


@router.post("/{application_id}/counter-offer/respond", response_model=ApplicationResponse)
async def respond_to_counter_offer(
    application_id: UUID,
    request: CounterOfferResponseRequest,
    context: ApplicantContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.respond_to_counter_offer(
        context.tenant_id,
        application_id,
        context.actor(),
        request.accept,
        context.applicant_id,
    )
    return ApplicationResponse.from_application(application)
