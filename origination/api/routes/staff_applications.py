"""Staff review endpoints for loan applications."""

from uuid import UUID

from fastapi import APIRouter

from origination.api.dependencies import WorkflowServiceDep
from origination.api.middleware.auth import StaffContextDep
from origination.api.models.applications import (
    AllowedStatus,
    AllowedStatusesResponse,
    ApplicationResponse,
    ApproveRequest,
    CounterOfferRequest,
    HistoryResponse,
    RejectRequest,
    ReviewResponse,
    StatusChangeRequest,
    VerifyDataRequest,
)
from origination.applications.models import Application, ReviewOutcome
from origination.applications.service import ApplicationWorkflowService
from origination.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/staff/applications")


def _response(workflow: ApplicationWorkflowService, application: Application) -> ApplicationResponse:
    return ApplicationResponse.from_application(application, workflow.is_stale(application))


def review_response(
    workflow: ApplicationWorkflowService, outcome: ReviewOutcome
) -> ReviewResponse:
    return ReviewResponse(
        application=_response(workflow, outcome.application),
        status_changed=outcome.status_changed,
        new_status=outcome.new_status,
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.get(context.tenant_id, application_id)
    return _response(workflow, application)


@router.get("/{application_id}/history", response_model=HistoryResponse)
async def get_history(
    application_id: UUID,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> HistoryResponse:
    """Application timeline, newest entry first."""
    application = await workflow.get(context.tenant_id, application_id)
    return HistoryResponse(
        application_id=application.id,
        history=list(reversed(application.status_history)),
    )


@router.get("/{application_id}/allowed-statuses", response_model=AllowedStatusesResponse)
async def get_allowed_statuses(
    application_id: UUID,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> AllowedStatusesResponse:
    """Statuses the caller may move the application to."""
    application = await workflow.get(context.tenant_id, application_id)
    return AllowedStatusesResponse(
        current_status=application.status,
        allowed=[
            AllowedStatus(status=status, label=status.label)
            for status in workflow.allowed_next_statuses(application, context.actor())
        ],
    )


@router.post("/{application_id}/status", response_model=ApplicationResponse)
async def change_status(
    application_id: UUID,
    request: StatusChangeRequest,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.change_status(
        context.tenant_id,
        application_id,
        request.status,
        context.actor(),
        request.reason,
        request.metadata,
    )
    return _response(workflow, application)


@router.post("/{application_id}/approve", response_model=ApplicationResponse)
async def approve_application(
    application_id: UUID,
    request: ApproveRequest,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.approve(
        context.tenant_id,
        application_id,
        context.actor(),
        request.approved_amount,
        request.notes,
    )
    return _response(workflow, application)


@router.post("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: UUID,
    request: RejectRequest,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.reject(
        context.tenant_id, application_id, context.actor(), request.reason
    )
    return _response(workflow, application)


@router.post("/{application_id}/counter-offer", response_model=ApplicationResponse)
async def send_counter_offer(
    application_id: UUID,
    request: CounterOfferRequest,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ApplicationResponse:
    application = await workflow.send_counter_offer(
        context.tenant_id,
        application_id,
        context.actor(),
        request.amount,
        request.term_months,
        request.interest_rate,
        request.payment_frequency,
        request.reason,
    )
    return _response(workflow, application)


@router.put("/{application_id}/verify-data", response_model=ReviewResponse)
async def verify_data(
    application_id: UUID,
    request: VerifyDataRequest,
    context: StaffContextDep,
    workflow: WorkflowServiceDep,
) -> ReviewResponse:
    """Verify, reject or unverify one applicant field on this application.

    Rejecting moves the application to CORRECTIONS_PENDING; verifying the
    last open item returns it to IN_REVIEW.
    """
    outcome = await workflow.verify_data(
        context.tenant_id,
        application_id,
        request.field_name,
        request.action,
        context.actor(),
        method=request.method,
        rejection_reason=request.rejection_reason,
        notes=request.notes,
    )
    logger.info(
        "verify_data_request",
        application_id=str(application_id),
        field_name=request.field_name,
        action=request.action.value,
        status_changed=outcome.status_changed,
    )
    return review_response(workflow, outcome)
