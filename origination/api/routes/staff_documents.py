"""Staff review endpoints for application documents."""

from uuid import UUID

from fastapi import APIRouter

from origination.api.dependencies import DocumentServiceDep, WorkflowServiceDep
from origination.api.middleware.auth import StaffContextDep
from origination.api.models.applications import ReviewResponse
from origination.api.models.documents import DocumentRejectRequest
from origination.api.routes.staff_applications import review_response

router = APIRouter(prefix="/staff/applications/{application_id}/documents")


@router.put("/{document_id}/approve", response_model=ReviewResponse)
async def approve_document(
    application_id: UUID,
    document_id: UUID,
    context: StaffContextDep,
    documents: DocumentServiceDep,
    workflow: WorkflowServiceDep,
) -> ReviewResponse:
    outcome = await documents.approve(
        context.tenant_id, application_id, document_id, context.actor()
    )
    return review_response(workflow, outcome)


@router.put("/{document_id}/reject", response_model=ReviewResponse)
async def reject_document(
    application_id: UUID,
    document_id: UUID,
    request: DocumentRejectRequest,
    context: StaffContextDep,
    documents: DocumentServiceDep,
    workflow: WorkflowServiceDep,
) -> ReviewResponse:
    outcome = await documents.reject(
        context.tenant_id,
        application_id,
        document_id,
        request.reason,
        context.actor(),
        request.comment,
    )
    return review_response(workflow, outcome)


@router.put("/{document_id}/unapprove", response_model=ReviewResponse)
async def unapprove_document(
    application_id: UUID,
    document_id: UUID,
    context: StaffContextDep,
    documents: DocumentServiceDep,
    workflow: WorkflowServiceDep,
) -> ReviewResponse:
    outcome = await documents.unapprove(
        context.tenant_id, application_id, document_id, context.actor()
    )
    return review_response(workflow, outcome)
