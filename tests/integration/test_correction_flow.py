"""End-to-end review flows across the ledger, workflow and corrections.

Runs the services together over in-memory stores with the mock KYC
provider: KYC locks identity fields, staff reject what the provider did
not confirm, the applicant corrects it and the application returns to
review on its own.
"""

from decimal import Decimal
from uuid import UUID

import pytest

from origination.applicants.enums import KycStatus
from origination.applicants.models import Applicant
from origination.applicants.stores.inmemory import InMemoryApplicantStore
from origination.applications.enums import (
    ApplicationStatus,
    ChecklistStatus,
    ReviewAction,
    TimelineEvent,
)
from origination.applications.models import Actor, Application
from origination.applications.service import ApplicationWorkflowService
from origination.audit.models import AuditEventType
from origination.audit.stores.inmemory import InMemoryAuditStore
from origination.corrections.service import CorrectionService
from origination.documents.enums import DocumentStatus, DocumentType
from origination.documents.service import DocumentReviewService
from origination.errors import FieldLockedError
from origination.kyc.service import KycService
from origination.providers.kyc import MockKycProvider
from origination.verification.enums import VerificationStatus
from origination.verification.service import VerificationService

CURP = "PELJ900515HDFRPN09"


async def _in_review(
    workflow: ApplicationWorkflowService,
    tenant_id: UUID,
    applicant: Applicant,
    staff: Actor,
) -> Application:
    application = await workflow.create(
        tenant_id, applicant.id, Decimal("15000"), 12, purpose="Capital de trabajo"
    )
    await workflow.submit(tenant_id, application.id, staff)
    return await workflow.change_status(
        tenant_id, application.id, ApplicationStatus.IN_REVIEW, staff
    )


class TestCorrectionFlow:
    """Reject, correct and approve with KYC-locked identity fields."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_rejected_fields_corrected_then_approved(
        self,
        workflow: ApplicationWorkflowService,
        corrections: CorrectionService,
        verification: VerificationService,
        documents: DocumentReviewService,
        applicant_store: InMemoryApplicantStore,
        audit_store: InMemoryAuditStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        kyc = KycService(
            MockKycProvider(), verification, documents, applicant_store, audit_store
        )
        application = await _in_review(workflow, tenant_id, applicant, staff)

        await kyc.validate_curp(tenant_id, applicant.id, CURP)
        assert await verification.is_locked(tenant_id, applicant.id, "curp")
        stored = await applicant_store.get(tenant_id, applicant.id)
        assert stored.kyc_status == KycStatus.VERIFIED

        with pytest.raises(FieldLockedError):
            await workflow.verify_data(
                tenant_id,
                application.id,
                "curp",
                ReviewAction.REJECT,
                staff,
                rejection_reason="No coincide",
            )

        await workflow.verify_data(
            tenant_id,
            application.id,
            "phone",
            ReviewAction.REJECT,
            staff,
            rejection_reason="Número sin servicio",
        )
        outcome = await workflow.verify_data(
            tenant_id,
            application.id,
            "email",
            ReviewAction.REJECT,
            staff,
            rejection_reason="Correo rebotado",
        )
        assert outcome.application.status == ApplicationStatus.CORRECTIONS_PENDING
        assert not outcome.status_changed

        pending = await corrections.list_pending(tenant_id, applicant.id)
        assert {f.field_name for f in pending.rejected_fields} == {"phone", "email"}

        first = await corrections.submit(
            tenant_id, applicant.id, "phone", "5598765432", applicant_actor
        )
        assert first.advanced_applications == []
        current = await workflow.get(tenant_id, application.id)
        assert current.status == ApplicationStatus.CORRECTIONS_PENDING

        second = await corrections.submit(
            tenant_id, applicant.id, "email", "juan.perez@example.com", applicant_actor
        )
        assert second.advanced_applications == [application.id]

        current = await workflow.get(tenant_id, application.id)
        assert current.status == ApplicationStatus.IN_REVIEW
        assert current.verification_checklist["phone"].status == ChecklistStatus.CORRECTED
        assert current.verification_checklist["email"].status == ChecklistStatus.CORRECTED
        assert [c.field_name for c in current.correction_history] == ["phone", "email"]

        record = await verification.get(tenant_id, applicant.id, "email")
        assert record.status == VerificationStatus.CORRECTED
        assert record.field_value == "juan.perez@example.com"

        approved = await workflow.approve(tenant_id, application.id, staff)
        assert approved.status == ApplicationStatus.APPROVED
        assert approved.approved_amount == Decimal("15000")

        statuses = [
            entry.to_status
            for entry in approved.status_history
            if isinstance(entry.to_status, ApplicationStatus)
        ]
        assert statuses == [
            ApplicationStatus.SUBMITTED,
            ApplicationStatus.IN_REVIEW,
            ApplicationStatus.CORRECTIONS_PENDING,
            ApplicationStatus.IN_REVIEW,
            ApplicationStatus.APPROVED,
        ]
        corrected_entries = [
            entry
            for entry in approved.status_history
            if entry.to_status == TimelineEvent.DATA_CORRECTED
        ]
        assert len(corrected_entries) == 2

        status_events = await audit_store.list_events_by_application(
            tenant_id, application.id, event_type=AuditEventType.STATUS_CHANGED
        )
        assert [e.event_data["to_status"] for e in status_events] == [
            "SUBMITTED",
            "IN_REVIEW",
            "CORRECTIONS_PENDING",
            "IN_REVIEW",
            "APPROVED",
        ]
        corrected = await audit_store.list_events_by_applicant(
            tenant_id, applicant.id, event_type=AuditEventType.FIELD_CORRECTED
        )
        assert len(corrected) == 2

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_rejected_document_replaced_and_approved(
        self,
        workflow: ApplicationWorkflowService,
        documents: DocumentReviewService,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
    ) -> None:
        application = await _in_review(workflow, tenant_id, applicant, staff)
        document = await documents.register(
            tenant_id,
            applicant.id,
            DocumentType.PROOF_OF_ADDRESS,
            "recibo.pdf",
            application_id=application.id,
        )

        outcome = await documents.reject(
            tenant_id, application.id, document.id, "Ilegible", staff
        )
        assert outcome.new_status == ApplicationStatus.DOCS_PENDING

        replacement = await documents.register(
            tenant_id,
            applicant.id,
            DocumentType.PROOF_OF_ADDRESS,
            "recibo-nuevo.pdf",
            application_id=application.id,
        )
        assert not await workflow.check_and_advance(tenant_id, application.id, staff)

        outcome = await documents.approve(tenant_id, application.id, replacement.id, staff)
        assert outcome.new_status == ApplicationStatus.IN_REVIEW

        previous = await documents.get(tenant_id, document.id)
        assert previous.status == DocumentStatus.REJECTED
        assert previous.replaced_by_id == replacement.id
