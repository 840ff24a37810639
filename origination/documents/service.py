"""Document registration and staff review."""

from typing import Any
from uuid import UUID

from origination.applications.enums import ApplicationStatus, TimelineEvent
from origination.applications.models import Actor, ReviewOutcome
from origination.applications.service import ApplicationWorkflowService
from origination.applications.transitions import PERMISSION_REVIEW_DOCUMENTS
from origination.audit.models import AuditEvent, AuditEventType
from origination.audit.store import AuditStore
from origination.documents.enums import DocumentStatus, DocumentType
from origination.documents.models import Document, utc_now
from origination.documents.store import DocumentStore
from origination.errors import DocumentNotFoundError, PermissionDeniedError
from origination.observability.logging import get_logger
from origination.observability.metrics import DOCUMENT_REVIEWS

logger = get_logger(__name__)


class DocumentReviewService:
    """Keeps one current document per type and records staff decisions."""

    def __init__(
        self,
        store: DocumentStore,
        workflow: ApplicationWorkflowService,
        audit_store: AuditStore,
    ) -> None:
        self._store = store
        self._workflow = workflow
        self._audit = audit_store

    async def register(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_type: DocumentType,
        file_name: str,
        application_id: UUID | None = None,
        mime_type: str = "application/octet-stream",
        size_bytes: int = 0,
        checksum: str | None = None,
        storage_path: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Document:
        """Record an uploaded document, replacing the current one of the same type."""
        document = Document(
            tenant_id=tenant_id,
            applicant_id=applicant_id,
            application_id=application_id,
            type=document_type,
            file_name=file_name,
            mime_type=mime_type,
            size_bytes=size_bytes,
            checksum=checksum,
            storage_path=storage_path,
            metadata=metadata or {},
        )

        previous = await self._store.find_current(
            tenant_id, applicant_id, document_type, application_id
        )
        if previous is not None:
            previous.replaced_at = utc_now()
            previous.replaced_by_id = document.id
            previous.updated_at = previous.replaced_at
            await self._store.save(previous)

        await self._store.save(document)
        logger.info(
            "document_registered",
            document_id=str(document.id),
            document_type=document_type.value,
            replaced=str(previous.id) if previous else None,
        )
        return document

    async def get(self, tenant_id: UUID, document_id: UUID) -> Document:
        document = await self._store.get(tenant_id, document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    async def list_for_application(
        self, tenant_id: UUID, applicant_id: UUID, application_id: UUID
    ) -> list[Document]:
        return await self._store.list_for_application(tenant_id, applicant_id, application_id)

    async def approve(
        self, tenant_id: UUID, application_id: UUID, document_id: UUID, actor: Actor
    ) -> ReviewOutcome:
        """Approve a document, then return the application to review if nothing else blocks it."""
        self._require_reviewer(actor)
        async with self._workflow.locked(tenant_id, application_id) as application:
            document = await self._application_document(
                tenant_id, application.applicant_id, application_id, document_id
            )
            previous_status = application.status
            old_doc_status = document.status

            document.status = DocumentStatus.APPROVED
            document.rejection_reason = None
            document.rejection_comment = None
            self._mark_reviewed(document, actor)
            await self._store.save(document)

            application.add_history(
                TimelineEvent.DOCUMENT_REVIEW,
                actor,
                notes=f"Documento '{document.type.value}' aprobado",
                metadata=self._review_metadata(
                    "document_approved", document, old_doc_status
                ),
            )
            await self._workflow.advance_if_ready(application, actor)

        await self._record_review(application.id, document, actor, "approved")
        return self._outcome(application, previous_status)

    async def reject(
        self,
        tenant_id: UUID,
        application_id: UUID,
        document_id: UUID,
        reason: str,
        actor: Actor,
        comment: str | None = None,
    ) -> ReviewOutcome:
        """Reject a document and move the application to DOCS_PENDING when allowed."""
        self._require_reviewer(actor)
        async with self._workflow.locked(tenant_id, application_id) as application:
            document = await self._application_document(
                tenant_id, application.applicant_id, application_id, document_id
            )
            previous_status = application.status
            old_doc_status = document.status

            document.status = DocumentStatus.REJECTED
            document.rejection_reason = reason
            document.rejection_comment = comment
            self._mark_reviewed(document, actor)
            await self._store.save(document)

            application.add_history(
                TimelineEvent.DOCUMENT_REVIEW,
                actor,
                notes=f"Documento '{document.type.value}' rechazado: {reason}",
                metadata={
                    **self._review_metadata("document_rejected", document, old_doc_status),
                    "reason": reason,
                    "comment": comment,
                },
            )
            if application.status != ApplicationStatus.DOCS_PENDING:
                await self._workflow.move_if_allowed(
                    application,
                    ApplicationStatus.DOCS_PENDING,
                    actor,
                    "Solicitud movida a documentos pendientes por rechazo de documento "
                    f"'{document.type.value}'",
                    {
                        "action": "status_change",
                        "trigger": "document_rejected",
                        "document_id": str(document.id),
                        "document_type": document.type.value,
                    },
                )

        await self._record_review(application.id, document, actor, "rejected")
        return self._outcome(application, previous_status)

    async def unapprove(
        self, tenant_id: UUID, application_id: UUID, document_id: UUID, actor: Actor
    ) -> ReviewOutcome:
        """Return a reviewed document to PENDING."""
        self._require_reviewer(actor)
        async with self._workflow.locked(tenant_id, application_id) as application:
            document = await self._application_document(
                tenant_id, application.applicant_id, application_id, document_id
            )
            old_doc_status = document.status

            document.status = DocumentStatus.PENDING
            document.rejection_reason = None
            document.rejection_comment = None
            document.reviewed_at = None
            document.reviewed_by = None
            document.updated_at = utc_now()
            await self._store.save(document)

            application.add_history(
                TimelineEvent.DOCUMENT_REVIEW,
                actor,
                notes=f"Documento '{document.type.value}' regresado a pendiente",
                metadata=self._review_metadata(
                    "document_unapproved", document, old_doc_status
                ),
            )

        await self._record_review(application.id, document, actor, "unapproved")
        return self._outcome(application, application.status)

    async def auto_approve_kyc(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        document_type: DocumentType,
        metadata: dict[str, Any] | None = None,
    ) -> Document | None:
        """Approve the applicant's current document of a type after a passing KYC check.

        Returns None when the applicant has no such document.
        """
        document = await self._store.find_current(tenant_id, applicant_id, document_type)
        if document is None:
            return None
        if document.status == DocumentStatus.APPROVED:
            return document

        document.status = DocumentStatus.APPROVED
        document.reviewed_at = utc_now()
        document.reviewed_by = "system"
        document.updated_at = document.reviewed_at
        document.metadata = {
            **document.metadata,
            "auto_approved": True,
            "kyc": metadata or {},
        }
        await self._store.save(document)
        DOCUMENT_REVIEWS.labels(document_type=document_type.value, decision="auto_approved").inc()
        logger.info(
            "document_auto_approved",
            document_id=str(document.id),
            document_type=document_type.value,
        )
        return document

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_reviewer(actor: Actor) -> None:
        if not actor.has_permission(PERMISSION_REVIEW_DOCUMENTS):
            raise PermissionDeniedError(PERMISSION_REVIEW_DOCUMENTS)

    async def _application_document(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        application_id: UUID,
        document_id: UUID,
    ) -> Document:
        document = await self._store.get(tenant_id, document_id)
        if (
            document is None
            or document.applicant_id != applicant_id
            or document.application_id not in (None, application_id)
        ):
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    @staticmethod
    def _mark_reviewed(document: Document, actor: Actor) -> None:
        document.reviewed_at = utc_now()
        document.reviewed_by = actor.id
        document.updated_at = document.reviewed_at

    @staticmethod
    def _review_metadata(
        action: str, document: Document, old_status: DocumentStatus
    ) -> dict[str, Any]:
        return {
            "action": action,
            "document_id": str(document.id),
            "document_type": document.type.value,
            "old_status": old_status.value,
            "new_status": document.status.value,
        }

    async def _record_review(
        self, application_id: UUID, document: Document, actor: Actor, decision: str
    ) -> None:
        DOCUMENT_REVIEWS.labels(document_type=document.type.value, decision=decision).inc()
        logger.info(
            "document_reviewed",
            application_id=str(application_id),
            document_id=str(document.id),
            decision=decision,
        )
        await self._audit.save_event(
            AuditEvent(
                tenant_id=document.tenant_id,
                event_type=AuditEventType.DOCUMENT_REVIEWED,
                event_data={
                    "document_id": str(document.id),
                    "document_type": document.type.value,
                    "decision": decision,
                    "reason": document.rejection_reason,
                },
                applicant_id=document.applicant_id,
                application_id=application_id,
                actor_id=actor.id,
            )
        )

    @staticmethod
    def _outcome(application, previous_status: ApplicationStatus) -> ReviewOutcome:
        changed = application.status != previous_status
        return ReviewOutcome(
            application=application,
            status_changed=changed,
            new_status=application.status if changed else None,
        )
