"""Applicant corrections of rejected data.

When staff reject a field the application waits in CORRECTIONS_PENDING.
The applicant submits a new value here; every pending application gets a
timeline entry and its checklist entry is marked CORRECTED, and any
application left without rejections goes back to IN_REVIEW.
"""

from typing import Any
from uuid import UUID

from origination.applicants.models import Applicant
from origination.applicants.store import ApplicantStore
from origination.applications.enums import ApplicationStatus, ChecklistStatus, TimelineEvent
from origination.applications.models import Actor, Application, FieldCorrection, utc_now
from origination.applications.service import ApplicationWorkflowService
from origination.applications.transitions import CORRECTABLE_STATUSES
from origination.corrections.formatting import correction_label, format_value_for_display
from origination.corrections.models import (
    CorrectionRecord,
    CorrectionResult,
    PendingApplicationRef,
    PendingCorrections,
    RejectedDocument,
    RejectedField,
)
from origination.documents.enums import DocumentStatus
from origination.documents.store import DocumentStore
from origination.errors import (
    ApplicantNotFoundError,
    CorrectionNotAllowedError,
    CorrectionNotFoundError,
    FieldLockedError,
)
from origination.locking import KeyedMutex
from origination.observability.logging import get_logger
from origination.observability.metrics import CORRECTIONS_SUBMITTED
from origination.verification.models import CorrectorRef
from origination.verification.service import VerificationService

logger = get_logger(__name__)


class CorrectionService:
    """Lists what an applicant must fix and applies their corrections."""

    def __init__(
        self,
        applicant_store: ApplicantStore,
        document_store: DocumentStore,
        workflow: ApplicationWorkflowService,
        verification: VerificationService,
    ) -> None:
        self._applicants = applicant_store
        self._documents = document_store
        self._workflow = workflow
        self._verification = verification
        self._locks = KeyedMutex()

    async def list_pending(self, tenant_id: UUID, applicant_id: UUID) -> PendingCorrections:
        applicant = await self._require_applicant(tenant_id, applicant_id)
        applications = await self._pending_applications(tenant_id, applicant_id)

        rejected_fields: dict[str, RejectedField] = {}
        history: list[CorrectionRecord] = []
        for application in applications:
            for field_name, entry in application.verification_checklist.items():
                if entry.status != ChecklistStatus.REJECTED or field_name in rejected_fields:
                    continue
                rejected_fields[field_name] = RejectedField(
                    id=f"{application.id}_{field_name}",
                    application_id=application.id,
                    field_name=field_name,
                    field_label=correction_label(field_name),
                    current_value=format_value_for_display(applicant.get_field_value(field_name)),
                    rejection_reason=entry.rejection_reason,
                    rejected_at=entry.rejected_at or entry.verified_at,
                    rejected_by=entry.verified_by,
                )
            history.extend(
                CorrectionRecord(
                    application_id=application.id,
                    field_name=c.field_name,
                    field_label=correction_label(c.field_name),
                    old_value=c.old_value,
                    new_value=c.new_value,
                    rejection_reason=c.rejection_reason,
                    corrected_by=c.corrected_by,
                    corrected_at=c.corrected_at,
                )
                for c in application.correction_history
            )
        history.sort(key=lambda record: record.corrected_at, reverse=True)

        return PendingCorrections(
            rejected_fields=list(rejected_fields.values()),
            rejected_documents=await self._rejected_documents(
                tenant_id, applicant_id, applications
            ),
            correction_history=history,
            pending_applications=[
                PendingApplicationRef(
                    id=app.id, folio=app.folio, status=app.status, updated_at=app.updated_at
                )
                for app in applications
            ],
        )

    async def show(self, tenant_id: UUID, applicant_id: UUID, field_name: str) -> RejectedField:
        """Rejection details of one field.

        Raises:
            CorrectionNotFoundError: The field is not rejected on any pending application
        """
        pending = await self.list_pending(tenant_id, applicant_id)
        for rejected in pending.rejected_fields:
            if rejected.field_name == field_name:
                return rejected
        raise CorrectionNotFoundError(f"Field {field_name} is not awaiting correction")

    async def submit(
        self,
        tenant_id: UUID,
        applicant_id: UUID,
        field_name: str,
        new_value: Any,
        actor: Actor,
        geolocation: dict[str, Any] | None = None,
        request_meta: dict[str, Any] | None = None,
    ) -> CorrectionResult:
        """Apply a correction to a rejected field.

        Raises:
            CorrectionNotFoundError: The applicant has no pending applications
            CorrectionNotAllowedError: The field is not rejected on any of them
            FieldLockedError: The ledger value is locked by an automated source
        """
        async with self._locks.acquire((tenant_id, applicant_id)):
            applications = await self._pending_applications(tenant_id, applicant_id)
            if not applications:
                raise CorrectionNotFoundError("No hay correcciones pendientes")
            if not any(
                app.verification_checklist.get(field_name) is not None
                and app.verification_checklist[field_name].status == ChecklistStatus.REJECTED
                for app in applications
            ):
                raise CorrectionNotAllowedError(field_name)
            if await self._verification.is_locked(tenant_id, applicant_id, field_name):
                raise FieldLockedError(field_name)

            applicant = await self._require_applicant(tenant_id, applicant_id)
            old_value = applicant.get_field_value(field_name)
            applicant.set_field_value(field_name, new_value)
            applicant.updated_at = utc_now()
            await self._applicants.save(applicant)

            await self._verification.mark_corrected(
                tenant_id,
                applicant_id,
                field_name,
                old_value,
                new_value,
                CorrectorRef(
                    id=actor.id,
                    name=actor.name or applicant.full_name or "Solicitante",
                    type=actor.type.value,
                ),
            )

            result = CorrectionResult(field_name=field_name)
            for pending in applications:
                async with self._workflow.locked(tenant_id, pending.id) as application:
                    self._record_correction(
                        application,
                        applicant,
                        field_name,
                        old_value,
                        new_value,
                        actor,
                        geolocation,
                        request_meta,
                    )
                    result.updated_applications.append(application.id)

                    if (
                        application.status == ApplicationStatus.CORRECTIONS_PENDING
                        and await self._workflow.ready_for_review(
                            application, allow_pending_documents=True
                        )
                        and await self._workflow.move_if_allowed(
                            application,
                            ApplicationStatus.IN_REVIEW,
                            actor,
                            "Correcciones completadas",
                            {"trigger": "corrections_completed"},
                        )
                    ):
                        result.advanced_applications.append(application.id)

        CORRECTIONS_SUBMITTED.labels(field=field_name).inc()
        logger.info(
            "correction_submitted",
            applicant_id=str(applicant_id),
            field_name=field_name,
            applications=len(result.updated_applications),
            advanced=len(result.advanced_applications),
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_applicant(self, tenant_id: UUID, applicant_id: UUID) -> Applicant:
        applicant = await self._applicants.get(tenant_id, applicant_id)
        if applicant is None:
            raise ApplicantNotFoundError(f"Applicant {applicant_id} not found")
        return applicant

    async def _pending_applications(self, tenant_id: UUID, applicant_id: UUID) -> list[Application]:
        return await self._workflow.list_for_applicant(
            tenant_id, applicant_id, statuses=CORRECTABLE_STATUSES
        )

    async def _rejected_documents(
        self, tenant_id: UUID, applicant_id: UUID, applications: list[Application]
    ) -> list[RejectedDocument]:
        pending_ids = {app.id for app in applications}
        documents = await self._documents.list_for_applicant(tenant_id, applicant_id)
        return [
            RejectedDocument(
                id=doc.id,
                application_id=doc.application_id,
                type=doc.type,
                type_label=doc.type.label,
                name=doc.file_name,
                rejection_reason=doc.rejection_reason,
                rejected_at=doc.reviewed_at,
            )
            for doc in documents
            if doc.status == DocumentStatus.REJECTED
            and (doc.application_id is None or doc.application_id in pending_ids)
        ]

    @staticmethod
    def _record_correction(
        application: Application,
        applicant: Applicant,
        field_name: str,
        old_value: Any,
        new_value: Any,
        actor: Actor,
        geolocation: dict[str, Any] | None,
        request_meta: dict[str, Any] | None,
    ) -> None:
        now = utc_now()
        rejection_reason = None
        entry = application.verification_checklist.get(field_name)
        if entry is not None:
            rejection_reason = entry.rejection_reason
            corrected = entry.model_copy(
                update={
                    "status": ChecklistStatus.CORRECTED,
                    "corrected_at": now,
                    "corrected_by": actor.id,
                }
            )
            application.verification_checklist = {
                **application.verification_checklist,
                field_name: corrected,
            }

        application.correction_history = [
            *application.correction_history,
            FieldCorrection(
                field_name=field_name,
                old_value=old_value,
                new_value=new_value,
                rejection_reason=rejection_reason,
                corrected_by={
                    "id": actor.id,
                    "name": actor.name or applicant.full_name or "Solicitante",
                },
                corrected_at=now,
            ),
        ]

        metadata: dict[str, Any] = {
            "action": "data_corrected",
            "field_name": field_name,
            "field_label": correction_label(field_name),
            "old_value": format_value_for_display(old_value),
            "new_value": format_value_for_display(new_value),
            **(request_meta or {}),
        }
        if geolocation:
            metadata["geolocation"] = {
                key: geolocation.get(key)
                for key in ("latitude", "longitude", "accuracy", "timestamp")
            }

        application.add_history(
            TimelineEvent.DATA_CORRECTED,
            actor,
            notes=f"Dato corregido: {correction_label(field_name)}",
            metadata=metadata,
        )
