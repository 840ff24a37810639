"""Tests for CorrectionService."""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest

from origination.applicants.models import Address, Applicant
from origination.applicants.stores.inmemory import InMemoryApplicantStore
from origination.applications.enums import (
    ApplicationStatus,
    ChecklistStatus,
    ReviewAction,
    TimelineEvent,
)
from origination.applications.models import Actor, Application
from origination.applications.service import ApplicationWorkflowService
from origination.applications.stores.inmemory import InMemoryApplicationStore
from origination.corrections.service import CorrectionService
from origination.documents.enums import DocumentType
from origination.documents.service import DocumentReviewService
from origination.errors import (
    CorrectionNotAllowedError,
    CorrectionNotFoundError,
    FieldLockedError,
    InvalidOperationError,
)
from origination.verification.enums import VerificationMethod, VerificationStatus
from origination.verification.service import VerificationService


async def _rejected_application(
    workflow: ApplicationWorkflowService,
    store: InMemoryApplicationStore,
    tenant_id: UUID,
    applicant: Applicant,
    staff: Actor,
    *fields: str,
) -> Application:
    application = await workflow.create(tenant_id, applicant.id, Decimal("8000"), 6)
    application.status = ApplicationStatus.IN_REVIEW
    await store.save(application)
    for field_name in fields:
        await workflow.verify_data(
            tenant_id,
            application.id,
            field_name,
            ReviewAction.REJECT,
            staff,
            rejection_reason=f"{field_name} incorrecto",
        )
    return await workflow.get(tenant_id, application.id)


class TestListPending:
    """Tests for list_pending and show."""

    @pytest.mark.asyncio
    async def test_lists_rejected_fields(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone"
        )

        pending = await corrections.list_pending(tenant_id, applicant.id)

        assert pending.has_corrections_pending
        assert len(pending.rejected_fields) == 1
        rejected = pending.rejected_fields[0]
        assert rejected.id == f"{application.id}_phone"
        assert rejected.field_label == "Teléfono"
        assert rejected.current_value == "5512345678"
        assert rejected.rejection_reason == "phone incorrecto"
        assert [ref.folio for ref in pending.pending_applications] == [application.folio]

    @pytest.mark.asyncio
    async def test_includes_rejected_documents(
        self,
        corrections: CorrectionService,
        documents: DocumentReviewService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff
        )
        document = await documents.register(
            tenant_id, applicant.id, DocumentType.PROOF_OF_ADDRESS, "recibo.pdf", application.id
        )
        await documents.reject(tenant_id, application.id, document.id, "Vencido", staff)

        pending = await corrections.list_pending(tenant_id, applicant.id)

        assert pending.rejected_fields == []
        assert [d.id for d in pending.rejected_documents] == [document.id]
        assert pending.rejected_documents[0].type_label == "Comprobante de Domicilio"
        assert pending.has_corrections_pending

    @pytest.mark.asyncio
    async def test_nothing_pending(
        self, corrections: CorrectionService, tenant_id: UUID, applicant: Applicant
    ) -> None:
        pending = await corrections.list_pending(tenant_id, applicant.id)

        assert not pending.has_corrections_pending
        assert pending.pending_applications == []

    @pytest.mark.asyncio
    async def test_show_field_not_rejected(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
    ) -> None:
        await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone"
        )

        assert (await corrections.show(tenant_id, applicant.id, "phone")).field_name == "phone"
        with pytest.raises(CorrectionNotFoundError):
            await corrections.show(tenant_id, applicant.id, "email")


class TestSubmit:
    """Tests for submitting corrections."""

    @pytest.mark.asyncio
    async def test_correction_returns_application_to_review(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        applicant_store: InMemoryApplicantStore,
        verification: VerificationService,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone"
        )
        assert application.status == ApplicationStatus.CORRECTIONS_PENDING

        result = await corrections.submit(
            tenant_id,
            applicant.id,
            "phone",
            "5598765432",
            applicant_actor,
            geolocation={"latitude": 19.43, "longitude": -99.13, "accuracy": 10},
            request_meta={"ip": "10.0.0.1"},
        )

        assert result.updated_applications == [application.id]
        assert result.advanced_applications == [application.id]

        updated = await workflow.get(tenant_id, application.id)
        assert updated.status == ApplicationStatus.IN_REVIEW
        assert updated.verification_checklist["phone"].status == ChecklistStatus.CORRECTED
        assert updated.correction_history[-1].old_value == "5512345678"
        assert updated.correction_history[-1].rejection_reason == "phone incorrecto"

        corrected_entry = next(
            h for h in updated.status_history if h.to_status == TimelineEvent.DATA_CORRECTED
        )
        assert corrected_entry.metadata["ip"] == "10.0.0.1"
        assert corrected_entry.metadata["geolocation"]["latitude"] == 19.43
        assert corrected_entry.metadata["geolocation"]["timestamp"] is None

        stored_applicant = await applicant_store.get(tenant_id, applicant.id)
        assert stored_applicant is not None
        assert stored_applicant.phone == "5598765432"
        assert stored_applicant.phone_verified_at is None

        record = await verification.get(tenant_id, applicant.id, "phone")
        assert record is not None
        assert record.status == VerificationStatus.CORRECTED
        assert record.correction_count == 1

    @pytest.mark.asyncio
    async def test_partial_correction_keeps_waiting(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone", "email"
        )

        result = await corrections.submit(
            tenant_id, applicant.id, "email", "juan.perez@example.com", applicant_actor
        )

        assert result.advanced_applications == []
        updated = await workflow.get(tenant_id, application.id)
        assert updated.status == ApplicationStatus.CORRECTIONS_PENDING
        assert updated.rejected_fields() == ["phone"]

    @pytest.mark.asyncio
    async def test_field_not_rejected(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone"
        )

        with pytest.raises(CorrectionNotAllowedError):
            await corrections.submit(tenant_id, applicant.id, "email", "x@y.mx", applicant_actor)

    @pytest.mark.asyncio
    async def test_no_pending_applications(
        self,
        corrections: CorrectionService,
        tenant_id: UUID,
        applicant: Applicant,
        applicant_actor: Actor,
    ) -> None:
        with pytest.raises(CorrectionNotFoundError):
            await corrections.submit(
                tenant_id, applicant.id, "phone", "5500000000", applicant_actor
            )

    @pytest.mark.asyncio
    async def test_locked_field_cannot_be_corrected(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        verification: VerificationService,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone"
        )
        await verification.verify(
            tenant_id, applicant.id, "phone", "5512345678", VerificationMethod.OTP
        )

        with pytest.raises(FieldLockedError):
            await corrections.submit(
                tenant_id, applicant.id, "phone", "5598765432", applicant_actor
            )

        unchanged = await workflow.get(tenant_id, application.id)
        assert unchanged.status == ApplicationStatus.CORRECTIONS_PENDING
        assert unchanged.correction_history == []

    @pytest.mark.asyncio
    async def test_birth_date_in_day_month_year_format(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        applicant_store: InMemoryApplicantStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "birth_date"
        )

        result = await corrections.submit(
            tenant_id, applicant.id, "birth_date", "15/03/1990", applicant_actor
        )

        assert len(result.updated_applications) == 1
        stored = await applicant_store.get(tenant_id, applicant.id)
        assert stored is not None
        assert stored.birth_date == date(1990, 3, 15)
        assert stored.get_field_value("birth_date") == "1990-03-15"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["1990-13-45", "ayer", "31/02/1990"])
    async def test_malformed_birth_date_is_rejected(
        self,
        value: str,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        applicant_store: InMemoryApplicantStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "birth_date"
        )

        with pytest.raises(InvalidOperationError):
            await corrections.submit(tenant_id, applicant.id, "birth_date", value, applicant_actor)

        stored = await applicant_store.get(tenant_id, applicant.id)
        assert stored is not None
        assert stored.birth_date is None
        unchanged = await workflow.get(tenant_id, application.id)
        assert unchanged.status == ApplicationStatus.CORRECTIONS_PENDING
        assert unchanged.correction_history == []

    @pytest.mark.asyncio
    async def test_address_component_correction(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        applicant_store: InMemoryApplicantStore,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        applicant.address = Address(street="Av. Reforma", ext_number="10", postal_code="06600")
        await applicant_store.save(applicant)
        await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "colony"
        )

        result = await corrections.submit(
            tenant_id, applicant.id, "colony", "Juárez", applicant_actor
        )

        assert len(result.advanced_applications) == 1
        stored = await applicant_store.get(tenant_id, applicant.id)
        assert stored is not None
        assert stored.address is not None
        assert stored.address.neighborhood == "Juárez"
        assert stored.address.street == "Av. Reforma"
        assert stored.get_field_value("colony") == "Juárez"


class _InterleavingApplicantStore(InMemoryApplicantStore):
    """Yields to the event loop on every read so concurrent submissions interleave."""

    async def get(self, tenant_id: UUID, applicant_id: UUID) -> Applicant | None:
        await asyncio.sleep(0)
        return await super().get(tenant_id, applicant_id)


class TestConcurrentSubmit:
    """Corrections submitted at the same time by one applicant."""

    @pytest.fixture
    def applicant_store(self) -> InMemoryApplicantStore:
        return _InterleavingApplicantStore()

    @pytest.mark.asyncio
    async def test_each_submission_is_recorded(
        self,
        corrections: CorrectionService,
        workflow: ApplicationWorkflowService,
        application_store: InMemoryApplicationStore,
        applicant_store: InMemoryApplicantStore,
        verification: VerificationService,
        tenant_id: UUID,
        applicant: Applicant,
        staff: Actor,
        applicant_actor: Actor,
    ) -> None:
        application = await _rejected_application(
            workflow, application_store, tenant_id, applicant, staff, "phone", "email"
        )

        results = await asyncio.gather(
            corrections.submit(tenant_id, applicant.id, "phone", "5598765432", applicant_actor),
            corrections.submit(
                tenant_id, applicant.id, "email", "juan.perez@example.com", applicant_actor
            ),
        )

        assert sum(len(r.advanced_applications) for r in results) == 1
        updated = await workflow.get(tenant_id, application.id)
        assert updated.status == ApplicationStatus.IN_REVIEW
        assert sorted(c.field_name for c in updated.correction_history) == ["email", "phone"]
        assert updated.rejected_fields() == []

        stored = await applicant_store.get(tenant_id, applicant.id)
        assert stored is not None
        assert stored.phone == "5598765432"
        assert stored.email == "juan.perez@example.com"

        for field_name in ("phone", "email"):
            record = await verification.get(tenant_id, applicant.id, field_name)
            assert record is not None
            assert record.correction_count == 1
            assert len(record.correction_history) == 1

        assert len(corrections._locks) == 0
        assert len(workflow._locks) == 0
