"""Tests for the staff and applicant HTTP routes."""

from collections.abc import Callable
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from origination import __version__
from origination.api.app import create_app
from origination.api.dependencies import (
    get_applicant_store,
    get_audit_store,
    get_correction_service,
    get_document_service,
    get_kyc_service,
    get_settings,
    get_verification_service,
    get_verification_store,
    get_workflow_service,
)
from origination.api.middleware.auth import get_tenant_context
from origination.api.models.context import TenantContext
from origination.applicants.models import Applicant
from origination.applicants.stores.inmemory import InMemoryApplicantStore
from origination.applications.enums import ActorType, ApplicationStatus, ReviewAction
from origination.applications.models import Actor, Application
from origination.applications.service import ApplicationWorkflowService
from origination.applications.stores.inmemory import InMemoryApplicationStore
from origination.audit.stores.inmemory import InMemoryAuditStore
from origination.config.settings import Settings, set_toml_config
from origination.corrections.service import CorrectionService
from origination.documents.enums import DocumentType
from origination.documents.service import DocumentReviewService
from origination.kyc.service import KycService
from origination.providers.kyc import KycUnavailableError, MockKycProvider
from origination.verification.enums import VerificationMethod
from origination.verification.service import VerificationService
from origination.verification.stores.inmemory import InMemoryVerificationStore

CallerSetter = Callable[[TenantContext], None]


@pytest.fixture
def staff_context(tenant_id: UUID) -> TenantContext:
    return TenantContext(tenant_id=tenant_id, user_id="analyst-1", permissions=frozenset({"*"}))


@pytest.fixture
def applicant_context(tenant_id: UUID, applicant: Applicant) -> TenantContext:
    return TenantContext(
        tenant_id=tenant_id,
        user_id=str(applicant.id),
        actor_type=ActorType.APPLICANT,
        applicant_id=applicant.id,
        name="Juan Pérez",
    )


@pytest.fixture
def kyc_provider() -> MockKycProvider:
    return MockKycProvider()


@pytest.fixture
def kyc(
    kyc_provider: MockKycProvider,
    verification: VerificationService,
    documents: DocumentReviewService,
    applicant_store: InMemoryApplicantStore,
    audit_store: InMemoryAuditStore,
) -> KycService:
    return KycService(kyc_provider, verification, documents, applicant_store, audit_store)


@pytest.fixture
def app(
    staff_context: TenantContext,
    applicant_store: InMemoryApplicantStore,
    verification_store: InMemoryVerificationStore,
    audit_store: InMemoryAuditStore,
    verification: VerificationService,
    workflow: ApplicationWorkflowService,
    documents: DocumentReviewService,
    corrections: CorrectionService,
    kyc: KycService,
) -> FastAPI:
    """Full application with in-memory services and a staff caller."""
    app = create_app()
    set_toml_config({})
    app.dependency_overrides[get_settings] = lambda: Settings()
    app.dependency_overrides[get_tenant_context] = lambda: staff_context
    app.dependency_overrides[get_applicant_store] = lambda: applicant_store
    app.dependency_overrides[get_verification_store] = lambda: verification_store
    app.dependency_overrides[get_audit_store] = lambda: audit_store
    app.dependency_overrides[get_verification_service] = lambda: verification
    app.dependency_overrides[get_workflow_service] = lambda: workflow
    app.dependency_overrides[get_document_service] = lambda: documents
    app.dependency_overrides[get_correction_service] = lambda: corrections
    app.dependency_overrides[get_kyc_service] = lambda: kyc
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def as_caller(app: FastAPI) -> CallerSetter:
    def _set(context: TenantContext) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: context

    return _set


@pytest_asyncio.fixture
async def application(
    workflow: ApplicationWorkflowService,
    application_store: InMemoryApplicationStore,
    tenant_id: UUID,
    applicant: Applicant,
) -> Application:
    created = await workflow.create(
        tenant_id, applicant.id, Decimal("15000"), 12, purpose="Capital de trabajo"
    )
    created.status = ApplicationStatus.IN_REVIEW
    await application_store.save(created)
    return created


def _error(response) -> dict:
    return response.json()["error"]


class TestStaffApplications:
    """Tests for /v1/staff/applications."""

    def test_get_application(self, client: TestClient, application: Application) -> None:
        response = client.get(f"/v1/staff/applications/{application.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["folio"] == application.folio
        assert data["status"] == "IN_REVIEW"
        assert data["status_label"] == "En revisión"
        assert data["is_stale"] is False
        assert "X-Request-ID" in response.headers

    def test_unknown_application(self, client: TestClient) -> None:
        response = client.get(f"/v1/staff/applications/{uuid4()}")

        assert response.status_code == 404
        assert _error(response)["code"] == "APPLICATION_NOT_FOUND"

    def test_reject_field_moves_to_corrections_pending(
        self, client: TestClient, application: Application
    ) -> None:
        response = client.put(
            f"/v1/staff/applications/{application.id}/verify-data",
            json={"field_name": "email", "action": "reject", "rejection_reason": "Rebotado"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status_changed"] is True
        assert data["new_status"] == "CORRECTIONS_PENDING"
        assert data["application"]["verification_checklist"]["email"]["status"] == "REJECTED"

    def test_reject_without_reason(self, client: TestClient, application: Application) -> None:
        response = client.put(
            f"/v1/staff/applications/{application.id}/verify-data",
            json={"field_name": "email", "action": "reject"},
        )

        assert response.status_code == 400
        assert _error(response)["code"] == "INVALID_OPERATION"

    @pytest.mark.asyncio
    async def test_reject_locked_field(
        self,
        client: TestClient,
        application: Application,
        verification: VerificationService,
        tenant_id: UUID,
    ) -> None:
        await verification.verify(
            tenant_id,
            application.applicant_id,
            "curp",
            "PELJ900515HDFRPN09",
            VerificationMethod.RENAPO,
        )

        response = client.put(
            f"/v1/staff/applications/{application.id}/verify-data",
            json={"field_name": "curp", "action": "reject", "rejection_reason": "No coincide"},
        )

        assert response.status_code == 409
        error = _error(response)
        assert error["code"] == "FIELD_LOCKED"
        assert error["field"] == "curp"

    @pytest.mark.asyncio
    async def test_approve_while_corrections_pending(
        self,
        client: TestClient,
        application: Application,
        workflow: ApplicationWorkflowService,
        tenant_id: UUID,
        staff: Actor,
    ) -> None:
        await workflow.verify_data(
            tenant_id, application.id, "phone", ReviewAction.REJECT, staff, rejection_reason="x"
        )

        response = client.post(f"/v1/staff/applications/{application.id}/approve", json={})

        assert response.status_code == 409
        assert _error(response)["code"] == "INVALID_TRANSITION"

    def test_approve_without_permission(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        application: Application,
        tenant_id: UUID,
    ) -> None:
        as_caller(
            TenantContext(
                tenant_id=tenant_id,
                user_id="analyst-2",
                permissions=frozenset({"applications.change_status"}),
            )
        )

        response = client.post(f"/v1/staff/applications/{application.id}/approve", json={})

        assert response.status_code == 403
        assert _error(response)["code"] == "PERMISSION_DENIED"

    def test_approve(self, client: TestClient, application: Application) -> None:
        response = client.post(
            f"/v1/staff/applications/{application.id}/approve",
            json={"approved_amount": "12000"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "APPROVED"
        assert Decimal(response.json()["approved_amount"]) == Decimal("12000")

    def test_reject_requires_reason(self, client: TestClient, application: Application) -> None:
        response = client.post(f"/v1/staff/applications/{application.id}/reject", json={})

        assert response.status_code == 400
        error = _error(response)
        assert error["code"] == "INVALID_REQUEST"
        assert error["details"][0]["field"] == "body.reason"

    def test_counter_offer(self, client: TestClient, application: Application) -> None:
        response = client.post(
            f"/v1/staff/applications/{application.id}/counter-offer",
            json={"amount": "12000", "term_months": 12, "interest_rate": "0"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "COUNTER_OFFERED"
        assert Decimal(data["counter_offer"]["payment_amount"]) == Decimal("1000")

    def test_allowed_statuses(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        application: Application,
        tenant_id: UUID,
    ) -> None:
        as_caller(
            TenantContext(
                tenant_id=tenant_id,
                user_id="analyst-2",
                permissions=frozenset({"applications.change_status"}),
            )
        )

        response = client.get(f"/v1/staff/applications/{application.id}/allowed-statuses")

        assert response.status_code == 200
        allowed = {item["status"] for item in response.json()["allowed"]}
        assert allowed == {"DOCS_PENDING", "CORRECTIONS_PENDING", "COUNTER_OFFERED"}

    def test_history_newest_first(self, client: TestClient, application: Application) -> None:
        client.post(
            f"/v1/staff/applications/{application.id}/status",
            json={"status": "DOCS_PENDING", "reason": "Falta comprobante"},
        )
        client.post(f"/v1/staff/applications/{application.id}/status", json={"status": "IN_REVIEW"})

        response = client.get(f"/v1/staff/applications/{application.id}/history")

        history = response.json()["history"]
        assert [h["to_status"] for h in history[:2]] == ["IN_REVIEW", "DOCS_PENDING"]

    def test_applicant_cannot_use_staff_routes(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
    ) -> None:
        as_caller(applicant_context)

        response = client.get(f"/v1/staff/applications/{application.id}")

        assert response.status_code == 403
        assert _error(response)["code"] == "PERMISSION_DENIED"


class TestStaffDocuments:
    """Tests for /v1/staff/applications/{id}/documents."""

    @pytest.mark.asyncio
    async def test_reject_document(
        self,
        client: TestClient,
        application: Application,
        documents: DocumentReviewService,
        tenant_id: UUID,
    ) -> None:
        document = await documents.register(
            tenant_id,
            application.applicant_id,
            DocumentType.INCOME_PROOF,
            "nomina.pdf",
            application.id,
        )

        response = client.put(
            f"/v1/staff/applications/{application.id}/documents/{document.id}/reject",
            json={"reason": "Ilegible"},
        )

        assert response.status_code == 200
        assert response.json()["new_status"] == "DOCS_PENDING"

    def test_unknown_document(self, client: TestClient, application: Application) -> None:
        response = client.put(
            f"/v1/staff/applications/{application.id}/documents/{uuid4()}/approve"
        )

        assert response.status_code == 404
        assert _error(response)["code"] == "DOCUMENT_NOT_FOUND"


class TestApplicantApplications:
    """Tests for /v1/applicant/applications."""

    @pytest.mark.asyncio
    async def test_submit_draft(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        workflow: ApplicationWorkflowService,
        tenant_id: UUID,
        applicant: Applicant,
    ) -> None:
        draft = await workflow.create(
            tenant_id, applicant.id, Decimal("8000"), 6, purpose="Inventario"
        )
        as_caller(applicant_context)

        response = client.post(f"/v1/applicant/applications/{draft.id}/submit")

        assert response.status_code == 200
        assert response.json()["status"] == "SUBMITTED"

    @pytest.mark.asyncio
    async def test_submit_other_applicants_application(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        workflow: ApplicationWorkflowService,
        applicant_store: InMemoryApplicantStore,
        tenant_id: UUID,
        applicant: Applicant,
    ) -> None:
        draft = await workflow.create(
            tenant_id, applicant.id, Decimal("8000"), 6, purpose="Inventario"
        )
        other = Applicant(tenant_id=tenant_id, first_name="María", last_name_1="Gómez")
        await applicant_store.save(other)
        as_caller(
            TenantContext(
                tenant_id=tenant_id,
                user_id=str(other.id),
                actor_type=ActorType.APPLICANT,
                applicant_id=other.id,
            )
        )

        response = client.post(f"/v1/applicant/applications/{draft.id}/submit")

        assert response.status_code == 404
        assert _error(response)["code"] == "APPLICATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_accept_counter_offer(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
        workflow: ApplicationWorkflowService,
        tenant_id: UUID,
        staff: Actor,
    ) -> None:
        await workflow.send_counter_offer(
            tenant_id, application.id, staff, Decimal("12000"), 12, Decimal("0")
        )
        as_caller(applicant_context)

        response = client.post(
            f"/v1/applicant/applications/{application.id}/counter-offer/respond",
            json={"accept": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "APPROVED"
        assert Decimal(data["approved_amount"]) == Decimal("12000")

    def test_respond_without_offer(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
    ) -> None:
        as_caller(applicant_context)

        response = client.post(
            f"/v1/applicant/applications/{application.id}/counter-offer/respond",
            json={"accept": False},
        )

        assert response.status_code == 400
        assert _error(response)["code"] == "INVALID_OPERATION"


class TestApplicantCorrections:
    """Tests for /v1/applicant/corrections."""

    @pytest.mark.asyncio
    async def test_correction_flow(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
        workflow: ApplicationWorkflowService,
        tenant_id: UUID,
        staff: Actor,
    ) -> None:
        await workflow.verify_data(
            tenant_id,
            application.id,
            "phone",
            ReviewAction.REJECT,
            staff,
            rejection_reason="Número inexistente",
        )
        as_caller(applicant_context)

        pending = client.get("/v1/applicant/corrections")
        assert pending.status_code == 200
        assert pending.json()["has_corrections_pending"] is True
        assert pending.json()["rejected_fields"][0]["field_name"] == "phone"

        response = client.post(
            "/v1/applicant/corrections",
            json={
                "field_name": "phone",
                "new_value": "5598765432",
                "geolocation": {"latitude": 19.4, "longitude": -99.1},
            },
        )

        assert response.status_code == 200
        assert response.json()["advanced_applications"] == [str(application.id)]
        after = client.get("/v1/applicant/corrections")
        assert after.json()["has_corrections_pending"] is False

    def test_correct_field_not_rejected(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
    ) -> None:
        as_caller(applicant_context)

        response = client.post(
            "/v1/applicant/corrections", json={"field_name": "email", "new_value": "a@b.mx"}
        )

        assert response.status_code == 409
        error = _error(response)
        assert error["code"] == "CORRECTION_NOT_ALLOWED"
        assert error["field"] == "email"

    def test_show_unknown_correction(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        application: Application,
    ) -> None:
        as_caller(applicant_context)

        response = client.get("/v1/applicant/corrections/email")

        assert response.status_code == 404
        assert _error(response)["code"] == "CORRECTION_NOT_FOUND"


class TestApplicantKyc:
    """Tests for /v1/applicant/kyc."""

    def test_curp(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
    ) -> None:
        as_caller(applicant_context)

        response = client.post("/v1/applicant/kyc/curp", json={"curp": "pelj900515hdfrpn09"})

        assert response.status_code == 200
        assert response.json()["valid"] is True
        verifications = client.get("/v1/applicant/kyc/verifications").json()
        assert verifications["kyc_status"] == "VERIFIED"
        assert "curp" in verifications["locked_fields"]

    def test_malformed_curp(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
    ) -> None:
        as_caller(applicant_context)

        response = client.post("/v1/applicant/kyc/curp", json={"curp": "X" * 18})

        assert response.status_code == 400
        assert _error(response)["code"] == "INVALID_REQUEST"

    def test_provider_unavailable(
        self,
        app: FastAPI,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        verification: VerificationService,
        documents: DocumentReviewService,
        applicant_store: InMemoryApplicantStore,
        audit_store: InMemoryAuditStore,
    ) -> None:
        failing = KycService(
            MockKycProvider(fail_with=KycUnavailableError("timeout", provider="mock")),
            verification,
            documents,
            applicant_store,
            audit_store,
        )
        app.dependency_overrides[get_kyc_service] = lambda: failing
        as_caller(applicant_context)

        response = client.post("/v1/applicant/kyc/rfc", json={"rfc": "PELJ900515AB1"})

        assert response.status_code == 502
        assert _error(response)["code"] == "KYC_PROVIDER_ERROR"

    def test_otp_then_staff_sees_locked_phone(
        self,
        client: TestClient,
        as_caller: CallerSetter,
        applicant_context: TenantContext,
        staff_context: TenantContext,
        applicant: Applicant,
    ) -> None:
        as_caller(applicant_context)
        response = client.post(
            "/v1/applicant/kyc/otp", json={"field_name": "phone", "value": "5512345678"}
        )
        assert response.status_code == 204

        as_caller(staff_context)
        verifications = client.get(f"/v1/staff/applicants/{applicant.id}/verifications")

        assert verifications.status_code == 200
        assert verifications.json()["locked_fields"] == ["phone"]

    def test_verifications_unknown_applicant(self, client: TestClient) -> None:
        response = client.get(f"/v1/staff/applicants/{uuid4()}/verifications")

        assert response.status_code == 404
        assert _error(response)["code"] == "APPLICANT_NOT_FOUND"


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__
        assert {c["name"]: c["backend"] for c in body["components"]} == {
            "verification_ledger": "inmemory",
            "kyc_provider": "mock",
        }

    def test_nubarium_without_credentials(
        self, app: FastAPI, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ORIGINATION_NUBARIUM_USERNAME", raising=False)
        monkeypatch.delenv("ORIGINATION_NUBARIUM_PASSWORD", raising=False)
        app.dependency_overrides[get_settings] = lambda: Settings(
            providers={"kyc": {"provider": "nubarium"}}
        )

        response = client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        kyc = next(c for c in body["components"] if c["name"] == "kyc_provider")
        assert kyc["status"] == "unhealthy"
        assert kyc["message"] == "Nubarium credentials are not set"

    def test_postgres_ledger_without_dsn(
        self, app: FastAPI, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        for variable in (
            "ORIGINATION_STORAGE__POSTGRES__DSN",
            "ORIGINATION_DATABASE_URL",
            "DATABASE_URL",
        ):
            monkeypatch.delenv(variable, raising=False)
        app.dependency_overrides[get_settings] = lambda: Settings(
            storage={"verification": "postgres"}
        )

        response = client.get("/health")

        assert response.status_code == 503
        components = {c["name"]: c for c in response.json()["components"]}
        ledger = components["verification_ledger"]
        assert ledger["backend"] == "postgres"
        assert ledger["status"] == "unhealthy"
        assert "No PostgreSQL DSN" in ledger["message"]

    def test_metrics(self, client: TestClient) -> None:
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "origination" in response.text
