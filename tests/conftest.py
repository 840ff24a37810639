"""Shared test fixtures for the Origination test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio

from origination.applicants.models import Applicant
from origination.applicants.stores.inmemory import InMemoryApplicantStore
from origination.applications.enums import ActorType
from origination.applications.models import Actor
from origination.applications.service import ApplicationWorkflowService
from origination.applications.stores.inmemory import InMemoryApplicationStore
from origination.audit.stores.inmemory import InMemoryAuditStore
from origination.corrections.service import CorrectionService
from origination.documents.service import DocumentReviewService
from origination.documents.stores.inmemory import InMemoryDocumentStore
from origination.verification.service import VerificationService
from origination.verification.stores.inmemory import InMemoryVerificationStore


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"ORIGINATION_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from origination.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def applicant_store() -> InMemoryApplicantStore:
    return InMemoryApplicantStore()


@pytest.fixture
def application_store() -> InMemoryApplicationStore:
    return InMemoryApplicationStore()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def verification_store() -> InMemoryVerificationStore:
    return InMemoryVerificationStore()


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def verification(
    verification_store: InMemoryVerificationStore,
    applicant_store: InMemoryApplicantStore,
    audit_store: InMemoryAuditStore,
) -> VerificationService:
    return VerificationService(verification_store, applicant_store, audit_store)


@pytest.fixture
def workflow(
    application_store: InMemoryApplicationStore,
    applicant_store: InMemoryApplicantStore,
    document_store: InMemoryDocumentStore,
    verification: VerificationService,
    audit_store: InMemoryAuditStore,
) -> ApplicationWorkflowService:
    return ApplicationWorkflowService(
        application_store, applicant_store, document_store, verification, audit_store
    )


@pytest.fixture
def documents(
    document_store: InMemoryDocumentStore,
    workflow: ApplicationWorkflowService,
    audit_store: InMemoryAuditStore,
) -> DocumentReviewService:
    return DocumentReviewService(document_store, workflow, audit_store)


@pytest.fixture
def corrections(
    applicant_store: InMemoryApplicantStore,
    document_store: InMemoryDocumentStore,
    workflow: ApplicationWorkflowService,
    verification: VerificationService,
) -> CorrectionService:
    return CorrectionService(applicant_store, document_store, workflow, verification)


@pytest_asyncio.fixture
async def applicant(tenant_id: UUID, applicant_store: InMemoryApplicantStore) -> Applicant:
    applicant = Applicant(
        tenant_id=tenant_id,
        first_name="Juan",
        last_name_1="Pérez",
        last_name_2="López",
        email="juan@example.com",
        phone="5512345678",
    )
    await applicant_store.save(applicant)
    return applicant


@pytest.fixture
def staff() -> Actor:
    return Actor(
        id="analyst-1", type=ActorType.STAFF, name="Ana Analista", permissions=frozenset({"*"})
    )


@pytest.fixture
def applicant_actor(applicant: Applicant) -> Actor:
    return Actor(id=str(applicant.id), type=ActorType.APPLICANT, name="Juan Pérez")
