"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, providers and services used by
API endpoints. Instances are created once per process and can be
overridden in tests through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from origination.applicants.store import ApplicantStore
from origination.applicants.stores.inmemory import InMemoryApplicantStore
from origination.applications.service import ApplicationWorkflowService
from origination.applications.store import ApplicationStore
from origination.applications.stores.inmemory import InMemoryApplicationStore
from origination.audit.store import AuditStore
from origination.audit.stores.inmemory import InMemoryAuditStore
from origination.config.loader import load_config
from origination.config.settings import Settings, set_toml_config
from origination.corrections.service import CorrectionService
from origination.db.pool import PostgresPool
from origination.documents.service import DocumentReviewService
from origination.documents.store import DocumentStore
from origination.documents.stores.inmemory import InMemoryDocumentStore
from origination.kyc.service import KycService
from origination.observability.logging import get_logger
from origination.providers.kyc import KycProvider, create_kyc_provider
from origination.verification.service import VerificationService
from origination.verification.store import VerificationStore
from origination.verification.stores.inmemory import InMemoryVerificationStore
from origination.verification.stores.postgres import PostgresVerificationStore

logger = get_logger(__name__)

_postgres_pool: PostgresPool | None = None

_applicant_store: ApplicantStore | None = None
_application_store: ApplicationStore | None = None
_document_store: DocumentStore | None = None
_verification_store: VerificationStore | None = None
_audit_store: AuditStore | None = None
_kyc_provider: KycProvider | None = None

_verification_service: VerificationService | None = None
_workflow_service: ApplicationWorkflowService | None = None
_document_service: DocumentReviewService | None = None
_correction_service: CorrectionService | None = None
_kyc_service: KycService | None = None


@lru_cache
def get_settings() -> Settings:
    """Get application settings.

    Loads configuration from TOML files and environment variables.
    Cached to avoid reloading on every request.
    """
    try:
        set_toml_config(load_config())
    except FileNotFoundError:
        logger.warning("config_file_not_found", msg="Using default configuration")
        set_toml_config({})

    return Settings()


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL pool, connecting on first access."""
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool(get_settings().storage.postgres)
        await pool.connect()
        _postgres_pool = pool
    return _postgres_pool


async def get_applicant_store() -> ApplicantStore:
    global _applicant_store
    if _applicant_store is None:
        _applicant_store = InMemoryApplicantStore()
        logger.info("applicant_store_initialized", store_type="inmemory")
    return _applicant_store


async def get_application_store() -> ApplicationStore:
    global _application_store
    if _application_store is None:
        _application_store = InMemoryApplicationStore()
        logger.info("application_store_initialized", store_type="inmemory")
    return _application_store


async def get_document_store() -> DocumentStore:
    global _document_store
    if _document_store is None:
        _document_store = InMemoryDocumentStore()
        logger.info("document_store_initialized", store_type="inmemory")
    return _document_store


async def get_audit_store() -> AuditStore:
    global _audit_store
    if _audit_store is None:
        _audit_store = InMemoryAuditStore()
        logger.info("audit_store_initialized", store_type="inmemory")
    return _audit_store


async def get_verification_store() -> VerificationStore:
    """Get the VerificationStore instance.

    Uses PostgresVerificationStore when ``storage.verification`` is
    ``postgres``, otherwise the in-memory ledger.
    """
    global _verification_store
    if _verification_store is None:
        if get_settings().storage.verification == "postgres":
            _verification_store = PostgresVerificationStore(await get_postgres_pool())
            logger.info("verification_store_initialized", store_type="postgres")
        else:
            _verification_store = InMemoryVerificationStore()
            logger.info("verification_store_initialized", store_type="inmemory")
    return _verification_store


async def get_kyc_provider() -> KycProvider:
    global _kyc_provider
    if _kyc_provider is None:
        _kyc_provider = create_kyc_provider(get_settings().providers.kyc)
        logger.info("kyc_provider_initialized", provider=_kyc_provider.provider_name)
    return _kyc_provider


async def get_verification_service() -> VerificationService:
    global _verification_service
    if _verification_service is None:
        _verification_service = VerificationService(
            await get_verification_store(),
            await get_applicant_store(),
            await get_audit_store(),
            get_settings().verification,
        )
    return _verification_service


async def get_workflow_service() -> ApplicationWorkflowService:
    global _workflow_service
    if _workflow_service is None:
        _workflow_service = ApplicationWorkflowService(
            await get_application_store(),
            await get_applicant_store(),
            await get_document_store(),
            await get_verification_service(),
            await get_audit_store(),
            get_settings().verification,
        )
    return _workflow_service


async def get_document_service() -> DocumentReviewService:
    global _document_service
    if _document_service is None:
        _document_service = DocumentReviewService(
            await get_document_store(),
            await get_workflow_service(),
            await get_audit_store(),
        )
    return _document_service


async def get_correction_service() -> CorrectionService:
    global _correction_service
    if _correction_service is None:
        _correction_service = CorrectionService(
            await get_applicant_store(),
            await get_document_store(),
            await get_workflow_service(),
            await get_verification_service(),
        )
    return _correction_service


async def get_kyc_service() -> KycService:
    global _kyc_service
    if _kyc_service is None:
        _kyc_service = KycService(
            await get_kyc_provider(),
            await get_verification_service(),
            await get_document_service(),
            await get_applicant_store(),
            await get_audit_store(),
            get_settings().verification,
        )
    return _kyc_service


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ApplicantStoreDep = Annotated[ApplicantStore, Depends(get_applicant_store)]
VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]
WorkflowServiceDep = Annotated[ApplicationWorkflowService, Depends(get_workflow_service)]
DocumentServiceDep = Annotated[DocumentReviewService, Depends(get_document_service)]
CorrectionServiceDep = Annotated[CorrectionService, Depends(get_correction_service)]
KycServiceDep = Annotated[KycService, Depends(get_kyc_service)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used for testing to ensure fresh instances. Closes connections first.
    """
    global _postgres_pool, _kyc_provider
    global _applicant_store, _application_store, _document_store
    global _verification_store, _audit_store
    global _verification_service, _workflow_service, _document_service
    global _correction_service, _kyc_service

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    if _kyc_provider is not None:
        await _kyc_provider.close()
        _kyc_provider = None

    _applicant_store = None
    _application_store = None
    _document_store = None
    _verification_store = None
    _audit_store = None
    _verification_service = None
    _workflow_service = None
    _document_service = None
    _correction_service = None
    _kyc_service = None
    get_settings.cache_clear()
