"""Health check and metrics endpoints."""

import time

from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from origination import __version__
from origination.api.dependencies import SettingsDep, get_postgres_pool
from origination.api.models.health import ComponentHealth, HealthResponse
from origination.config.models.providers import KycProviderConfig
from origination.config.models.storage import StorageConfig
from origination.db.errors import ConnectionError
from origination.observability.logging import get_logger
from origination.providers.kyc.nubarium import credentials_from_env

logger = get_logger(__name__)

router = APIRouter()

# A ledger round trip slower than this is reported as degraded
SLOW_LEDGER_MS = 500.0


async def ledger_health(storage: StorageConfig) -> ComponentHealth:
    """Where ledger locks are kept and, for PostgreSQL, whether it answers."""
    if storage.verification != "postgres":
        return ComponentHealth(
            name="verification_ledger",
            backend=storage.verification,
            status="healthy",
            message="Records and locks live in process memory",
        )

    start = time.perf_counter()
    try:
        pool = await get_postgres_pool()
        answered = await pool.health_check()
    except ConnectionError as e:
        return ComponentHealth(
            name="verification_ledger", backend="postgres", status="unhealthy", message=str(e)
        )
    latency_ms = (time.perf_counter() - start) * 1000

    if not answered:
        return ComponentHealth(
            name="verification_ledger",
            backend="postgres",
            status="unhealthy",
            latency_ms=latency_ms,
            message="data_verifications did not answer",
        )
    return ComponentHealth(
        name="verification_ledger",
        backend="postgres",
        status="degraded" if latency_ms > SLOW_LEDGER_MS else "healthy",
        latency_ms=latency_ms,
    )


def kyc_provider_health(config: KycProviderConfig) -> ComponentHealth:
    """Whether the configured KYC provider can be used. No request is sent."""
    if config.provider == "mock":
        return ComponentHealth(
            name="kyc_provider",
            backend="mock",
            status="healthy",
            message="Checks are simulated",
        )

    username, password = credentials_from_env()
    if not username or not password:
        return ComponentHealth(
            name="kyc_provider",
            backend=config.provider,
            status="unhealthy",
            message="Nubarium credentials are not set",
        )
    return ComponentHealth(name="kyc_provider", backend=config.provider, status="healthy")


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep, response: Response) -> HealthResponse:
    """Ledger and KYC provider status. Answers 503 when either is unusable."""
    health = HealthResponse.from_components(
        service=settings.app_name,
        version=__version__,
        components=[
            await ledger_health(settings.storage),
            kyc_provider_health(settings.providers.kyc),
        ],
    )
    if health.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "health_check_unhealthy",
            components=[c.name for c in health.components if c.status == "unhealthy"],
        )
    else:
        logger.debug("health_check_completed", status=health.status)
    return health


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text format for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
