"""API route registration."""

from fastapi import APIRouter, FastAPI

from origination.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with staff and applicant routes."""
    router = APIRouter(prefix="/v1")

    from origination.api.routes.applicant_applications import (
        router as applicant_applications_router,
    )
    from origination.api.routes.applicant_corrections import router as corrections_router
    from origination.api.routes.applicant_kyc import router as kyc_router
    from origination.api.routes.staff_applications import router as staff_applications_router
    from origination.api.routes.staff_documents import router as staff_documents_router
    from origination.api.routes.staff_verifications import (
        router as staff_verifications_router,
    )

    router.include_router(staff_applications_router, tags=["Staff: Applications"])
    router.include_router(staff_documents_router, tags=["Staff: Documents"])
    router.include_router(staff_verifications_router, tags=["Staff: Verifications"])
    router.include_router(applicant_applications_router, tags=["Applicant: Applications"])
    router.include_router(corrections_router, tags=["Applicant: Corrections"])
    router.include_router(kyc_router, tags=["Applicant: KYC"])

    logger.debug(
        "v1_router_created",
        routes=[
            "staff_applications",
            "staff_documents",
            "staff_verifications",
            "applicant_applications",
            "applicant_corrections",
            "applicant_kyc",
        ],
    )
    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from origination.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    logger.info("routes_registered")
