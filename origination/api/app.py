"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from pydantic import ValidationError

from origination import __version__
from origination.api.dependencies import get_settings, reset_dependencies
from origination.api.exceptions import (
    KycProviderAPIError,
    OriginationAPIError,
    from_domain_error,
)
from origination.api.middleware.context import RequestContextMiddleware
from origination.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from origination.api.routes import register_routes
from origination.errors import OriginationError
from origination.observability.logging import get_logger, setup_logging
from origination.observability.tracing import setup_tracing
from origination.providers.kyc.base import KycProviderError

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await reset_dependencies()
    logger.info("app_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - CORS middleware
    - Request context middleware
    - Global exception handlers
    - OpenTelemetry instrumentation when tracing is enabled
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )

    app = FastAPI(
        title="Origination API",
        description="Loan origination: KYC verification ledger, review and corrections",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)
    register_routes(app)

    tracing = settings.observability.tracing
    if tracing.enabled:
        setup_tracing(
            service_name=tracing.service_name,
            otlp_endpoint=tracing.otlp_endpoint,
            console_export=tracing.console_export,
        )
        FastAPIInstrumentor.instrument_app(app)
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        cors_origins=settings.api.cors_origins,
        kyc_provider=settings.providers.kyc.provider,
    )
    return app


def _error_response(exc: OriginationAPIError) -> JSONResponse:
    response = ErrorResponse(
        error=ErrorBody(code=exc.error_code, message=exc.message, field=exc.field)
    )
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


def _validation_response(message: str, errors: list) -> JSONResponse:
    details = [
        ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
        for error in errors
    ]
    response = ErrorResponse(
        error=ErrorBody(code=ErrorCode.INVALID_REQUEST, message=message, details=details)
    )
    return JSONResponse(status_code=400, content=response.model_dump(mode="json"))


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(OriginationAPIError)
    async def api_error_handler(request: Request, exc: OriginationAPIError) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc)

    @app.exception_handler(OriginationError)
    async def domain_error_handler(request: Request, exc: OriginationError) -> JSONResponse:
        api_error = from_domain_error(exc)
        logger.warning(
            "domain_error",
            error_type=type(exc).__name__,
            error_code=api_error.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(api_error)

    @app.exception_handler(KycProviderError)
    async def kyc_provider_error_handler(request: Request, exc: KycProviderError) -> JSONResponse:
        logger.error(
            "kyc_provider_unavailable",
            provider=exc.provider,
            upstream_status=exc.status_code,
            path=request.url.path,
        )
        return _error_response(
            KycProviderAPIError("El servicio de verificación no está disponible")
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        return _validation_response("Request validation failed", exc.errors())

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        logger.warning("pydantic_validation_error", errors=exc.errors(), path=request.url.path)
        return _validation_response("Data validation failed", exc.errors())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        response = ErrorResponse(
            error=ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred")
        )
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
