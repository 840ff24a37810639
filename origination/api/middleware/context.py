"""Request context middleware for observability."""

import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from origination.api.models.context import RequestContext
from origination.observability.logging import get_logger
from origination.observability.metrics import REQUEST_COUNT
from origination.observability.tracing import get_current_span_id, get_current_trace_id

logger = get_logger(__name__)

_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_request_context() -> RequestContext | None:
    """Get the current request context, or None outside a request."""
    return _request_context.get()


def set_request_context(context: RequestContext) -> None:
    _request_context.set(context)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds trace and request ids for logging and echoes them in headers."""

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        context = RequestContext(
            trace_id=get_current_trace_id() or request_id,
            span_id=get_current_span_id() or "",
            request_id=request_id,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        set_request_context(context)
        request.state.context = context

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            trace_id=context.trace_id,
            request_id=context.request_id,
        )

        start = time.perf_counter()
        logger.debug("request_started", method=request.method, path=request.url.path)

        response = await call_next(request)  # type: ignore[misc]

        route = request.scope.get("route")
        REQUEST_COUNT.labels(
            method=request.method,
            path=getattr(route, "path", request.url.path),
            status=str(response.status_code),
        ).inc()
        logger.debug(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        response.headers["X-Request-ID"] = context.request_id
        if context.trace_id:
            response.headers["X-Trace-ID"] = context.trace_id
        return response  # type: ignore[no-any-return]


def update_request_context(*, tenant_id: uuid.UUID | None = None, actor_id: str | None = None) -> None:
    """Add caller identity to the current request context once it is known."""
    current = get_request_context()
    if current is None:
        return

    if tenant_id:
        current.tenant_id = tenant_id
    if actor_id:
        current.actor_id = actor_id

    structlog.contextvars.bind_contextvars(
        tenant_id=str(current.tenant_id) if current.tenant_id else None,
        actor_id=current.actor_id,
    )
