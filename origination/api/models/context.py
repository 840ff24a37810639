"""Request context models for middleware and observability."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from origination.applications.enums import ActorType
from origination.applications.models import Actor


class TenantContext(BaseModel):
    """Caller identity extracted from the JWT by the auth middleware."""

    tenant_id: UUID
    """Tenant identifier from JWT."""

    user_id: str
    """User identifier from the JWT 'sub' claim."""

    actor_type: ActorType = ActorType.STAFF
    """Whether the caller is staff or an applicant."""

    applicant_id: UUID | None = None
    """Applicant the caller acts as; required for applicant tokens."""

    name: str | None = None
    """Display name recorded in timelines."""

    permissions: frozenset[str] = Field(default_factory=frozenset)
    """Granted staff permissions."""

    model_config = ConfigDict(frozen=True)

    def actor(self) -> Actor:
        return Actor(
            id=self.user_id,
            type=self.actor_type,
            name=self.name,
            permissions=self.permissions,
        )


class RequestContext(BaseModel):
    """Request context for observability and logging.

    Bound at the start of each request and used to correlate logs,
    traces, and metrics across the request lifecycle.
    """

    trace_id: str
    """OpenTelemetry trace ID."""

    span_id: str
    """OpenTelemetry span ID."""

    request_id: str
    """Unique identifier for this request."""

    tenant_id: UUID | None = None
    """Tenant ID if authenticated."""

    actor_id: str | None = None
    """Authenticated user or applicant."""

    client_ip: str | None = None
    """Caller address, recorded with applicant corrections."""

    user_agent: str | None = None
    """Caller user agent, recorded with applicant corrections."""
