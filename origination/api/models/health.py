"""GET /health response models."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class ComponentHealth(BaseModel):
    """State of one dependency the review workflow needs."""

    name: Literal["verification_ledger", "kyc_provider"] = Field(
        ..., description="Component name"
    )
    backend: str = Field(..., description="Configured backend, e.g. postgres or nubarium")
    status: HealthStatus = Field(..., description="Component status")
    latency_ms: float | None = Field(default=None, description="Time spent checking it")
    message: str | None = Field(default=None, description="Why it is not healthy, or a caveat")


class HealthResponse(BaseModel):
    """Service status; the worst component status decides the overall one."""

    status: HealthStatus
    service: str
    version: str
    components: list[ComponentHealth] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_components(
        cls, service: str, version: str, components: list[ComponentHealth]
    ) -> "HealthResponse":
        statuses = {c.status for c in components}
        status: HealthStatus = "healthy"
        if "unhealthy" in statuses:
            status = "unhealthy"
        elif "degraded" in statuses:
            status = "degraded"
        return cls(status=status, service=service, version=version, components=components)
