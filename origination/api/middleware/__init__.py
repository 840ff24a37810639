"""API middleware: authentication and request context."""

from origination.api.middleware.auth import (
    ApplicantContextDep,
    StaffContextDep,
    TenantContextDep,
    get_tenant_context,
)
from origination.api.middleware.context import (
    RequestContextMiddleware,
    get_request_context,
)

__all__ = [
    "ApplicantContextDep",
    "RequestContextMiddleware",
    "StaffContextDep",
    "TenantContextDep",
    "get_request_context",
    "get_tenant_context",
]
