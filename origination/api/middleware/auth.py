"""JWT authentication middleware for API requests."""

import os
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from origination.api.exceptions import ForbiddenError
from origination.api.middleware.context import update_request_context
from origination.api.models.context import TenantContext
from origination.applications.enums import ActorType
from origination.observability.logging import get_logger

logger = get_logger(__name__)

# Security scheme for OpenAPI docs
security_scheme = HTTPBearer(auto_error=False)


def get_jwt_secret() -> str:
    """Get JWT secret from environment."""
    secret = os.environ.get("ORIGINATION_JWT_SECRET")
    if not secret:
        raise RuntimeError("ORIGINATION_JWT_SECRET environment variable not set")
    return secret


def get_jwt_algorithm() -> str:
    """Get JWT algorithm from environment."""
    return os.environ.get("ORIGINATION_JWT_ALGORITHM", "HS256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_tenant_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
) -> TenantContext:
    """Extract and validate the caller from the JWT.

    Claims: ``tenant_id`` (required), ``sub`` (required), ``actor_type``
    (``staff`` or ``applicant``), ``applicant_id`` (required for
    applicants), ``name`` and ``permissions``.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    if credentials is None:
        logger.warning("auth_missing_token", path=request.url.path)
        raise _unauthorized("Missing authentication token")

    try:
        payload = jwt.decode(
            credentials.credentials, get_jwt_secret(), algorithms=[get_jwt_algorithm()]
        )

        if not payload.get("tenant_id") or not payload.get("sub"):
            logger.warning("auth_missing_claims", path=request.url.path)
            raise _unauthorized("Token missing tenant_id or sub claim")

        actor_type = payload.get("actor_type", ActorType.STAFF.value)
        if actor_type not in (ActorType.STAFF.value, ActorType.APPLICANT.value):
            logger.warning("auth_invalid_actor_type", path=request.url.path)
            raise _unauthorized("Unsupported actor_type claim")
        if actor_type == ActorType.APPLICANT.value and not payload.get("applicant_id"):
            logger.warning("auth_missing_applicant_id", path=request.url.path)
            raise _unauthorized("Applicant token missing applicant_id claim")

        context = TenantContext(
            tenant_id=payload["tenant_id"],
            user_id=payload["sub"],
            actor_type=actor_type,
            applicant_id=payload.get("applicant_id"),
            name=payload.get("name"),
            permissions=frozenset(payload.get("permissions", [])),
        )
    except JWTError as e:
        logger.warning("auth_jwt_error", error=str(e), path=request.url.path)
        raise _unauthorized("Invalid or expired token") from None
    except ValidationError as e:
        logger.warning("auth_validation_error", error=str(e), path=request.url.path)
        raise _unauthorized("Invalid token claims") from None

    update_request_context(tenant_id=context.tenant_id, actor_id=context.user_id)
    logger.debug(
        "auth_success",
        tenant_id=str(context.tenant_id),
        actor_type=context.actor_type.value,
    )
    return context


TenantContextDep = Annotated[TenantContext, Depends(get_tenant_context)]


async def require_staff(context: TenantContextDep) -> TenantContext:
    if context.actor_type != ActorType.STAFF:
        raise ForbiddenError("Staff access required")
    return context


async def require_applicant(context: TenantContextDep) -> TenantContext:
    if context.actor_type != ActorType.APPLICANT:
        raise ForbiddenError("Applicant access required")
    return context


StaffContextDep = Annotated[TenantContext, Depends(require_staff)]
ApplicantContextDep = Annotated[TenantContext, Depends(require_applicant)]
