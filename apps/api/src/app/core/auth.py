"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
Tokens are issued by the university identity provider; this module only
validates them and turns their claims into an AuthenticatedUser. Which
clearance slot a user may decide is decided later by the approval matrix.

SECURITY NOTE:
- Development mode test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable them
"""

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token issued by the identity provider",
)


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    The acting user, populated from JWT claims.

    Attributes:
        id: User's unique identifier
        role: User's role (student, system_admin or one of the authority roles)
        department: Department the user belongs to (students, department heads)
        college: College the user belongs to (students, registrars)
        email: User's email address (optional)
        name: User's display name (optional)
    """

    id: UUID
    role: str
    department: str | None = None
    college: str | None = None
    email: str | None = None
    name: str | None = None

    def __str__(self) -> str:
        return f"AuthenticatedUser(id={self.id}, role={self.role})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Both the loaded settings and the raw PYTHON_ENV variable must agree that
    this is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

# Development system admin for local testing (only used when PYTHON_ENV=development)
_DEV_USER = AuthenticatedUser(
    id=UUID("00000000-0000-0000-0000-000000000001"),
    role="system_admin",
    email="admin@clearance.dev",
    name="Development Admin",
)


def _invalid_token(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _validate_jwt_token(token: str) -> AuthenticatedUser:
    """
    Validate a JWT and extract the user claims.

    Raises:
        HTTPException 401: If token is invalid, expired, or carries bad claims
    """
    if _DEVELOPMENT_MODE and token in ("dev-token", "test-token"):
        logger.debug("Development mode: Using test token")
        return _DEV_USER

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _invalid_token("INVALID_TOKEN", "Invalid or expired authentication token.")

    token_type = payload.get("type", "access")
    if token_type != "access":
        logger.warning(f"Invalid token type: {token_type}")
        raise _invalid_token("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        user_id_str = payload.get("sub")
        if not user_id_str:
            raise ValueError("Missing 'sub' claim in token")
        role = payload.get("role")
        if not role:
            raise ValueError("Missing 'role' claim in token")

        return AuthenticatedUser(
            id=UUID(user_id_str),
            role=role,
            department=payload.get("department"),
            college=payload.get("college"),
            email=payload.get("email"),
            name=payload.get("name"),
        )
    except (ValueError, KeyError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _invalid_token(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthenticatedUser:
    """
    FastAPI dependency that validates the bearer token and returns the user.

    Raises:
        HTTPException 401: If token is missing, invalid, or expired
    """
    user = await _validate_jwt_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id} ({user.role})")
    return user


def require_roles(*roles: str) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """
    Build a dependency that only admits users holding one of ``roles``.

    Usage:
        @router.get("/status")
        async def status(user: AuthenticatedUser = Depends(require_roles("student"))):
            ...

    Raises:
        HTTPException 403: If the user's role is not allowed
    """
    allowed = frozenset(roles)

    async def dependency(
        user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        if user.role not in allowed:
            logger.warning(
                f"Access denied: User {user.id} has role '{user.role}', "
                f"but one of {sorted(allowed)} is required"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "ACCESS_DENIED",
                    "message": "Access denied. Insufficient permissions.",
                },
            )
        return user

    return dependency


__all__ = [
    "AuthenticatedUser",
    "get_current_user",
    "require_roles",
]
