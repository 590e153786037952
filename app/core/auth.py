"""
Authentication for Painel.

Sign-in itself is handled by the hosted auth service; this module only
verifies the access tokens it issues (HS256 JWTs carrying ``sub`` and
``email``). Tokens arrive either as a Bearer header (API clients) or in the
``sb-access-token`` cookie (browser navigation).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

from app.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "sb-access-token"

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_access_token(
    user_id: uuid.UUID,
    email: str,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign an access token shaped like the auth service's (local dev and tests)."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
    }
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
    )


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

class AuthenticatedIdentity:
    """The auth-service identity behind a request."""

    def __init__(self, user_id: uuid.UUID, email: Optional[str]):
        self.user_id = user_id
        self.email = email

    def __repr__(self) -> str:
        return f"AuthenticatedIdentity(user_id={self.user_id}, email={self.email!r})"


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip()
    return request.cookies.get(SESSION_COOKIE)


def authenticate_request(request: Request) -> Optional[AuthenticatedIdentity]:
    """Resolve the caller's identity, or None when the request carries no valid token."""
    token = _extract_token(request, request.headers.get("Authorization"))
    if not token:
        return None

    try:
        payload = decode_jwt(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        log.info("auth.token_rejected", reason=type(exc).__name__)
        return None

    return AuthenticatedIdentity(user_id=user_id, email=payload.get("email"))


async def get_identity(
    request: Request,
    authorization: Optional[str] = Depends(api_key_header),
) -> Optional[AuthenticatedIdentity]:
    """Optional authentication: anonymous callers get None."""
    identity = authenticate_request(request)
    request.state.identity = identity
    return identity


async def require_identity(
    identity: Optional[AuthenticatedIdentity] = Depends(get_identity),
) -> AuthenticatedIdentity:
    """Any signed-in user can access this endpoint."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return identity
