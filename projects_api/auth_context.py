"""
projects_api/auth_context.py

Authentication primitives for FastAPI dependency injection.

Contains:
- AuthContext: Immutable identity decoded from a signed token
- create_access_token: JWT issue (used by the users/auth routes and tests)
- verify_token: JWT signature + structure verification
- require_auth_context: FastAPI dependency for auth enforcement

Verification is stateless: the admin flag inside a valid token is trusted
for the token's lifetime, with no store lookup.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict

from projects_api.config import (
    ACCESS_TOKEN_MINUTES,
    ALGORITHM,
    AUTH_TOKEN_HEADER,
    IS_DEV,
    SECRET_KEY,
)
from projects_api.logger import get_logger

log = get_logger("auth")

# auto_error=False so a missing header reaches require_auth_context as None
# and gets the 401 below instead of Starlette's default.
security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Identity derived from a verified token.

    This is the ONLY source of user_id / is_admin in protected endpoints.
    Never trust identity fields from request bodies or query params.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    is_admin: bool = False


# ---------------------------------------------------------
# JWT issue / verification
# ---------------------------------------------------------
def create_access_token(user_id: str, is_admin: bool = False, expires_minutes: Optional[int] = None) -> str:
    """Sign a token carrying the user id and admin flag."""
    now = datetime.now(timezone.utc)
    minutes = ACCESS_TOKEN_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": str(user_id),
        "is_admin": bool(is_admin),
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT signature and expiration and return the decoded payload.

    Raises:
        HTTPException(401): If the token is expired, malformed or badly signed
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def decode_auth_context(token: str) -> AuthContext:
    """Verify a raw token and build the AuthContext it proves."""
    payload = verify_token(token)

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        log.info("[AUTH] Missing user id in token payload")
        raise HTTPException(status_code=401, detail="Invalid token")

    is_admin = payload.get("is_admin", False)
    if not isinstance(is_admin, bool):
        log.info(f"[AUTH] Non-boolean admin flag in token: user_id={user_id}")
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthContext(user_id=user_id, is_admin=is_admin)


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_auth_token: Optional[str] = Header(None, alias=AUTH_TOKEN_HEADER),
) -> AuthContext:
    """
    Auth gate for protected routes.

    Accepts "Authorization: Bearer <token>" or the x-auth-token header
    (bearer wins when both are sent).

    Usage:
        @router.post("")
        def create(ctx: AuthContext = Depends(require_auth_context)):
            ...

    Raises:
        HTTPException(401): No token, or token fails verification
    """
    token = credentials.credentials if credentials else (x_auth_token or "")
    token = token.strip()

    if not token:
        raise HTTPException(status_code=401, detail="Access denied. No token provided.")

    ctx = decode_auth_context(token)

    if IS_DEV:
        log.debug(f"[AUTH] Authenticated: user_id={ctx.user_id}, is_admin={ctx.is_admin}")

    return ctx
