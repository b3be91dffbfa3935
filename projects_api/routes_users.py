"""
projects_api/routes_users.py

User registration, current-user lookup and login.

These endpoints issue the tokens consumed by the projects routes:
- POST /api/users     register, token returned in the x-auth-token header
- GET  /api/users/me  current user (auth required)
- POST /api/auth      login, token returned in the body
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_validator

from projects_api.auth_context import AuthContext, create_access_token, require_auth_context
from projects_api.config import AUTH_TOKEN_HEADER
from projects_api.db import DuplicateKeyError, UserStore
from projects_api.dependencies import get_user_store
from projects_api.logger import get_logger

log = get_logger("users")

PBKDF2_ITERATIONS = 200_000


# ---------------------------------------------------------
# Password hashing
# ---------------------------------------------------------
def hash_password(password: str) -> str:
    """Salted PBKDF2-SHA256, stored as "<salt_hex>$<digest_hex>"."""
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        salt_hex, digest_hex = password_hash.split("$", 1)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(digest.hex(), digest_hex)


# ---------------------------------------------------------
# Schemas
# ---------------------------------------------------------
def normalize_email(email: str) -> str:
    return email.strip().lower()


class RegisterRequest(BaseModel):
    """Length limits apply to the trimmed name and the normalized email."""
    name: str = Field(..., min_length=5, max_length=50)
    email: str = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=5, max_length=1024)

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, v):
        if isinstance(v, str):
            return normalize_email(v)
        return v


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=5, max_length=1024)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, v):
        if isinstance(v, str):
            return normalize_email(v)
        return v


class UserResponse(BaseModel):
    id: str = Field(..., alias="_id")
    name: str
    email: str
    is_admin: bool = False


class TokenResponse(BaseModel):
    token: str


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
users_router = APIRouter(prefix="/api/users", tags=["users"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@users_router.get("/me", response_model=UserResponse)
def get_me(
    ctx: AuthContext = Depends(require_auth_context),
    users: UserStore = Depends(get_user_store),
):
    user = users.get(ctx.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return user.to_public_dict()


@users_router.post("", response_model=UserResponse)
@users_router.post("/", response_model=UserResponse, include_in_schema=False)
def register(req: RegisterRequest, response: Response, users: UserStore = Depends(get_user_store)):
    """
    Register a user. New users are never admins; the flag is set out of band.

    Raises:
        HTTPException(400): Email already registered
    """
    try:
        user = users.create(req.name, req.email, hash_password(req.password))
    except DuplicateKeyError:
        log.info("[USERS] Registration rejected: email already registered")
        raise HTTPException(status_code=400, detail="User already registered.")

    log.info(f"[USERS] Registered user_id={user.id}")
    response.headers[AUTH_TOKEN_HEADER] = create_access_token(user.id, user.is_admin)
    return user.to_public_dict()


@auth_router.post("", response_model=TokenResponse)
@auth_router.post("/", response_model=TokenResponse, include_in_schema=False)
def login(req: LoginRequest, users: UserStore = Depends(get_user_store)):
    """
    Exchange email + password for a token.

    Raises:
        HTTPException(400): Unknown email or wrong password (same message)
    """
    user = users.get_by_email(req.email)
    if user is None or not verify_password(req.password, user.password_hash):
        log.info("[AUTH] Login failed")
        raise HTTPException(status_code=400, detail="Invalid email or password.")

    log.info(f"[AUTH] Login succeeded: user_id={user.id}")
    return TokenResponse(token=create_access_token(user.id, user.is_admin))
