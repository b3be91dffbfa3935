"""
projects_api/dependencies.py

Reusable FastAPI dependencies: store handles and role enforcement.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, Request

from projects_api.auth_context import AuthContext, require_auth_context
from projects_api.config import IS_DEV
from projects_api.db import ProjectStore, UserStore
from projects_api.logger import get_logger
from projects_api.rbac import Role, is_allowed, role_of

log = get_logger("authz")


def get_project_store(request: Request) -> ProjectStore:
    """Project store opened by the application lifespan (see main.create_app)."""
    return request.app.state.project_store


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def require_role(required_role: str) -> Callable:
    """
    FastAPI dependency factory for role-gated routes.

    Runs the auth gate first, so a missing/invalid token is still a 401;
    a valid identity without the role is a 403 whether or not the target
    record exists.

    Usage in routes:
        @router.delete("/{id}")
        def delete(ctx: AuthContext = Depends(require_role(Role.ADMIN))):
            ...

    Raises:
        HTTPException(403): If the identity lacks the required role
    """
    def _check_role(ctx: AuthContext = Depends(require_auth_context)) -> AuthContext:
        if not is_allowed(ctx, required_role):
            if IS_DEV:
                log.info(f"[AUTHZ] Role denied: required={required_role}, "
                         f"role={role_of(ctx)}, user_id={ctx.user_id}")
            raise HTTPException(status_code=403, detail="Access denied.")
        return ctx

    return _check_role


require_admin = require_role(Role.ADMIN)
