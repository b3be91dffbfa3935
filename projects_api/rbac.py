"""
projects_api/rbac.py

Role gate logic.

Identities carry a single boolean privilege flag (is_admin); roles are
derived from it so privileged actions can be expressed as "at least role X".

Pure Python logic - no FastAPI imports, no database access.
"""

from projects_api.auth_context import AuthContext


class Role:
    """Role constants for RBAC."""
    ADMIN = "admin"
    USER = "user"


ROLE_HIERARCHY = {
    "admin": 2,
    "user": 1,
}


def role_of(ctx: AuthContext) -> str:
    return Role.ADMIN if ctx.is_admin else Role.USER


def role_level(role: str) -> int:
    """Numeric level for a role (higher = more privileged), 0 if unknown."""
    return ROLE_HIERARCHY.get(role.lower() if role else "", 0)


def role_at_least(user_role: str, required_role: str) -> bool:
    """
    Check if user_role meets or exceeds required_role in hierarchy.

    Example:
        role_at_least("admin", "user") -> True
        role_at_least("user", "admin") -> False
    """
    return role_level(user_role) >= role_level(required_role)


def is_allowed(ctx: AuthContext, required_role: str) -> bool:
    """True if the identity's role satisfies required_role."""
    return role_at_least(role_of(ctx), required_role)
