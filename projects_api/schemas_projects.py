"""
projects_api/schemas_projects.py

Pydantic schemas and the write-path validation rule for projects.

The request models deliberately accept loose shapes; length constraints are
enforced by validate_project() so handlers can answer 400 with a message
describing the violated constraint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

NAME_MIN_LENGTH = 5
NAME_MAX_LENGTH = 50


# ========================================================================
# VALIDATION RULE
# ========================================================================

@dataclass
class ValidationResult:
    """Outcome of validate_project(): ok flag, violations, normalized values."""
    ok: bool
    violations: List[str] = field(default_factory=list)
    value: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return "; ".join(self.violations)


def validate_name(name: Any) -> List[str]:
    if name is None:
        return ['"name" is required']
    if not isinstance(name, str):
        return ['"name" must be a string']

    length = len(name.strip())
    if length < NAME_MIN_LENGTH:
        return [f'"name" length must be at least {NAME_MIN_LENGTH} characters long']
    if length > NAME_MAX_LENGTH:
        return [f'"name" length must be less than or equal to {NAME_MAX_LENGTH} characters long']
    return []


def validate_project(payload: Dict[str, Any]) -> ValidationResult:
    """
    Check a submitted project payload before any write.

    Pure function - no FastAPI, no store access.

    Args:
        payload: Candidate fields ("name" required, "categories" optional)

    Returns:
        ValidationResult with ok=True and the trimmed name / category list in
        `value`, or ok=False with one message per violated constraint.
    """
    violations = validate_name(payload.get("name"))

    categories = payload.get("categories")
    if categories is not None:
        if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
            violations.append('"categories" must be a list of strings')

    if violations:
        return ValidationResult(ok=False, violations=violations)

    return ValidationResult(
        ok=True,
        value={
            "name": payload["name"].strip(),
            "categories": [c.strip() for c in categories or [] if c.strip()],
        },
    )


# ========================================================================
# REQUEST / RESPONSE SCHEMAS
# ========================================================================

class ProjectWriteRequest(BaseModel):
    """Body of POST/PUT /api/projects. PUT only uses `name`."""
    name: Optional[Any] = Field(None, description="Project name (5-50 chars after trim)")
    categories: Optional[Any] = Field(None, description="Optional category labels")


class ProjectResponse(BaseModel):
    """A stored project as returned to clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Store-assigned identifier (24 hex chars)")
    name: str = Field(..., description="Project name")
    categories: List[str] = Field(default_factory=list, description="Category labels")
