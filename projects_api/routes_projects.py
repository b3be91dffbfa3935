"""
projects_api/routes_projects.py

Projects CRUD endpoints.

Security guarantees:
- Reads are public
- Create/update require a valid token (require_auth_context)
- Delete requires a valid token AND the admin role (require_admin)
- Payloads pass validate_project() before any write
- Malformed and unknown ids are both 404 (no distinction leaked)

Each handler performs a single store call and returns the stored record.
Store errors (sqlite3.Error) are not caught here; the application-level
handler in main.py turns them into a generic 500.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from projects_api.auth_context import AuthContext, require_auth_context
from projects_api.config import IS_DEV
from projects_api.db import ProjectStore
from projects_api.dependencies import get_project_store, require_admin
from projects_api.logger import get_logger
from projects_api.schemas_projects import ProjectResponse, ProjectWriteRequest, validate_project

log = get_logger("projects")

NOT_FOUND_DETAIL = "The project with the given ID was not found."

router = APIRouter(
    prefix="/api/projects",
    tags=["projects"],
)


def _validated(payload: ProjectWriteRequest) -> dict:
    result = validate_project(payload.model_dump())
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.message)
    return result.value


@router.get("", response_model=List[ProjectResponse])
@router.get("/", response_model=List[ProjectResponse], include_in_schema=False)
def list_projects(store: ProjectStore = Depends(get_project_store)):
    """List every project."""
    projects = store.list_all()
    if IS_DEV:
        log.debug(f"[PROJECTS] List: results={len(projects)}")
    return [p.to_dict() for p in projects]


@router.get("/categories/{name}", response_model=List[ProjectResponse])
def list_projects_by_category(
    name: str = Path(..., min_length=1, description="Substring to match against category labels"),
    store: ProjectStore = Depends(get_project_store),
):
    """List projects having a category label that contains `name`."""
    projects = store.list_by_category(name)
    if IS_DEV:
        log.debug(f"[PROJECTS] List by category: name={name!r}, results={len(projects)}")
    return [p.to_dict() for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str = Path(..., description="Project ID"),
    store: ProjectStore = Depends(get_project_store),
):
    """
    Get a single project by ID.

    Raises:
        HTTPException(404): Malformed ID or no such project
    """
    project = store.get(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return project.to_dict()


@router.post("", response_model=ProjectResponse)
@router.post("/", response_model=ProjectResponse, include_in_schema=False)
def create_project(
    payload: ProjectWriteRequest,
    ctx: AuthContext = Depends(require_auth_context),
    store: ProjectStore = Depends(get_project_store),
):
    """
    Create a project.

    Raises:
        HTTPException(401): Missing or invalid token (auth dependency)
        HTTPException(400): Name outside 5-50 chars, or bad categories
    """
    value = _validated(payload)
    project = store.create(value["name"], value["categories"])
    log.info(f"[PROJECTS] Created project_id={project.id}, user_id={ctx.user_id}")
    return project.to_dict()


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    payload: ProjectWriteRequest,
    project_id: str = Path(..., description="Project ID"),
    ctx: AuthContext = Depends(require_auth_context),
    store: ProjectStore = Depends(get_project_store),
):
    """
    Rename a project. Only `name` is rewritten.

    Raises:
        HTTPException(401): Missing or invalid token (auth dependency)
        HTTPException(400): Name outside 5-50 chars
        HTTPException(404): Malformed ID or no such project
    """
    value = _validated(payload)
    project = store.update_name(project_id, value["name"])
    if project is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    log.info(f"[PROJECTS] Updated project_id={project.id}, user_id={ctx.user_id}")
    return project.to_dict()


@router.delete("/{project_id}", response_model=ProjectResponse)
def delete_project(
    project_id: str = Path(..., description="Project ID to delete"),
    ctx: AuthContext = Depends(require_admin),
    store: ProjectStore = Depends(get_project_store),
):
    """
    Delete a project and return its prior state.

    Raises:
        HTTPException(401): Missing or invalid token
        HTTPException(403): Identity is not an admin
        HTTPException(404): Malformed ID or no such project
    """
    project = store.delete(project_id)
    if project is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    log.info(f"[PROJECTS] Deleted project_id={project.id}, user_id={ctx.user_id}")
    return project.to_dict()
