# ---------------------------------------------------------
# projects_api/main.py
# Projects API - FastAPI + SQLite
#
# Run: uvicorn projects_api.main:app --reload (from repo root)
#
# - /api/projects   : project CRUD + category filter
# - /api/users      : registration, current user
# - /api/auth       : login
# - /health         : liveness
# ---------------------------------------------------------

from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projects_api.config import CORS_ORIGINS, DATABASE_PATH, IS_PROD, config_summary
from projects_api.error_middleware import GENERIC_FAILURE_DETAIL, ExceptionLoggingMiddleware
from projects_api.db import Database, ProjectStore, UserStore
from projects_api.logger import get_logger
from projects_api.request_middleware import RequestLoggingMiddleware
from projects_api.routes_projects import router as projects_router
from projects_api.routes_users import auth_router, users_router

log = get_logger("app")


# ---------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------
def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies/params are a bad request, same as a failed validation rule."""
    return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})


async def store_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Infrastructure failures: log the traceback, answer with a generic 500."""
    log.error(
        f"[APP] Unhandled {type(exc).__name__} in {request.method} {request.url.path}",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"detail": GENERIC_FAILURE_DETAIL})


# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
def create_app(database_path: Optional[str] = None) -> FastAPI:
    """
    Build the application.

    The store is constructed here and opened/closed by the lifespan, so every
    app instance (including one per test) owns its own connection.

    Args:
        database_path: SQLite file to use instead of DATABASE_PATH
    """
    db = Database(database_path or DATABASE_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(f"[CONFIG] {config_summary()}")
        db.open()
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title="Projects API", version="0.1", lifespan=lifespan)
    app.state.db = db
    app.state.project_store = ProjectStore(db)
    app.state.user_store = UserStore(db)

    # Innermost: turns any unhandled exception into a logged generic 500
    app.add_middleware(ExceptionLoggingMiddleware)

    # CORS configuration from config module
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-auth-token", "x-request-id"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(sqlite3.Error, store_error_handler)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(projects_router)
    app.include_router(users_router)
    app.include_router(auth_router)

    return app


app = create_app()
