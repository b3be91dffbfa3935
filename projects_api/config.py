# projects_api/config.py
# Environment-aware configuration for the Projects API

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT configuration
SECRET_KEY = os.environ.get("SECRET_KEY", "projects-api-dev-secret")
ALGORITHM = "HS256"

# Token lifetime
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "60"))

# Header accepted in addition to "Authorization: Bearer <token>"
AUTH_TOKEN_HEADER = "x-auth-token"

# Database configuration (relative paths resolve against the working directory)
DATABASE_PATH = os.environ.get("DATABASE_PATH", "projects.db")

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG" if IS_DEV else "INFO").upper()

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())


def config_summary() -> dict:
    """Non-secret settings, logged once at startup."""
    return {
        "env": ENV,
        "database_path": DATABASE_PATH,
        "access_token_minutes": ACCESS_TOKEN_MINUTES,
        "log_level": LOG_LEVEL,
    }
