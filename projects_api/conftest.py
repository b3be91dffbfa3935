"""
Shared fixtures for the projects_api test suite.

Each test gets a fresh application over its own temporary SQLite file, so
tests never see each other's records.
"""

import pytest
from fastapi.testclient import TestClient

from projects_api.auth_context import create_access_token
from projects_api.db import new_record_id
from projects_api.main import create_app


@pytest.fixture
def app(tmp_path):
    return create_app(database_path=str(tmp_path / "test.db"))


@pytest.fixture
def client(app):
    # Context manager runs the lifespan (opens/closes the store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def project_store(app, client):
    return app.state.project_store


@pytest.fixture
def user_token():
    return create_access_token(new_record_id(), is_admin=False)


@pytest.fixture
def admin_token():
    return create_access_token(new_record_id(), is_admin=True)


@pytest.fixture
def user_headers(user_token):
    return {"x-auth-token": user_token}


@pytest.fixture
def admin_headers(admin_token):
    return {"x-auth-token": admin_token}
