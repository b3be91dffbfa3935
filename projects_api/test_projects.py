"""
Test suite for /api/projects.

Tests:
- Public reads (list, category filter, get by id)
- Auth gate on create/update (401)
- Validation rule on create/update (400)
- Role gate on delete (403 for non-admins, record untouched)
- Not-found policy for malformed and unknown ids (404)

Run: pytest projects_api/test_projects.py -v
"""

import pytest

from projects_api.db import new_record_id

LONG_NAME = "a" * 51


class TestListProjects:
    """Test GET /api/projects."""

    def test_returns_all_projects(self, client, project_store):
        project_store.create("project1")
        project_store.create("project2")

        resp = client.get("/api/projects/")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 2
        assert {p["name"] for p in body} == {"project1", "project2"}
        assert all("_id" in p for p in body)

    def test_empty_store_returns_empty_list(self, client):
        resp = client.get("/api/projects")
        assert resp.status_code == 200
        assert resp.json() == []


class TestListByCategory:
    """Test GET /api/projects/categories/{name}."""

    def test_filters_by_label_substring(self, client, project_store):
        project_store.create("health bill", ["public-health", "budget"])
        project_store.create("road works", ["transport"])
        project_store.create("no labels")

        resp = client.get("/api/projects/categories/health")
        assert resp.status_code == 200
        names = [p["name"] for p in resp.json()]
        assert names == ["health bill"]

    def test_match_is_case_sensitive(self, client, project_store):
        project_store.create("road works", ["transport"])

        resp = client.get("/api/projects/categories/Transport")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_project_listed_once_with_several_matching_labels(self, client, project_store):
        project_store.create("school plan", ["education", "education-budget"])

        resp = client.get("/api/projects/categories/education")
        assert resp.status_code == 200
        assert len(resp.json()) == 1


class TestGetProject:
    """Test GET /api/projects/{id}."""

    def test_returns_project_for_valid_id(self, client, project_store):
        project = project_store.create("project1")

        resp = client.get(f"/api/projects/{project.id}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "project1"
        assert resp.json()["_id"] == project.id

    def test_returns_404_for_malformed_id(self, client):
        resp = client.get("/api/projects/1")
        assert resp.status_code == 404

    def test_returns_404_for_unknown_id(self, client):
        resp = client.get(f"/api/projects/{new_record_id()}")
        assert resp.status_code == 404


class TestCreateProject:
    """Test POST /api/projects."""

    def test_returns_401_without_token(self, client):
        resp = client.post("/api/projects", json={"name": "project1"})
        assert resp.status_code == 401

    def test_returns_400_when_name_too_short(self, client, user_headers):
        resp = client.post("/api/projects", headers=user_headers, json={"name": "1234"})
        assert resp.status_code == 400
        assert "at least 5" in resp.json()["detail"]

    def test_returns_400_when_name_too_long(self, client, user_headers):
        resp = client.post("/api/projects", headers=user_headers, json={"name": LONG_NAME})
        assert resp.status_code == 400
        assert "50" in resp.json()["detail"]

    def test_returns_400_when_name_missing(self, client, user_headers):
        resp = client.post("/api/projects", headers=user_headers, json={})
        assert resp.status_code == 400

    def test_returns_400_for_non_json_body(self, client, user_headers):
        resp = client.post(
            "/api/projects",
            headers={**user_headers, "Content-Type": "application/json"},
            content=b"not json",
        )
        assert resp.status_code == 400

    def test_saves_project_if_valid(self, client, user_headers, project_store):
        resp = client.post("/api/projects", headers=user_headers, json={"name": "project1"})
        assert resp.status_code == 200
        assert [p.name for p in project_store.list_all()] == ["project1"]

    def test_returns_project_if_valid(self, client, user_headers):
        resp = client.post("/api/projects", headers=user_headers, json={"name": "project1"})
        assert resp.status_code == 200
        body = resp.json()
        assert "_id" in body
        assert body["name"] == "project1"

    def test_admin_token_can_create(self, client, admin_headers):
        resp = client.post("/api/projects", headers=admin_headers, json={"name": "project1"})
        assert resp.status_code == 200

    def test_stores_categories(self, client, user_headers):
        resp = client.post(
            "/api/projects",
            headers=user_headers,
            json={"name": "project1", "categories": ["health", "budget"]},
        )
        assert resp.status_code == 200
        assert resp.json()["categories"] == ["health", "budget"]

    def test_round_trip_by_returned_id(self, client, user_headers):
        created = client.post("/api/projects", headers=user_headers, json={"name": "round trip"}).json()

        resp = client.get(f"/api/projects/{created['_id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "round trip"


class TestUpdateProject:
    """Test PUT /api/projects/{id}."""

    @pytest.fixture
    def project(self, project_store):
        return project_store.create("project1", ["health"])

    def test_returns_401_with_empty_token(self, client, project):
        resp = client.put(
            f"/api/projects/{project.id}",
            headers={"x-auth-token": ""},
            json={"name": "updatedName"},
        )
        assert resp.status_code == 401

    def test_returns_400_when_name_too_short(self, client, project, project_store, user_headers):
        resp = client.put(f"/api/projects/{project.id}", headers=user_headers, json={"name": "1234"})
        assert resp.status_code == 400
        assert project_store.get(project.id).name == "project1"

    def test_returns_400_when_name_too_long(self, client, project, user_headers):
        resp = client.put(f"/api/projects/{project.id}", headers=user_headers, json={"name": LONG_NAME})
        assert resp.status_code == 400

    def test_returns_404_for_malformed_id(self, client, user_headers):
        resp = client.put("/api/projects/1", headers=user_headers, json={"name": "updatedName"})
        assert resp.status_code == 404

    def test_returns_404_for_unknown_id(self, client, user_headers):
        resp = client.put(f"/api/projects/{new_record_id()}", headers=user_headers, json={"name": "updatedName"})
        assert resp.status_code == 404

    def test_updates_project_if_valid(self, client, project, project_store, user_headers):
        client.put(f"/api/projects/{project.id}", headers=user_headers, json={"name": "updatedName"})
        assert project_store.get(project.id).name == "updatedName"

    def test_returns_updated_project(self, client, project, user_headers):
        resp = client.put(f"/api/projects/{project.id}", headers=user_headers, json={"name": "updatedName"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["_id"] == project.id
        assert body["name"] == "updatedName"

    def test_only_name_is_rewritten(self, client, project, user_headers):
        resp = client.put(
            f"/api/projects/{project.id}",
            headers=user_headers,
            json={"name": "updatedName", "categories": ["other"]},
        )
        assert resp.status_code == 200
        assert resp.json()["categories"] == ["health"]


class TestDeleteProject:
    """Test DELETE /api/projects/{id}."""

    @pytest.fixture
    def project(self, project_store):
        return project_store.create("project1")

    def test_returns_401_without_token(self, client, project):
        resp = client.delete(f"/api/projects/{project.id}")
        assert resp.status_code == 401

    def test_returns_403_for_non_admin(self, client, project, project_store, user_headers):
        resp = client.delete(f"/api/projects/{project.id}", headers=user_headers)
        assert resp.status_code == 403
        assert project_store.get(project.id) is not None

    def test_non_admin_gets_403_even_for_unknown_id(self, client, user_headers):
        resp = client.delete(f"/api/projects/{new_record_id()}", headers=user_headers)
        assert resp.status_code == 403

    def test_returns_404_for_malformed_id(self, client, admin_headers):
        resp = client.delete("/api/projects/1", headers=admin_headers)
        assert resp.status_code == 404

    def test_returns_404_for_unknown_id(self, client, admin_headers):
        resp = client.delete(f"/api/projects/{new_record_id()}", headers=admin_headers)
        assert resp.status_code == 404

    def test_deletes_project_if_valid(self, client, project, project_store, admin_headers):
        client.delete(f"/api/projects/{project.id}", headers=admin_headers)
        assert project_store.get(project.id) is None

    def test_returns_removed_project(self, client, project, admin_headers):
        resp = client.delete(f"/api/projects/{project.id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["_id"] == project.id
        assert resp.json()["name"] == "project1"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
