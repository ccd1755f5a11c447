"""
Integration tests for the milestone API.

Drives the app over HTTP against an in-memory database and checks the
response envelope, status codes and the end-to-end lifecycle.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from app.api.deps import get_milestone_repository
from app.infrastructure.local.milestone_repository import SqliteMilestoneRepository

START = "2026-04-01T00:00:00Z"
TARGET = "2026-04-15T00:00:00Z"


async def _create_project(client, auth, user="pm"):
    response = await client.post("/api/projects", json={"name": "Orion"}, headers=auth(user))
    assert response.status_code == 201
    return response.json()["data"]["id"]


class UnavailableMilestoneRepository(SqliteMilestoneRepository):
    async def list(self, filters=None, limit=10, offset=0):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


class BrokenMilestoneRepository(SqliteMilestoneRepository):
    async def list(self, filters=None, limit=10, offset=0):
        raise RuntimeError("unexpected")


async def _create_milestone(client, auth, project_id, user="owner", **extra):
    body = {
        "title": extra.pop("title", "Design freeze"),
        "project_id": project_id,
        "owner_id": extra.pop("owner_id", user),
        "start_date": START,
        "target_completion_date": TARGET,
        **extra,
    }
    response = await client.post("/api/milestones", json=body, headers=auth(user))
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestMilestoneApi:
    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.get("/api/milestones")

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Authorization header required"}

    @pytest.mark.asyncio
    async def test_create_returns_envelope(self, client, auth):
        project_id = await _create_project(client, auth)

        response = await client.post(
            "/api/milestones",
            json={
                "title": "Design freeze",
                "project_id": project_id,
                "owner_id": "owner",
                "start_date": START,
                "target_completion_date": TARGET,
            },
            headers=auth("owner"),
        )

        body = response.json()
        assert response.status_code == 201
        assert body["success"] is True
        assert body["data"]["status"] == "not-started"
        assert body["data"]["progress"] == 0
        assert body["data"]["created_by"] == "owner"

    @pytest.mark.asyncio
    async def test_create_missing_title_is_400(self, client, auth):
        project_id = await _create_project(client, auth)

        response = await client.post(
            "/api/milestones",
            json={"project_id": project_id, "owner_id": "o", "start_date": START, "target_completion_date": TARGET},
            headers=auth("owner"),
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["errors"]

    @pytest.mark.asyncio
    async def test_create_accepts_naive_and_offset_dates(self, client, auth):
        project_id = await _create_project(client, auth)

        response = await client.post(
            "/api/milestones",
            json={
                "title": "Mixed offsets",
                "project_id": project_id,
                "owner_id": "owner",
                "start_date": "2026-04-01T00:00:00Z",
                "target_completion_date": "2026-04-15T00:00:00",
            },
            headers=auth("owner"),
        )

        assert response.status_code == 201
        assert response.json()["data"]["target_completion_date"].startswith("2026-04-15T00:00:00")

    @pytest.mark.asyncio
    async def test_create_target_before_start_with_mixed_offsets_is_400(self, client, auth):
        project_id = await _create_project(client, auth)

        response = await client.post(
            "/api/milestones",
            json={
                "title": "Backwards",
                "project_id": project_id,
                "owner_id": "owner",
                "start_date": "2026-04-15T00:00:00",
                "target_completion_date": "2026-04-01T00:00:00+00:00",
            },
            headers=auth("owner"),
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_create_for_unknown_project_is_404(self, client, auth):
        response = await client.post(
            "/api/milestones",
            json={
                "title": "Orphan",
                "project_id": "00000000-0000-0000-0000-000000000000",
                "owner_id": "o",
                "start_date": START,
                "target_completion_date": TARGET,
            },
            headers=auth("owner"),
        )

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_progress_out_of_range_is_400(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)

        response = await client.put(
            f"/api/milestones/{milestone['id']}/progress",
            json={"progress": 101},
            headers=auth("owner"),
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_progress_lifecycle(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)
        url = f"/api/milestones/{milestone['id']}/progress"

        response = await client.put(url, json={"progress": 45}, headers=auth("someone"))
        assert response.status_code == 200
        assert response.json()["data"] == {
            "progress": 45,
            "status": "in-progress",
            "actual_completion_date": None,
        }

        response = await client.put(url, json={"progress": 100}, headers=auth("someone"))
        first_completion = response.json()["data"]["actual_completion_date"]
        assert response.json()["data"]["status"] == "completed"
        assert first_completion is not None

        response = await client.put(url, json={"progress": 100}, headers=auth("someone"))
        assert response.json()["data"]["actual_completion_date"] == first_completion

        response = await client.put(url, json={"progress": 50}, headers=auth("someone"))
        assert response.json()["data"]["actual_completion_date"] is None

    @pytest.mark.asyncio
    async def test_approval_flow(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)
        approve_url = f"/api/milestones/{milestone['id']}/approve"

        response = await client.put(approve_url, headers=auth("carol"))
        assert response.status_code == 403
        assert response.json()["success"] is False

        response = await client.put(
            f"/api/milestones/{milestone['id']}",
            json={"reviewer_ids": ["carol"]},
            headers=auth("owner"),
        )
        assert response.status_code == 200

        response = await client.put(approve_url, headers=auth("carol"))
        assert response.status_code == 200
        assert response.json()["message"] == "Milestone approved successfully"
        assert response.json()["data"] == {"approved_by": ["carol"]}

        response = await client.put(approve_url, headers=auth("carol"))
        assert response.status_code == 409

        response = await client.get(f"/api/milestones/{milestone['id']}", headers=auth("carol"))
        assert response.json()["data"]["approved_by"] == ["carol"]
        assert response.json()["data"]["status"] == "not-started"

    @pytest.mark.asyncio
    async def test_admin_token_can_approve(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)

        response = await client.put(
            f"/api/milestones/{milestone['id']}/approve", headers=auth("admin:root")
        )

        assert response.status_code == 200
        assert response.json()["data"]["approved_by"] == ["root"]

    @pytest.mark.asyncio
    async def test_update_by_stranger_is_403(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)

        response = await client.put(
            f"/api/milestones/{milestone['id']}",
            json={"title": "Hijacked"},
            headers=auth("mallory"),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_blocked_by_dependent(self, client, auth):
        project_id = await _create_project(client, auth)
        a = await _create_milestone(client, auth, project_id, title="A")
        b = await _create_milestone(client, auth, project_id, title="B", dependency_ids=[a["id"]])

        response = await client.delete(f"/api/milestones/{a['id']}", headers=auth("owner"))
        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "Cannot delete milestone: 1 other milestone(s) depend on this milestone",
            "errors": {"dependent_count": 1},
        }

        await client.put(
            f"/api/milestones/{b['id']}", json={"dependency_ids": []}, headers=auth("owner")
        )
        response = await client.delete(f"/api/milestones/{a['id']}", headers=auth("owner"))
        assert response.status_code == 200
        assert response.json()["message"] == "Milestone deleted successfully"

        response = await client.get(f"/api/milestones/{a['id']}", headers=auth("owner"))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_clears_task_references(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)
        task_ids = []
        for title in ("wire API", "write docs"):
            response = await client.post(
                "/api/tasks",
                json={"title": title, "project_id": project_id, "milestone_id": milestone["id"]},
                headers=auth("owner"),
            )
            assert response.status_code == 201
            task_ids.append(response.json()["data"]["id"])

        response = await client.get(f"/api/milestones/{milestone['id']}", headers=auth("owner"))
        assert set(response.json()["data"]["task_ids"]) == set(task_ids)

        response = await client.delete(f"/api/milestones/{milestone['id']}", headers=auth("owner"))
        assert response.status_code == 200

        for task_id in task_ids:
            response = await client.get(f"/api/tasks/{task_id}", headers=auth("owner"))
            assert response.json()["data"]["milestone_id"] is None

    @pytest.mark.asyncio
    async def test_task_with_unknown_milestone_is_404(self, client, auth):
        response = await client.post(
            "/api/tasks",
            json={"title": "stray", "milestone_id": "00000000-0000-0000-0000-000000000000"},
            headers=auth("owner"),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_filters_and_total(self, client, auth):
        project_id = await _create_project(client, auth)
        await _create_milestone(client, auth, project_id, title="Mine")
        await _create_milestone(client, auth, project_id, user="other", title="Theirs")

        response = await client.get(
            "/api/milestones", params={"mine": "true"}, headers=auth("owner")
        )
        body = response.json()
        assert body["total"] == 1
        assert [m["title"] for m in body["data"]] == ["Mine"]

        response = await client.get(
            "/api/milestones", params={"project_id": project_id, "limit": 1}, headers=auth("owner")
        )
        body = response.json()
        assert body["total"] == 2
        assert len(body["data"]) == 1

    @pytest.mark.asyncio
    async def test_activity_trail(self, client, auth):
        project_id = await _create_project(client, auth)
        milestone = await _create_milestone(client, auth, project_id)
        await client.put(
            f"/api/milestones/{milestone['id']}/progress", json={"progress": 10}, headers=auth("owner")
        )

        response = await client.get(
            "/api/activities", params={"entity_id": milestone["id"]}, headers=auth("owner")
        )

        actions = [a["action"] for a in response.json()["data"]]
        assert sorted(actions) == ["create", "progress"]

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_storage_failure_is_500_envelope(self, client, auth, session_factory):
        from main import app

        app.dependency_overrides[get_milestone_repository] = lambda: UnavailableMilestoneRepository(
            session_factory=session_factory
        )

        response = await client.get("/api/milestones", headers=auth("owner"))

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Storage unavailable"}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500_envelope(self, client, auth, session_factory):
        from main import app

        app.dependency_overrides[get_milestone_repository] = lambda: BrokenMilestoneRepository(
            session_factory=session_factory
        )
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
            response = await raw_client.get("/api/milestones", headers=auth("owner"))

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
