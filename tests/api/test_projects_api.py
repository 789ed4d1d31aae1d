"""Tests for the project API endpoints.

Tests cover:
- Listing with activity stats per caller
- Create/get/rename/delete with structured errors
- Marking projects viewed and reading the view back
"""

import uuid

from httpx import AsyncClient

API = "/api/v1"


async def create_project(client: AsyncClient, title: str = "Launch", user: str = "ana") -> dict:
    response = await client.post(
        f"{API}/projects", json={"title": title}, headers={"X-User-ID": user}
    )
    assert response.status_code == 201
    return response.json()


async def upload(client: AsyncClient, project_id: str, name: str = "hero.png") -> dict:
    response = await client.post(
        f"{API}/projects/{project_id}/files",
        files={"file": (name, b"\x89PNG\r\n\x1a\nfake", "image/png")},
    )
    assert response.status_code == 201
    return response.json()


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


class TestProjectCrud:
    async def test_create_project(self, async_client: AsyncClient) -> None:
        data = await create_project(async_client, title="Spring campaign")
        assert data["title"] == "Spring campaign"
        assert data["user_id"] == "ana"
        assert data["public_id"]

    async def test_create_without_header_uses_default_user(
        self, async_client: AsyncClient
    ) -> None:
        response = await async_client.post(f"{API}/projects", json={"title": "Mine"})
        assert response.status_code == 201
        assert response.json()["user_id"] == "user-1"

    async def test_create_empty_title_is_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post(f"{API}/projects", json={"title": ""})
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "request_id" in body

    async def test_create_blank_title_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.post(f"{API}/projects", json={"title": "   "})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_get_project_with_files(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        await upload(async_client, project["id"])

        response = await async_client.get(f"{API}/projects/{project['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == project["id"]
        assert [f["name"] for f in body["files"]] == ["hero.png"]
        assert body["files"][0]["anchor_family"] == "image"

    async def test_get_unknown_project(self, async_client: AsyncClient) -> None:
        missing = str(uuid.uuid4())
        response = await async_client.get(
            f"{API}/projects/{missing}", headers={"X-Request-ID": "req-123"}
        )
        assert response.status_code == 404
        assert response.json() == {
            "error": f"Project not found: {missing}",
            "code": "NOT_FOUND",
            "request_id": "req-123",
        }
        assert response.headers["X-Request-ID"] == "req-123"

    async def test_malformed_project_id_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{API}/projects/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_rename(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        response = await async_client.put(
            f"{API}/projects/{project['id']}", json={"title": "Renamed"}
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"

    async def test_delete(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        await upload(async_client, project["id"])

        response = await async_client.delete(f"{API}/projects/{project['id']}")
        assert response.status_code == 204

        response = await async_client.get(f"{API}/projects/{project['id']}")
        assert response.status_code == 404

    async def test_delete_unknown(self, async_client: AsyncClient) -> None:
        response = await async_client.delete(f"{API}/projects/{uuid.uuid4()}")
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Listing with activity
# ---------------------------------------------------------------------------


class TestProjectListing:
    async def test_lists_only_the_callers_projects(self, async_client: AsyncClient) -> None:
        await create_project(async_client, title="Ana's", user="ana")
        await create_project(async_client, title="Ben's", user="ben")

        response = await async_client.get(f"{API}/projects", headers={"X-User-ID": "ana"})

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Ana's"]

    async def test_stats_and_unread_flow(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client, user="ana")
        project_file = await upload(async_client, project["id"])
        await async_client.post(
            f"{API}/files/{project_file['id']}/comments",
            json={"name": "Ben", "content": "Crop tighter"},
        )
        await async_client.post(
            f"{API}/files/{project_file['id']}/comments",
            json={"name": "Ben", "content": "Nice", "tag": "Resolved"},
        )

        listing = (
            await async_client.get(f"{API}/projects", headers={"X-User-ID": "ana"})
        ).json()
        stats = listing[0]
        assert stats["file_count"] == 1
        assert stats["total_comments"] == 2
        assert stats["unresolved_comments"] == 1
        assert stats["last_comment_time"] is not None
        assert stats["has_unread_comments"] is True

        viewed = await async_client.post(
            f"{API}/projects/{project['id']}/viewed", headers={"X-User-ID": "ana"}
        )
        assert viewed.status_code == 200

        listing = (
            await async_client.get(f"{API}/projects", headers={"X-User-ID": "ana"})
        ).json()
        assert listing[0]["has_unread_comments"] is False


# ---------------------------------------------------------------------------
# View tracking
# ---------------------------------------------------------------------------


class TestProjectViews:
    async def test_never_viewed(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        response = await async_client.get(
            f"{API}/projects/{project['id']}/view", headers={"X-User-ID": "ana"}
        )
        assert response.status_code == 200
        assert response.json() == {
            "project_id": project["id"],
            "user_id": "ana",
            "last_viewed_at": None,
        }

    async def test_mark_viewed_then_read(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        marked = await async_client.post(
            f"{API}/projects/{project['id']}/viewed", headers={"X-User-ID": "ana"}
        )
        assert marked.status_code == 200
        assert marked.json()["user_id"] == "ana"

        response = await async_client.get(
            f"{API}/projects/{project['id']}/view", headers={"X-User-ID": "ana"}
        )
        assert response.json()["last_viewed_at"] is not None

    async def test_mark_unknown_project(self, async_client: AsyncClient) -> None:
        response = await async_client.post(f"{API}/projects/{uuid.uuid4()}/viewed")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
