"""Tests for shared-link endpoints and health checks."""

from httpx import AsyncClient

from tests.api.test_projects_api import API, create_project, upload


class TestPublicLinks:
    async def test_public_project(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client, title="Shared")
        await upload(async_client, project["id"])

        response = await async_client.get(f"{API}/public/projects/{project['public_id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == project["id"]
        assert body["title"] == "Shared"
        assert len(body["files"]) == 1

    async def test_project_id_is_not_a_public_id(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client)
        response = await async_client.get(f"{API}/public/projects/{project['id']}")
        assert response.status_code == 404

    async def test_public_file(self, async_client: AsyncClient) -> None:
        project = await create_project(async_client, title="Shared")
        project_file = await upload(async_client, project["id"])

        response = await async_client.get(
            f"{API}/public/files/{project_file['public_id']}"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["file"]["id"] == project_file["id"]
        assert body["project"] == {
            "id": project["id"],
            "public_id": project["public_id"],
            "title": "Shared",
        }

    async def test_unknown_public_file(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{API}/public/files/nothing")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestHealth:
    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert "X-Request-ID" in response.headers

    async def test_database_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health/db")
        assert response.json()["database"] is True

    async def test_redis_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health/redis")
        body = response.json()
        assert body["redis"] is True
        assert body["circuit_breaker"] == "closed"
