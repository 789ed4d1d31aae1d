"""Tests for the comment API endpoints.

Tests cover:
- Submitting comments and replies with per-file-type anchors
- Flat listing order
- Threads with pin numbers, PDF page filtering
- Thread lookup, tag changes, idempotent deletion
"""

import uuid

import pytest
from httpx import AsyncClient

from tests.api.test_projects_api import API, create_project


async def upload(
    client: AsyncClient, name: str = "hero.png", mime_type: str = "image/png"
) -> dict:
    project = await create_project(client)
    response = await client.post(
        f"{API}/projects/{project['id']}/files",
        files={"file": (name, b"media-bytes", mime_type)},
    )
    assert response.status_code == 201
    return response.json()


async def post_comment(client: AsyncClient, file_id: str, **fields) -> dict:
    payload = {"name": "Ana", "content": "Please adjust"}
    payload.update(fields)
    response = await client.post(f"{API}/files/{file_id}/comments", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def image(async_client: AsyncClient) -> dict:
    return await upload(async_client)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestCreateComment:
    async def test_create_image_comment(self, async_client: AsyncClient, image: dict) -> None:
        comment = await post_comment(
            async_client, image["id"], position_x=2500, position_y=5000
        )
        assert comment["file_id"] == image["id"]
        assert comment["tag"] == "To Do"
        assert comment["parent_id"] is None
        assert (comment["position_x"], comment["position_y"]) == (2500, 5000)

    async def test_reply(self, async_client: AsyncClient, image: dict) -> None:
        root = await post_comment(async_client, image["id"])
        reply = await post_comment(async_client, image["id"], parent_id=root["id"])
        assert reply["parent_id"] == root["id"]

    async def test_wrong_anchor_for_file_type(
        self, async_client: AsyncClient, image: dict
    ) -> None:
        response = await async_client.post(
            f"{API}/files/{image['id']}/comments",
            json={"name": "Ana", "content": "x", "timestamp": 4},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "timestamp" in body["error"]

    async def test_blank_content(self, async_client: AsyncClient, image: dict) -> None:
        response = await async_client.post(
            f"{API}/files/{image['id']}/comments",
            json={"name": "Ana", "content": "  "},
        )
        assert response.status_code == 400
        assert "content" in response.json()["error"]

    async def test_missing_name_is_422(self, async_client: AsyncClient, image: dict) -> None:
        response = await async_client.post(
            f"{API}/files/{image['id']}/comments", json={"content": "x"}
        )
        assert response.status_code == 422

    async def test_unknown_file(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            f"{API}/files/{uuid.uuid4()}/comments",
            json={"name": "Ana", "content": "x"},
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# Listing and threads
# ---------------------------------------------------------------------------


class TestCommentListings:
    async def test_flat_listing_order(self, async_client: AsyncClient, image: dict) -> None:
        first = await post_comment(async_client, image["id"], content="first")
        second = await post_comment(async_client, image["id"], content="second")

        asc = await async_client.get(f"{API}/files/{image['id']}/comments")
        desc = await async_client.get(
            f"{API}/files/{image['id']}/comments", params={"order": "desc"}
        )

        ids = [c["id"] for c in asc.json()]
        assert set(ids) == {first["id"], second["id"]}
        assert [c["id"] for c in desc.json()] == list(reversed(ids))

    async def test_invalid_order_is_422(self, async_client: AsyncClient, image: dict) -> None:
        response = await async_client.get(
            f"{API}/files/{image['id']}/comments", params={"order": "newest"}
        )
        assert response.status_code == 422

    async def test_threads_with_pins(self, async_client: AsyncClient, image: dict) -> None:
        pinned = await post_comment(
            async_client, image["id"], position_x=100, position_y=200
        )
        reply = await post_comment(async_client, image["id"], parent_id=pinned["id"])
        await post_comment(async_client, image["id"], parent_id=reply["id"])

        response = await async_client.get(f"{API}/files/{image['id']}/comments/threads")

        assert response.status_code == 200
        body = response.json()
        assert body["anchor_family"] == "image"
        assert body["total_comments"] == 3
        assert len(body["threads"]) == 1
        root = body["threads"][0]
        assert root["id"] == pinned["id"]
        assert root["pin_number"] == 1
        assert root["reply_count"] == 2
        assert root["depth"] == 2
        assert root["replies"][0]["id"] == reply["id"]
        assert root["replies"][0]["pin_number"] is None
        assert root["replies"][0]["depth"] == 1
        assert root["replies"][0]["replies"][0]["depth"] == 0
        assert len(root["replies"][0]["replies"]) == 1
        assert body["pins"] == [
            {
                "number": 1,
                "comment_id": pinned["id"],
                "position_x": 100,
                "position_y": 200,
                "timestamp": None,
                "page": None,
            }
        ]

    async def test_pdf_page_filter(self, async_client: AsyncClient) -> None:
        pdf = await upload(async_client, name="deck.pdf", mime_type="application/pdf")
        await post_comment(async_client, pdf["id"], page=1, position_x=1, position_y=1)
        on_two = await post_comment(
            async_client, pdf["id"], page=2, position_x=5, position_y=5
        )

        response = await async_client.get(
            f"{API}/files/{pdf['id']}/comments/threads", params={"page": 2}
        )

        body = response.json()
        assert body["page"] == 2
        assert [(p["comment_id"], p["number"]) for p in body["pins"]] == [
            (on_two["id"], 2)
        ]
        assert len(body["threads"]) == 2

    async def test_page_zero_is_400(self, async_client: AsyncClient, image: dict) -> None:
        response = await async_client.get(
            f"{API}/files/{image['id']}/comments/threads", params={"page": 0}
        )
        assert response.status_code == 400

    async def test_thread_of_reply(self, async_client: AsyncClient, image: dict) -> None:
        root = await post_comment(async_client, image["id"])
        reply = await post_comment(async_client, image["id"], parent_id=root["id"])

        response = await async_client.get(f"{API}/comments/{reply['id']}/thread")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == root["id"]
        assert [r["id"] for r in body["replies"]] == [reply["id"]]

    async def test_thread_of_unknown_comment(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"{API}/comments/{uuid.uuid4()}/thread")
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Tag changes and deletion
# ---------------------------------------------------------------------------


class TestUpdateAndDelete:
    async def test_change_tag(self, async_client: AsyncClient, image: dict) -> None:
        comment = await post_comment(async_client, image["id"])
        response = await async_client.patch(
            f"{API}/comments/{comment['id']}", json={"tag": "In Progress"}
        )
        assert response.status_code == 200
        assert response.json()["tag"] == "In Progress"

    async def test_unknown_tag_is_400(self, async_client: AsyncClient, image: dict) -> None:
        comment = await post_comment(async_client, image["id"])
        response = await async_client.patch(
            f"{API}/comments/{comment['id']}", json={"tag": "Done"}
        )
        assert response.status_code == 400

    async def test_delete_keeps_replies(self, async_client: AsyncClient, image: dict) -> None:
        root = await post_comment(async_client, image["id"])
        reply = await post_comment(async_client, image["id"], parent_id=root["id"])

        response = await async_client.delete(f"{API}/comments/{root['id']}")
        assert response.status_code == 204

        threads = (
            await async_client.get(f"{API}/files/{image['id']}/comments/threads")
        ).json()
        assert [t["id"] for t in threads["threads"]] == [reply["id"]]

    async def test_delete_twice_is_204(self, async_client: AsyncClient, image: dict) -> None:
        comment = await post_comment(async_client, image["id"])
        first = await async_client.delete(f"{API}/comments/{comment['id']}")
        second = await async_client.delete(f"{API}/comments/{comment['id']}")
        assert first.status_code == 204
        assert second.status_code == 204

    async def test_delete_malformed_id_is_400(self, async_client: AsyncClient) -> None:
        response = await async_client.delete(f"{API}/comments/42")
        assert response.status_code == 400
