"""Tests for CommentService.

Tests cover:
- Exception classes
- Submission validation (text, tag, parent, anchors per file type)
- Flat and threaded listings, pins and PDF page filtering
- Thread lookup by comment id
- Tag transitions
- Deletion orphaning replies, idempotent deletes
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.schemas.comment import CommentCreate
from proofpin.services.anchors import AnchorFamily
from proofpin.services.comment import (
    CommentNotFoundError,
    CommentService,
    CommentServiceError,
    CommentValidationError,
)
from proofpin.services.file import FileValidationError, ProjectFileNotFoundError
from proofpin.services.project_stats_cache import ProjectStatsCacheService
from tests.conftest import at, make_comment, make_file, make_project


def payload(**fields) -> CommentCreate:
    values = {"name": "Ana", "content": "Tighten the kerning"}
    values.update(fields)
    return CommentCreate(**values)


@pytest.fixture
async def image_file(db_session: AsyncSession, user_id: str):
    project = await make_project(db_session, user_id=user_id)
    return await make_file(db_session, project)


@pytest.fixture
def service(db_session: AsyncSession, no_cache: ProjectStatsCacheService) -> CommentService:
    return CommentService(db_session, cache=no_cache)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TestCommentExceptions:
    def test_not_found_error(self) -> None:
        error = CommentNotFoundError("abc")
        assert error.comment_id == "abc"
        assert "abc" in str(error)
        assert isinstance(error, CommentServiceError)

    def test_validation_error_attributes(self) -> None:
        error = CommentValidationError("content", "", "content is required")
        assert error.field == "content"
        assert error.value == ""
        assert error.message == "content is required"
        assert "content" in str(error)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreateComment:
    async def test_create_root_comment(self, service: CommentService, image_file) -> None:
        comment = await service.create_comment(
            image_file.id, payload(position_x=5000, position_y=2500, email=" a@b.c ")
        )
        assert comment.file_id == image_file.id
        assert comment.parent_id is None
        assert comment.tag == "To Do"
        assert comment.email == "a@b.c"
        assert (comment.position_x, comment.position_y) == (5000, 2500)

    async def test_text_is_trimmed(self, service: CommentService, image_file) -> None:
        comment = await service.create_comment(
            image_file.id, payload(name="  Ana ", content="  ok  ")
        )
        assert comment.name == "Ana"
        assert comment.content == "ok"

    @pytest.mark.parametrize("field", ["name", "content"])
    async def test_blank_required_text(
        self, service: CommentService, image_file, field: str
    ) -> None:
        with pytest.raises(CommentValidationError) as exc_info:
            await service.create_comment(image_file.id, payload(**{field: "   "}))
        assert exc_info.value.field == field

    async def test_unknown_tag(self, service: CommentService, image_file) -> None:
        with pytest.raises(CommentValidationError) as exc_info:
            await service.create_comment(image_file.id, payload(tag="Done"))
        assert exc_info.value.field == "tag"

    async def test_reply(self, service: CommentService, image_file) -> None:
        root = await service.create_comment(image_file.id, payload())
        reply = await service.create_comment(image_file.id, payload(parent_id=root.id))
        assert reply.parent_id == root.id

    async def test_reply_to_missing_parent(self, service: CommentService, image_file) -> None:
        with pytest.raises(CommentValidationError) as exc_info:
            await service.create_comment(
                image_file.id, payload(parent_id=str(uuid.uuid4()))
            )
        assert exc_info.value.field == "parent_id"

    async def test_reply_across_files_rejected(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        project = await make_project(db_session)
        other_file = await make_file(db_session, project)
        foreign = await make_comment(db_session, other_file)

        with pytest.raises(CommentValidationError) as exc_info:
            await service.create_comment(image_file.id, payload(parent_id=foreign.id))
        assert exc_info.value.field == "parent_id"

    async def test_anchor_must_match_file_type(
        self, service: CommentService, image_file
    ) -> None:
        with pytest.raises(CommentValidationError) as exc_info:
            await service.create_comment(image_file.id, payload(timestamp=12))
        assert exc_info.value.field == "timestamp"

    async def test_video_comment(self, db_session: AsyncSession, service: CommentService) -> None:
        project = await make_project(db_session)
        video = await make_file(db_session, project, mime_type="video/mp4", name="a.mp4")
        comment = await service.create_comment(video.id, payload(timestamp=95))
        assert comment.timestamp == 95

    async def test_unknown_file(self, service: CommentService) -> None:
        with pytest.raises(ProjectFileNotFoundError):
            await service.create_comment(str(uuid.uuid4()), payload())

    async def test_malformed_file_id(self, service: CommentService) -> None:
        with pytest.raises(FileValidationError):
            await service.create_comment("nope", payload())


# ---------------------------------------------------------------------------
# Listing and threads
# ---------------------------------------------------------------------------


class TestListings:
    async def test_flat_listing_order(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        second = await make_comment(db_session, image_file, created_at=at(2))
        first = await make_comment(db_session, image_file, created_at=at(1))

        ascending = await service.list_comments(image_file.id)
        descending = await service.list_comments(image_file.id, descending=True)

        assert [c.id for c in ascending] == [first.id, second.id]
        assert [c.id for c in descending] == [second.id, first.id]

    async def test_threads_and_pins(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        pinned = await make_comment(
            db_session, image_file, created_at=at(0), position_x=10, position_y=10
        )
        general = await make_comment(db_session, image_file, created_at=at(1))
        reply = await make_comment(
            db_session,
            image_file,
            created_at=at(2),
            parent_id=pinned.id,
            position_x=50,
            position_y=50,
        )

        result = await service.get_threads(image_file.id)

        assert result.family == AnchorFamily.IMAGE
        assert result.total_comments == 3
        assert [node.id for node in result.threads] == [pinned.id, general.id]
        assert [node.id for node in result.threads[0].replies] == [reply.id]
        assert result.pin_numbers == {pinned.id: 1}

    async def test_pdf_page_filter(self, db_session: AsyncSession, service: CommentService) -> None:
        project = await make_project(db_session)
        pdf = await make_file(db_session, project, mime_type="application/pdf", name="deck.pdf")
        p1 = await make_comment(
            db_session, pdf, created_at=at(0), page=1, position_x=1, position_y=1
        )
        p2 = await make_comment(
            db_session, pdf, created_at=at(1), page=2, position_x=2, position_y=2
        )

        result = await service.get_threads(pdf.id, page=2)

        assert [pin.comment.id for pin in result.visible_pins] == [p2.id]
        assert result.pin_numbers == {p1.id: 1, p2.id: 2}

    async def test_invalid_page(self, service: CommentService, image_file) -> None:
        with pytest.raises(CommentValidationError) as exc_info:
            await service.get_threads(image_file.id, page=0)
        assert exc_info.value.field == "page"

    async def test_get_thread_from_reply(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        root = await make_comment(
            db_session, image_file, created_at=at(0), position_x=1, position_y=1
        )
        reply = await make_comment(
            db_session, image_file, created_at=at(1), parent_id=root.id
        )
        nested = await make_comment(
            db_session, image_file, created_at=at(2), parent_id=reply.id
        )

        thread = await service.get_thread(nested.id)

        assert thread.root.id == root.id
        assert thread.pin_numbers == {root.id: 1}

    async def test_get_thread_unknown(self, service: CommentService) -> None:
        with pytest.raises(CommentNotFoundError):
            await service.get_thread(str(uuid.uuid4()))


# ---------------------------------------------------------------------------
# Tag changes and deletion
# ---------------------------------------------------------------------------


class TestUpdateAndDelete:
    async def test_update_tag(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        comment = await make_comment(db_session, image_file)
        updated = await service.update_tag(comment.id, "Resolved")
        assert updated.tag == "Resolved"

    async def test_update_tag_rejects_unknown(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        comment = await make_comment(db_session, image_file)
        with pytest.raises(CommentValidationError):
            await service.update_tag(comment.id, "Closed")

    async def test_update_tag_unknown_comment(self, service: CommentService) -> None:
        with pytest.raises(CommentNotFoundError):
            await service.update_tag(str(uuid.uuid4()), "Resolved")

    async def test_delete_orphans_replies(
        self, db_session: AsyncSession, service: CommentService, image_file
    ) -> None:
        root = await make_comment(db_session, image_file, created_at=at(0))
        reply = await make_comment(
            db_session, image_file, created_at=at(1), parent_id=root.id
        )

        assert await service.delete_comment(root.id) is True

        result = await service.get_threads(image_file.id)
        assert [node.id for node in result.threads] == [reply.id]
        assert result.total_comments == 1

    async def test_delete_is_idempotent(self, service: CommentService) -> None:
        assert await service.delete_comment(str(uuid.uuid4())) is False

    async def test_delete_malformed_id(self, service: CommentService) -> None:
        with pytest.raises(CommentValidationError):
            await service.delete_comment("42")
