"""CommentService with validation logic.

Orchestrates business logic for comments between API layer and repository:
flat and threaded listings, pin derivation, submission, status changes and
deletion.

Deleting a comment leaves its replies in place. Their parent_id then points
at nothing and the tree builder shows them as roots, so no content is lost.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (file_id, comment_id) in all service logs
- Log validation failures with field names and rejected values
- Log state transitions (tag changes) at INFO level
"""

import time
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import get_logger
from proofpin.models.comment import Comment, CommentTag
from proofpin.models.project_file import ProjectFile
from proofpin.repositories.comment import CommentRepository
from proofpin.repositories.file import FileRepository
from proofpin.repositories.project import ProjectRepository
from proofpin.schemas.comment import CommentCreate
from proofpin.services.anchors import (
    AnchorFamily,
    AnchorValidationError,
    anchor_family_for_mime,
    validate_anchor_fields,
)
from proofpin.services.comment_tree import (
    CommentNode,
    build_comment_tree,
    find_thread_root,
)
from proofpin.services.file import FileValidationError, ProjectFileNotFoundError
from proofpin.services.pins import Pin, derive_pins, pin_numbers, pins_on_page
from proofpin.services.project_stats_cache import (
    ProjectStatsCacheService,
    get_project_stats_cache,
)
from proofpin.utils.identifiers import is_valid_uuid

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000
VALID_TAGS = frozenset(tag.value for tag in CommentTag)


class CommentServiceError(Exception):
    """Base exception for CommentService errors."""

    pass


class CommentNotFoundError(CommentServiceError):
    """Raised when a comment is not found."""

    def __init__(self, comment_id: str):
        self.comment_id = comment_id
        super().__init__(f"Comment not found: {comment_id}")


class CommentValidationError(CommentServiceError):
    """Raised when comment validation fails."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Validation failed for '{field}': {message}")


@dataclass
class FileThreads:
    """Threaded view of one file's comments."""

    file: ProjectFile
    family: AnchorFamily
    threads: list[CommentNode]
    pins: list[Pin]
    total_comments: int
    page: int | None = None

    @property
    def visible_pins(self) -> list[Pin]:
        """Pins to draw: all of them, or only those on the selected PDF page."""
        if self.page is None:
            return self.pins
        return pins_on_page(self.pins, self.page)

    @property
    def pin_numbers(self) -> dict[str, int]:
        return pin_numbers(self.pins)


@dataclass
class CommentThread:
    """The root thread containing a given comment."""

    root: CommentNode
    pin_numbers: dict[str, int]


class CommentService:
    """Service for comment business logic and validation."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ProjectStatsCacheService | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session
            cache: Project stats cache to invalidate when comments change
        """
        self.session = session
        self.repository = CommentRepository(session)
        self.files = FileRepository(session)
        self.projects = ProjectRepository(session)
        self.cache = cache or get_project_stats_cache()

    async def list_comments(
        self, file_id: str, descending: bool = False
    ) -> list[Comment]:
        """Flat list of a file's comments ordered by creation time.

        Raises:
            ProjectFileNotFoundError: If the file does not exist
        """
        project_file = await self._get_file(file_id)
        return await self.repository.list_by_file(project_file.id, descending)

    async def get_threads(self, file_id: str, page: int | None = None) -> FileThreads:
        """Build the reply forest and pins of a file.

        Args:
            file_id: File to read
            page: For PDFs, restrict visible pins to this page. Pin numbers
                are always assigned across the whole file.

        Raises:
            ProjectFileNotFoundError: If the file does not exist
            CommentValidationError: If page is not a positive integer
        """
        start_time = time.monotonic()
        if page is not None and page < 1:
            raise CommentValidationError("page", page, "Must be >= 1")

        project_file = await self._get_file(file_id)
        comments = await self.repository.list_by_file(project_file.id)
        family = anchor_family_for_mime(project_file.mime_type)

        threads = FileThreads(
            file=project_file,
            family=family,
            threads=build_comment_tree(comments),
            pins=derive_pins(comments, family),
            total_comments=len(comments),
            page=page,
        )

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            "Comment threads built",
            extra={
                "file_id": project_file.id,
                "comment_count": len(comments),
                "root_count": len(threads.threads),
                "pin_count": len(threads.pins),
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow comment thread build",
                extra={"file_id": project_file.id, "duration_ms": round(duration_ms, 2)},
            )
        return threads

    async def get_thread(self, comment_id: str) -> CommentThread:
        """Return the whole thread (from its root) that contains comment_id.

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        comment = await self.get_comment(comment_id)
        project_file = await self.files.get_by_id(comment.file_id)
        family = (
            anchor_family_for_mime(project_file.mime_type)
            if project_file is not None
            else AnchorFamily.NONE
        )

        comments = await self.repository.list_by_file(comment.file_id)
        root = find_thread_root(build_comment_tree(comments), comment.id)
        if root is None:
            raise CommentNotFoundError(comment_id)
        return CommentThread(
            root=root, pin_numbers=pin_numbers(derive_pins(comments, family))
        )

    async def get_comment(self, comment_id: str) -> Comment:
        """Get a comment by ID.

        Raises:
            CommentNotFoundError: If the comment does not exist
            CommentValidationError: If comment_id is not a UUID
        """
        self._validate_uuid(comment_id, "comment_id")
        comment = await self.repository.get_by_id(comment_id)
        if comment is None:
            logger.debug("Comment not found", extra={"comment_id": comment_id})
            raise CommentNotFoundError(comment_id)
        return comment

    async def create_comment(self, file_id: str, data: CommentCreate) -> Comment:
        """Submit a comment or reply on a file.

        Raises:
            ProjectFileNotFoundError: If the file does not exist
            CommentValidationError: If a field is invalid for this file
        """
        project_file = await self._get_file(file_id)

        name = self._require_text("name", data.name)
        content = self._require_text("content", data.content)
        email = (data.email or "").strip() or None
        tag = self._validate_tag(data.tag)
        parent_id = await self._validate_parent(project_file.id, data.parent_id)

        family = anchor_family_for_mime(project_file.mime_type)
        try:
            validate_anchor_fields(
                family,
                position_x=data.position_x,
                position_y=data.position_y,
                timestamp=data.timestamp,
                page=data.page,
            )
        except AnchorValidationError as e:
            logger.warning(
                "Validation failed: anchor fields",
                extra={
                    "file_id": project_file.id,
                    "anchor_family": family.value,
                    "field": e.field,
                    "value": e.value,
                },
            )
            raise CommentValidationError(e.field, e.value, e.message) from e

        comment = await self.repository.create(
            file_id=project_file.id,
            parent_id=parent_id,
            name=name,
            email=email,
            content=content,
            tag=tag,
            position_x=data.position_x,
            position_y=data.position_y,
            timestamp=data.timestamp,
            page=data.page,
        )
        logger.info(
            "Comment created",
            extra={
                "comment_id": comment.id,
                "file_id": project_file.id,
                "parent_id": parent_id,
                "anchor_family": family.value,
            },
        )
        await self._commit_and_invalidate(project_file.project_id)
        return comment

    async def update_tag(self, comment_id: str, tag: str) -> Comment:
        """Change a comment's review status.

        Raises:
            CommentNotFoundError: If the comment does not exist
            CommentValidationError: If tag is not a known status
        """
        tag = self._validate_tag(tag)
        comment = await self.get_comment(comment_id)
        comment = await self.repository.update_tag(comment, tag)
        await self._commit_and_invalidate_for_file(comment.file_id)
        return comment

    async def delete_comment(self, comment_id: str) -> bool:
        """Delete a comment; replies are kept and become roots.

        Returns:
            True if deleted, False if the comment was already absent
        """
        self._validate_uuid(comment_id, "comment_id")
        comment = await self.repository.get_by_id(comment_id)
        if comment is None:
            logger.debug(
                "Comment already absent, nothing to delete",
                extra={"comment_id": comment_id},
            )
            return False

        file_id = comment.file_id
        deleted = await self.repository.delete(comment_id)
        if deleted:
            logger.info(
                "Comment deleted",
                extra={"comment_id": comment_id, "file_id": file_id},
            )
            await self._commit_and_invalidate_for_file(file_id)
        return deleted

    async def _get_file(self, file_id: str) -> ProjectFile:
        if not is_valid_uuid(file_id):
            raise FileValidationError("file_id", file_id, "Invalid UUID format")
        project_file = await self.files.get_by_id(file_id)
        if project_file is None:
            raise ProjectFileNotFoundError(file_id)
        return project_file

    async def _validate_parent(self, file_id: str, parent_id: str | None) -> str | None:
        parent_id = (parent_id or "").strip() or None
        if parent_id is None:
            return None

        parent = (
            await self.repository.get_by_id(parent_id)
            if is_valid_uuid(parent_id)
            else None
        )
        if parent is None or parent.file_id != file_id:
            logger.warning(
                "Validation failed: parent comment not on this file",
                extra={"file_id": file_id, "parent_id": parent_id},
            )
            raise CommentValidationError(
                "parent_id", parent_id, "Parent comment not found on this file"
            )
        return parent.id

    def _require_text(self, field: str, value: str | None) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            logger.warning(
                "Validation failed: blank required field",
                extra={"field": field},
            )
            raise CommentValidationError(field, value, f"{field} is required")
        return cleaned

    def _validate_tag(self, tag: str | None) -> str:
        if tag not in VALID_TAGS:
            logger.warning(
                "Validation failed: unknown tag",
                extra={"field": "tag", "value": tag},
            )
            raise CommentValidationError(
                "tag", tag, f"Must be one of: {', '.join(sorted(VALID_TAGS))}"
            )
        return tag

    def _validate_uuid(self, value: str, field: str) -> None:
        if not is_valid_uuid(value):
            logger.warning(
                "Validation failed: invalid UUID format",
                extra={"field": field, "value": str(value)[:64]},
            )
            raise CommentValidationError(field, value, "Invalid UUID format")

    async def _commit_and_invalidate_for_file(self, file_id: str) -> None:
        project_file = await self.files.get_by_id(file_id)
        if project_file is None:
            await self.session.commit()
            return
        await self._commit_and_invalidate(project_file.project_id)

    async def _commit_and_invalidate(self, project_id: str) -> None:
        """Commit the write, then drop the owner's cached project listing.

        The cache is cleared only once the change is visible to other
        sessions.
        """
        project = await self.projects.get_by_id(project_id)
        await self.session.commit()
        if project is not None:
            await self.cache.invalidate(project.user_id)
