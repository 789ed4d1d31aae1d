"""CommentRepository: the comment store.

Handles all database operations for Comment entities. Comments are read per
file or in batches of files (for project activity aggregation); parent_id is
stored verbatim and never followed here.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (comment_id, file_id) in all logs
- Log tag transitions at INFO level
- Add timing logs for slow operations
"""

import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import db_logger, get_logger
from proofpin.models.comment import Comment

logger = get_logger(__name__)


class CommentRepository:
    """Repository for Comment persistence."""

    TABLE_NAME = "comments"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _check_slow(self, query: str, start_time: float) -> float:
        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query=query, duration_ms=duration_ms, table=self.TABLE_NAME
            )
        return round(duration_ms, 2)

    async def create(
        self,
        file_id: str,
        name: str,
        content: str,
        tag: str,
        parent_id: str | None = None,
        email: str | None = None,
        position_x: int | None = None,
        position_y: int | None = None,
        timestamp: int | None = None,
        page: int | None = None,
        created_at: datetime | None = None,
    ) -> Comment:
        """Insert a comment.

        Args:
            file_id: Owning file
            name: Author name
            content: Comment body
            tag: Review status
            parent_id: Comment replied to, None for a root comment
            email: Optional author email
            position_x, position_y, timestamp, page: Anchor columns
            created_at: Explicit creation time (defaults to now)

        Returns:
            Created Comment instance

        Raises:
            SQLAlchemyError: On database errors
        """
        start_time = time.monotonic()
        logger.debug(
            "Creating comment",
            extra={"file_id": file_id, "parent_id": parent_id, "tag": tag},
        )

        values: dict[str, Any] = {
            "file_id": file_id,
            "parent_id": parent_id,
            "name": name,
            "email": email,
            "content": content,
            "tag": tag,
            "position_x": position_x,
            "position_y": position_y,
            "timestamp": timestamp,
            "page": page,
        }
        if created_at is not None:
            values["created_at"] = created_at
            values["updated_at"] = created_at

        try:
            comment = Comment(**values)
            self.session.add(comment)
            await self.session.flush()
            await self.session.refresh(comment)

            duration_ms = self._check_slow("INSERT INTO comments", start_time)
            logger.debug(
                "Comment created",
                extra={
                    "comment_id": comment.id,
                    "file_id": file_id,
                    "duration_ms": duration_ms,
                },
            )
            return comment

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Creating comment on file_id={file_id}",
            )
            raise

    async def get_by_id(self, comment_id: str) -> Comment | None:
        """Get a comment by ID, or None when absent."""
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(Comment).where(Comment.id == comment_id)
            )
            comment = result.scalar_one_or_none()

            duration_ms = self._check_slow(
                f"SELECT FROM comments WHERE id={comment_id}", start_time
            )
            logger.debug(
                "Comment fetch completed",
                extra={
                    "comment_id": comment_id,
                    "found": comment is not None,
                    "duration_ms": duration_ms,
                },
            )
            return comment

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch comment by ID",
                extra={
                    "comment_id": comment_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def list_by_file(
        self, file_id: str, descending: bool = False
    ) -> list[Comment]:
        """List every comment on a file ordered by creation time.

        Ties on created_at are broken by id so the order is stable.
        """
        start_time = time.monotonic()
        order = (
            (Comment.created_at.desc(), Comment.id.desc())
            if descending
            else (Comment.created_at.asc(), Comment.id.asc())
        )
        try:
            result = await self.session.execute(
                select(Comment).where(Comment.file_id == file_id).order_by(*order)
            )
            comments = list(result.scalars().all())

            duration_ms = self._check_slow(
                f"SELECT FROM comments WHERE file_id={file_id}", start_time
            )
            logger.debug(
                "Comments listed for file",
                extra={
                    "file_id": file_id,
                    "count": len(comments),
                    "descending": descending,
                    "duration_ms": duration_ms,
                },
            )
            return comments

        except SQLAlchemyError as e:
            logger.error(
                "Failed to list comments for file",
                extra={
                    "file_id": file_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def list_by_file_ids(self, file_ids: Sequence[str]) -> list[Comment]:
        """List the comments of several files in one query."""
        if not file_ids:
            return []

        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(Comment)
                .where(Comment.file_id.in_(list(file_ids)))
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            )
            comments = list(result.scalars().all())

            duration_ms = self._check_slow(
                "SELECT FROM comments WHERE file_id IN (...)", start_time
            )
            logger.debug(
                "Comments listed for files",
                extra={
                    "file_count": len(file_ids),
                    "count": len(comments),
                    "duration_ms": duration_ms,
                },
            )
            return comments

        except SQLAlchemyError as e:
            logger.error(
                "Failed to list comments for files",
                extra={
                    "file_count": len(file_ids),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def update_tag(self, comment: Comment, tag: str) -> Comment:
        """Move a comment to a new review status."""
        if comment.tag == tag:
            return comment

        logger.info(
            "Comment tag transition",
            extra={
                "comment_id": comment.id,
                "file_id": comment.file_id,
                "from_tag": comment.tag,
                "to_tag": tag,
            },
        )
        try:
            comment.tag = tag
            await self.session.flush()
            await self.session.refresh(comment)
            return comment

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Updating tag for comment_id={comment.id}",
            )
            raise

    async def delete(self, comment_id: str) -> bool:
        """Delete a single comment. Replies are left untouched.

        Returns:
            True if a row was deleted, False if the comment was already absent
        """
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                delete(Comment).where(Comment.id == comment_id)
            )
            deleted = bool(result.rowcount)

            duration_ms = self._check_slow(
                f"DELETE FROM comments WHERE id={comment_id}", start_time
            )
            logger.debug(
                "Comment delete completed",
                extra={
                    "comment_id": comment_id,
                    "deleted": deleted,
                    "duration_ms": duration_ms,
                },
            )
            return deleted

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting comment_id={comment_id}",
            )
            raise

    async def delete_by_file_ids(self, file_ids: Sequence[str]) -> int:
        """Delete every comment belonging to the given files."""
        if not file_ids:
            return 0

        try:
            result = await self.session.execute(
                delete(Comment).where(Comment.file_id.in_(list(file_ids)))
            )
            logger.debug(
                "Comments deleted for files",
                extra={"file_count": len(file_ids), "deleted": result.rowcount},
            )
            return result.rowcount or 0

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting comments for {len(file_ids)} files",
            )
            raise
