"""FileRepository for ProjectFile metadata.

Only metadata lives here; the bytes are in the blob store.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (file_id, project_id) in all logs
"""

import time
from collections.abc import Sequence

from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import db_logger, get_logger
from proofpin.models.project_file import ProjectFile

logger = get_logger(__name__)


class FileRepository:
    """Repository for ProjectFile persistence."""

    TABLE_NAME = "project_files"
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
        project_id: str,
        name: str,
        original_name: str,
        mime_type: str,
        size: int,
        object_path: str,
    ) -> ProjectFile:
        """Insert file metadata under a pre-generated id.

        The id is chosen by the caller because it is part of the blob path,
        which is written before the row.
        """
        start_time = time.monotonic()
        logger.debug(
            "Creating file record",
            extra={
                "file_id": file_id,
                "project_id": project_id,
                "mime_type": mime_type,
                "size": size,
            },
        )

        try:
            project_file = ProjectFile(
                id=file_id,
                project_id=project_id,
                name=name,
                original_name=original_name,
                mime_type=mime_type,
                size=size,
                object_path=object_path,
            )
            self.session.add(project_file)
            await self.session.flush()
            await self.session.refresh(project_file)

            duration_ms = self._check_slow("INSERT INTO project_files", start_time)
            logger.debug(
                "File record created",
                extra={
                    "file_id": file_id,
                    "project_id": project_id,
                    "duration_ms": duration_ms,
                },
            )
            return project_file

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Creating file for project_id={project_id}",
            )
            raise

    async def get_by_id(self, file_id: str) -> ProjectFile | None:
        return await self._get_one(ProjectFile.id == file_id, file_id=file_id)

    async def get_by_public_id(self, public_id: str) -> ProjectFile | None:
        return await self._get_one(
            ProjectFile.public_id == public_id, public_id=public_id
        )

    async def _get_one(
        self, clause: ColumnElement[bool], **log_context: str
    ) -> ProjectFile | None:
        start_time = time.monotonic()
        try:
            result = await self.session.execute(select(ProjectFile).where(clause))
            project_file = result.scalar_one_or_none()

            duration_ms = self._check_slow(
                f"SELECT FROM project_files WHERE {log_context}", start_time
            )
            logger.debug(
                "File fetch completed",
                extra={
                    **log_context,
                    "found": project_file is not None,
                    "duration_ms": duration_ms,
                },
            )
            return project_file

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch file",
                extra={
                    **log_context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def list_by_project(self, project_id: str) -> list[ProjectFile]:
        """List a project's files, most recent upload first."""
        return await self.list_by_project_ids([project_id])

    async def list_by_project_ids(
        self, project_ids: Sequence[str]
    ) -> list[ProjectFile]:
        """List the files of several projects, most recent upload first."""
        if not project_ids:
            return []

        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(ProjectFile)
                .where(ProjectFile.project_id.in_(list(project_ids)))
                .order_by(ProjectFile.uploaded_at.desc(), ProjectFile.id.desc())
            )
            files = list(result.scalars().all())

            duration_ms = self._check_slow(
                "SELECT FROM project_files WHERE project_id IN (...)", start_time
            )
            logger.debug(
                "Files listed",
                extra={
                    "project_count": len(project_ids),
                    "count": len(files),
                    "duration_ms": duration_ms,
                },
            )
            return files

        except SQLAlchemyError as e:
            logger.error(
                "Failed to list files",
                extra={
                    "project_count": len(project_ids),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def delete(self, file_id: str) -> bool:
        """Delete a file row. Returns False if it was already absent."""
        try:
            result = await self.session.execute(
                delete(ProjectFile).where(ProjectFile.id == file_id)
            )
            deleted = bool(result.rowcount)
            logger.debug(
                "File delete completed",
                extra={"file_id": file_id, "deleted": deleted},
            )
            return deleted

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting file_id={file_id}",
            )
            raise

    async def delete_by_project(self, project_id: str) -> int:
        """Delete every file row of a project."""
        try:
            result = await self.session.execute(
                delete(ProjectFile).where(ProjectFile.project_id == project_id)
            )
            return result.rowcount or 0

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting files for project_id={project_id}",
            )
            raise
