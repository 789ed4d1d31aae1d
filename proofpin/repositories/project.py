"""ProjectRepository with CRUD operations.

Handles all database operations for Project entities.
Follows the layered architecture pattern: API -> Service -> Repository -> Database.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (project_id) in all logs
- Add timing logs for slow operations
"""

import time

from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import db_logger, get_logger
from proofpin.models.project import Project

logger = get_logger(__name__)


class ProjectRepository:
    """Repository for Project CRUD operations."""

    TABLE_NAME = "projects"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session for database operations
        """
        self.session = session

    def _check_slow(self, query: str, start_time: float) -> float:
        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query=query, duration_ms=duration_ms, table=self.TABLE_NAME
            )
        return round(duration_ms, 2)

    async def create(self, title: str, user_id: str) -> Project:
        """Create a new project.

        Args:
            title: Project title
            user_id: Owning user

        Returns:
            Created Project instance

        Raises:
            SQLAlchemyError: On database errors
        """
        start_time = time.monotonic()
        logger.debug(
            "Creating project",
            extra={"title": title[:100], "user_id": user_id},
        )

        try:
            project = Project(title=title, user_id=user_id)
            self.session.add(project)
            await self.session.flush()
            await self.session.refresh(project)

            duration_ms = self._check_slow("INSERT INTO projects", start_time)
            logger.debug(
                "Project created successfully",
                extra={
                    "project_id": project.id,
                    "user_id": user_id,
                    "duration_ms": duration_ms,
                },
            )
            return project

        except IntegrityError as e:
            logger.error(
                "Failed to create project - integrity error",
                extra={
                    "user_id": user_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Creating project for user_id={user_id}",
            )
            raise

    async def get_by_id(self, project_id: str) -> Project | None:
        """Get a project by ID.

        Returns:
            Project instance if found, None otherwise
        """
        return await self._get_one(Project.id == project_id, project_id=project_id)

    async def get_by_public_id(self, public_id: str) -> Project | None:
        """Get a project by its share identifier."""
        return await self._get_one(Project.public_id == public_id, public_id=public_id)

    async def _get_one(
        self, clause: ColumnElement[bool], **log_context: str
    ) -> Project | None:
        start_time = time.monotonic()
        try:
            result = await self.session.execute(select(Project).where(clause))
            project = result.scalar_one_or_none()

            duration_ms = self._check_slow(
                f"SELECT FROM projects WHERE {log_context}", start_time
            )
            logger.debug(
                "Project fetch completed",
                extra={
                    **log_context,
                    "found": project is not None,
                    "duration_ms": duration_ms,
                },
            )
            return project

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch project",
                extra={
                    **log_context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def list_by_user(self, user_id: str) -> list[Project]:
        """List a user's projects, newest first."""
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(Project)
                .where(Project.user_id == user_id)
                .order_by(Project.created_at.desc(), Project.id.desc())
            )
            projects = list(result.scalars().all())

            duration_ms = self._check_slow(
                f"SELECT FROM projects WHERE user_id={user_id}", start_time
            )
            logger.debug(
                "Projects listed for user",
                extra={
                    "user_id": user_id,
                    "count": len(projects),
                    "duration_ms": duration_ms,
                },
            )
            return projects

        except SQLAlchemyError as e:
            logger.error(
                "Failed to list projects",
                extra={
                    "user_id": user_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def update_title(self, project: Project, title: str) -> Project:
        """Rename a project. updated_at is bumped by the column's onupdate."""
        logger.debug(
            "Updating project title",
            extra={"project_id": project.id, "title": title[:100]},
        )
        try:
            project.title = title
            await self.session.flush()
            await self.session.refresh(project)
            return project

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Updating project_id={project.id}",
            )
            raise

    async def delete(self, project_id: str) -> bool:
        """Delete a project row.

        Returns:
            True if a row was deleted, False if the project did not exist
        """
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                delete(Project).where(Project.id == project_id)
            )
            deleted = bool(result.rowcount)

            duration_ms = self._check_slow(
                f"DELETE FROM projects WHERE id={project_id}", start_time
            )
            if deleted:
                logger.info(
                    "Project deleted",
                    extra={"project_id": project_id, "duration_ms": duration_ms},
                )
            return deleted

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting project_id={project_id}",
            )
            raise
