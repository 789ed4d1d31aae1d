"""ProjectService with validation logic.

Orchestrates business logic for Project entities between API layer and
repository: creation, lookup (by id or share id), renaming and deletion.

Deleting a project removes its files, their comments and every user's view
mark, then removes the stored blobs on a best-effort basis.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (project_id) in all service logs
- Log validation failures with field names and rejected values
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import get_logger
from proofpin.models.project import Project
from proofpin.models.project_file import ProjectFile
from proofpin.repositories.comment import CommentRepository
from proofpin.repositories.file import FileRepository
from proofpin.repositories.project import ProjectRepository
from proofpin.repositories.project_view import ProjectViewRepository
from proofpin.schemas.project import ProjectCreate, ProjectUpdate
from proofpin.services.project_stats_cache import (
    ProjectStatsCacheService,
    get_project_stats_cache,
)
from proofpin.services.storage import StorageError, StorageService
from proofpin.utils.identifiers import is_valid_uuid

logger = get_logger(__name__)


class ProjectServiceError(Exception):
    """Base exception for ProjectService errors."""

    pass


class ProjectNotFoundError(ProjectServiceError):
    """Raised when a project is not found."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ProjectValidationError(ProjectServiceError):
    """Raised when project validation fails."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Validation failed for '{field}': {message}")


class ProjectService:
    """Service for Project business logic and validation."""

    def __init__(
        self,
        session: AsyncSession,
        storage: StorageService | None = None,
        cache: ProjectStatsCacheService | None = None,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session
            storage: Blob storage, needed only for deleting projects
            cache: Project stats cache to invalidate on changes
        """
        self.session = session
        self.repository = ProjectRepository(session)
        self.files = FileRepository(session)
        self.storage = storage
        self.cache = cache or get_project_stats_cache()

    async def create_project(self, user_id: str, data: ProjectCreate) -> Project:
        """Create a project owned by user_id.

        Raises:
            ProjectValidationError: If the title is blank
        """
        title = self._validate_title(data.title)
        project = await self.repository.create(title=title, user_id=user_id)
        await self.session.commit()
        await self.cache.invalidate(user_id)

        logger.info(
            "Project created",
            extra={"project_id": project.id, "user_id": user_id},
        )
        return project

    async def get_project(self, project_id: str) -> Project:
        """Get a project by ID.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectValidationError: If project_id is not a UUID
        """
        self._validate_uuid(project_id, "project_id")
        project = await self.repository.get_by_id(project_id)
        if project is None:
            logger.debug("Project not found", extra={"project_id": project_id})
            raise ProjectNotFoundError(project_id)
        return project

    async def get_project_or_none(self, project_id: str) -> Project | None:
        if not is_valid_uuid(project_id):
            return None
        return await self.repository.get_by_id(project_id)

    async def get_project_with_files(
        self, project_id: str
    ) -> tuple[Project, list[ProjectFile]]:
        """Get a project and its files (most recent upload first)."""
        project = await self.get_project(project_id)
        files = await self.files.list_by_project(project.id)
        return project, files

    async def get_public_project(
        self, public_id: str
    ) -> tuple[Project, list[ProjectFile]]:
        """Resolve a shared project link.

        Raises:
            ProjectNotFoundError: If no project has this public id
        """
        project = await self.repository.get_by_public_id(public_id)
        if project is None:
            logger.debug(
                "Public project not found", extra={"public_id": public_id[:64]}
            )
            raise ProjectNotFoundError(public_id)
        files = await self.files.list_by_project(project.id)
        return project, files

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        """Rename a project.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectValidationError: If the title is blank
        """
        title = self._validate_title(data.title)
        project = await self.get_project(project_id)
        project = await self.repository.update_title(project, title)
        await self.session.commit()
        await self.cache.invalidate(project.user_id)
        return project

    async def delete_project(self, project_id: str) -> None:
        """Delete a project with its files, comments and view marks.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        project = await self.get_project(project_id)
        files = await self.files.list_by_project(project.id)
        file_ids = [f.id for f in files]

        removed_comments = await CommentRepository(self.session).delete_by_file_ids(
            file_ids
        )
        await self.files.delete_by_project(project.id)
        await ProjectViewRepository(self.session).delete_by_project(project.id)
        await self.repository.delete(project.id)
        await self.session.commit()

        logger.info(
            "Project deleted with contents",
            extra={
                "project_id": project.id,
                "file_count": len(file_ids),
                "comment_count": removed_comments,
            },
        )

        await self._remove_blobs(files)
        await self.cache.invalidate(project.user_id)

    async def _remove_blobs(self, files: list[ProjectFile]) -> None:
        if self.storage is None or not files:
            return
        for project_file in files:
            try:
                await self.storage.delete(project_file.object_path)
            except StorageError as e:
                logger.warning(
                    "Failed to remove blob for deleted project file",
                    extra={
                        "file_id": project_file.id,
                        "object_path": project_file.object_path,
                        "error": str(e),
                    },
                )

    def _validate_title(self, title: str) -> str:
        cleaned = title.strip() if isinstance(title, str) else ""
        if not cleaned:
            logger.warning(
                "Validation failed: blank project title",
                extra={"field": "title"},
            )
            raise ProjectValidationError("title", title, "Title is required")
        return cleaned

    def _validate_uuid(self, value: str, field: str) -> None:
        if not is_valid_uuid(value):
            logger.warning(
                "Validation failed: invalid UUID format",
                extra={"field": field, "value": str(value)[:64]},
            )
            raise ProjectValidationError(field, value, "Invalid UUID format")
