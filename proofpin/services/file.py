"""File service for managing project media uploads.

Coordinates blob storage and file metadata:
- Upload: bytes go to the blob store first, then the row is written
- Read: metadata by id or share id, bytes by object path
- Delete: comments, row, then the blob (best-effort)

Every file type is accepted; the mime type only decides how comments on
the file are anchored.
"""

import mimetypes
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import get_logger
from proofpin.models.project import Project
from proofpin.models.project_file import ProjectFile
from proofpin.repositories.comment import CommentRepository
from proofpin.repositories.file import FileRepository
from proofpin.repositories.project import ProjectRepository
from proofpin.services.project import ProjectNotFoundError
from proofpin.services.project_stats_cache import (
    ProjectStatsCacheService,
    get_project_stats_cache,
)
from proofpin.services.storage import (
    FileTooLargeError,
    ObjectNotFoundError,
    StorageError,
    StorageService,
)
from proofpin.utils.identifiers import is_valid_uuid
from proofpin.utils.sanitize import sanitize_filename

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class FileServiceError(Exception):
    """Base exception for FileService errors."""

    pass


class ProjectFileNotFoundError(FileServiceError):
    """Raised when a file is not found."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"File not found: {file_id}")


class FileValidationError(FileServiceError):
    """Raised when an upload or file reference is invalid."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Validation failed for '{field}': {message}")


class FileService:
    """Service class for ProjectFile operations."""

    def __init__(
        self,
        session: AsyncSession,
        storage: StorageService,
        cache: ProjectStatsCacheService | None = None,
    ) -> None:
        self.session = session
        self.storage = storage
        self.repository = FileRepository(session)
        self.projects = ProjectRepository(session)
        self.cache = cache or get_project_stats_cache()

    async def upload_file(
        self,
        project_id: str,
        filename: str | None,
        content_type: str | None,
        content: bytes,
    ) -> ProjectFile:
        """Store an uploaded file in a project.

        Args:
            project_id: Target project
            filename: Name supplied by the client
            content_type: MIME type supplied by the client (guessed from the
                name when missing)
            content: File bytes

        Returns:
            Created ProjectFile

        Raises:
            ProjectNotFoundError: If the project does not exist
            FileValidationError: If the file is empty or too large
            StorageError: If the blob store fails
        """
        project = await self._get_project(project_id)

        if not content:
            raise FileValidationError("file", 0, "File is empty")

        original_name = (filename or "").strip() or "file"
        name = sanitize_filename(original_name)
        mime_type = (
            (content_type or "").strip()
            or mimetypes.guess_type(name)[0]
            or DEFAULT_MIME_TYPE
        )

        file_id = str(uuid4())
        object_path = self.storage.build_object_path(project.id, file_id, name)

        try:
            stored = await self.storage.upload(object_path, content, mime_type)
        except FileTooLargeError as e:
            raise FileValidationError("file", e.size, str(e)) from e

        try:
            project_file = await self.repository.create(
                file_id=file_id,
                project_id=project.id,
                name=name,
                original_name=original_name[:255],
                mime_type=mime_type,
                size=stored.size_bytes,
                object_path=stored.object_path,
            )
            await self.session.commit()
        except SQLAlchemyError:
            await self._remove_blob(object_path, file_id)
            raise

        logger.info(
            "File uploaded",
            extra={
                "file_id": file_id,
                "project_id": project.id,
                "mime_type": mime_type,
                "size_bytes": stored.size_bytes,
                "checksum": stored.checksum,
            },
        )
        await self.cache.invalidate(project.user_id)
        return project_file

    async def list_files(self, project_id: str) -> list[ProjectFile]:
        """List a project's files, most recent upload first."""
        project = await self._get_project(project_id)
        return await self.repository.list_by_project(project.id)

    async def get_file(self, file_id: str) -> ProjectFile:
        """Get a file by ID.

        Raises:
            ProjectFileNotFoundError: If the file does not exist
            FileValidationError: If file_id is not a UUID
        """
        if not is_valid_uuid(file_id):
            raise FileValidationError("file_id", file_id, "Invalid UUID format")
        project_file = await self.repository.get_by_id(file_id)
        if project_file is None:
            raise ProjectFileNotFoundError(file_id)
        return project_file

    async def get_public_file(self, public_id: str) -> tuple[ProjectFile, Project]:
        """Resolve a shared file link to the file and its project."""
        project_file = await self.repository.get_by_public_id(public_id)
        if project_file is None:
            raise ProjectFileNotFoundError(public_id)
        project = await self.projects.get_by_id(project_file.project_id)
        if project is None:
            # File row outlived its project
            raise ProjectFileNotFoundError(public_id)
        return project_file, project

    async def read_content(self, file_id: str) -> tuple[ProjectFile, bytes]:
        """Return a file's metadata and bytes.

        Raises:
            ProjectFileNotFoundError: If the row or the blob is missing
        """
        project_file = await self.get_file(file_id)
        try:
            content = await self.storage.download(project_file.object_path)
        except ObjectNotFoundError as e:
            logger.error(
                "Blob missing for file",
                extra={"file_id": file_id, "object_path": project_file.object_path},
            )
            raise ProjectFileNotFoundError(file_id) from e
        return project_file, content

    async def delete_file(self, file_id: str) -> None:
        """Delete a file with its comments, then its blob.

        Raises:
            ProjectFileNotFoundError: If the file does not exist
        """
        project_file = await self.get_file(file_id)
        removed = await CommentRepository(self.session).delete_by_file_ids(
            [project_file.id]
        )
        await self.repository.delete(project_file.id)
        await self.session.commit()
        logger.info(
            "File deleted",
            extra={
                "file_id": project_file.id,
                "project_id": project_file.project_id,
                "comment_count": removed,
            },
        )

        await self._remove_blob(project_file.object_path, project_file.id)

        project = await self.projects.get_by_id(project_file.project_id)
        if project is not None:
            await self.cache.invalidate(project.user_id)

    async def _get_project(self, project_id: str) -> Project:
        if not is_valid_uuid(project_id):
            raise FileValidationError("project_id", project_id, "Invalid UUID format")
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _remove_blob(self, object_path: str, file_id: str) -> None:
        try:
            await self.storage.delete(object_path)
        except StorageError as e:
            logger.warning(
                "Failed to remove blob",
                extra={
                    "file_id": file_id,
                    "object_path": object_path,
                    "error": str(e),
                },
            )
