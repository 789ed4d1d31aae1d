"""View-tracking ledger: when did a user last open a project.

record_view is an atomic upsert keyed on (user, project), so repeated or
concurrent marks leave exactly one row holding the latest call's time.
get_view returns None for a user who never viewed the project; that absence
is meaningful (every comment counts as unread) and is not an error.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import get_logger
from proofpin.models.project_view import ProjectView
from proofpin.repositories.project import ProjectRepository
from proofpin.repositories.project_view import ProjectViewRepository
from proofpin.services.project import ProjectNotFoundError, ProjectValidationError
from proofpin.services.project_stats_cache import (
    ProjectStatsCacheService,
    get_project_stats_cache,
)
from proofpin.utils.identifiers import is_valid_uuid
from proofpin.utils.timestamps import utc_now

logger = get_logger(__name__)


class ViewTrackingService:
    """Reads and writes the per-user project view ledger."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ProjectStatsCacheService | None = None,
    ) -> None:
        self.session = session
        self.repository = ProjectViewRepository(session)
        self.projects = ProjectRepository(session)
        self.cache = cache or get_project_stats_cache()

    async def record_view(
        self, user_id: str, project_id: str, viewed_at: datetime | None = None
    ) -> ProjectView:
        """Mark project_id as viewed by user_id.

        Args:
            user_id: Viewing user
            project_id: Viewed project
            viewed_at: Time to record, defaults to now

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        await self._ensure_project(project_id)
        view = await self.repository.upsert(
            user_id=user_id,
            project_id=project_id,
            viewed_at=viewed_at or utc_now(),
        )
        await self.session.commit()
        await self.cache.invalidate(user_id)

        logger.debug(
            "Project marked viewed",
            extra={
                "user_id": user_id,
                "project_id": project_id,
                "last_viewed_at": view.last_viewed_at.isoformat(),
            },
        )
        return view

    async def get_view(self, user_id: str, project_id: str) -> ProjectView | None:
        """Return the ledger entry, or None if the user never viewed the project.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        await self._ensure_project(project_id)
        return await self.repository.get(user_id, project_id)

    async def _ensure_project(self, project_id: str) -> None:
        if not is_valid_uuid(project_id):
            raise ProjectValidationError("project_id", project_id, "Invalid UUID format")
        if await self.projects.get_by_id(project_id) is None:
            raise ProjectNotFoundError(project_id)
