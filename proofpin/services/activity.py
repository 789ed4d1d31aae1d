"""Project activity aggregation: comment counts and unread status.

For each of a user's projects the listing reports how many files and
comments it has, how many comments are still open ("To Do" or "In
Progress"), when the newest comment was made, and whether anything was
posted after the user last viewed the project. A project the user never
viewed counts every comment as unread.

The aggregation is read-only and best-effort: files, comments and view
marks are fetched in separate queries, and a malformed comment only loses
its own contribution instead of failing the listing.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with full stack trace and context
- Include entity IDs (user_id, project_id) in all service logs
- Add timing logs for operations >1 second
"""

import time
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import get_logger
from proofpin.models.comment import UNRESOLVED_TAGS, Comment
from proofpin.models.project import Project
from proofpin.repositories.comment import CommentRepository
from proofpin.repositories.file import FileRepository
from proofpin.repositories.project import ProjectRepository
from proofpin.repositories.project_view import ProjectViewRepository
from proofpin.schemas.project import ProjectResponse, ProjectWithStatsResponse
from proofpin.services.project_stats_cache import (
    ProjectStatsCacheService,
    get_project_stats_cache,
)
from proofpin.utils.timestamps import EPOCH, as_utc

logger = get_logger(__name__)

SLOW_OPERATION_THRESHOLD_MS = 1000


@dataclass(frozen=True)
class ProjectActivity:
    """Comment activity of one project as seen by one user."""

    file_count: int = 0
    total_comments: int = 0
    unresolved_comments: int = 0
    last_comment_time: datetime | None = None
    has_unread_comments: bool = False


def summarize_activity(
    comments: Iterable[Comment],
    last_viewed_at: datetime | None,
    file_count: int = 0,
) -> ProjectActivity:
    """Aggregate the comments of one project.

    Args:
        comments: Every comment on every file of the project
        last_viewed_at: The user's last view of the project, None if never
        file_count: Number of files in the project

    Returns:
        ProjectActivity; a comment is unread when created strictly after
        last_viewed_at (the epoch when the project was never viewed)
    """
    threshold = as_utc(last_viewed_at) if last_viewed_at is not None else EPOCH

    total = 0
    unresolved = 0
    latest: datetime | None = None
    has_unread = False

    for comment in comments:
        total += 1
        if comment.tag in UNRESOLVED_TAGS:
            unresolved += 1

        created_at = comment.created_at
        if not isinstance(created_at, datetime):
            logger.warning(
                "Comment without a usable created_at, skipping its timing",
                extra={"comment_id": getattr(comment, "id", None)},
            )
            continue

        created_at = as_utc(created_at)
        if latest is None or created_at > latest:
            latest = created_at
        if created_at > threshold:
            has_unread = True

    return ProjectActivity(
        file_count=file_count,
        total_comments=total,
        unresolved_comments=unresolved,
        last_comment_time=latest,
        has_unread_comments=has_unread,
    )


class ActivityService:
    """Builds the per-user project listing with activity stats."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ProjectStatsCacheService | None = None,
    ) -> None:
        self.session = session
        self.projects = ProjectRepository(session)
        self.files = FileRepository(session)
        self.comments = CommentRepository(session)
        self.views = ProjectViewRepository(session)
        self.cache = cache or get_project_stats_cache()

    async def list_projects_with_stats(
        self, user_id: str
    ) -> list[ProjectWithStatsResponse]:
        """List the user's projects, newest first, each with its activity.

        Args:
            user_id: The requesting user; owns the projects and the view marks

        Returns:
            One ProjectWithStatsResponse per project
        """
        start_time = time.monotonic()
        logger.debug("Listing projects with stats", extra={"user_id": user_id})

        cached = await self.cache.get(user_id)
        if cached is not None:
            return cached

        projects = await self.projects.list_by_user(user_id)
        listing = await self.summarize_projects(user_id, projects)
        await self.cache.set(user_id, listing)

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.debug(
            "Projects with stats listed",
            extra={
                "user_id": user_id,
                "project_count": len(listing),
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow project stats aggregation",
                extra={
                    "user_id": user_id,
                    "project_count": len(listing),
                    "duration_ms": round(duration_ms, 2),
                },
            )
        return listing

    async def summarize_projects(
        self, user_id: str, projects: list[Project]
    ) -> list[ProjectWithStatsResponse]:
        """Attach activity stats to already loaded projects, keeping their order."""
        project_ids = [project.id for project in projects]

        files = await self.files.list_by_project_ids(project_ids)
        file_to_project = {f.id: f.project_id for f in files}
        file_counts: dict[str, int] = defaultdict(int)
        for f in files:
            file_counts[f.project_id] += 1

        comments_by_project: dict[str, list[Comment]] = defaultdict(list)
        for comment in await self.comments.list_by_file_ids(list(file_to_project)):
            project_id = file_to_project.get(comment.file_id)
            if project_id is not None:
                comments_by_project[project_id].append(comment)

        last_viewed = {
            view.project_id: view.last_viewed_at
            for view in await self.views.list_for_user(user_id, project_ids)
        }

        listing: list[ProjectWithStatsResponse] = []
        for project in projects:
            activity = summarize_activity(
                comments_by_project.get(project.id, []),
                last_viewed.get(project.id),
                file_count=file_counts.get(project.id, 0),
            )
            listing.append(
                ProjectWithStatsResponse(
                    **ProjectResponse.model_validate(project).model_dump(),
                    **asdict(activity),
                )
            )
        return listing
