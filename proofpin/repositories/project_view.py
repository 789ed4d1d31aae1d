"""ProjectViewRepository: storage for the per-user "last viewed" ledger.

The write path is a single INSERT ... ON CONFLICT (user_id, project_id)
DO UPDATE statement, so concurrent marks for the same pair can never create
two rows.
"""

import time
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.core.logging import db_logger, get_logger
from proofpin.models.project_view import ProjectView

logger = get_logger(__name__)


class ProjectViewRepository:
    """Repository for ProjectView rows."""

    TABLE_NAME = "project_views"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _insert(self) -> Any:
        """Dialect-specific INSERT supporting ON CONFLICT."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite_insert(ProjectView)
        return pg_insert(ProjectView)

    async def upsert(
        self, user_id: str, project_id: str, viewed_at: datetime
    ) -> ProjectView:
        """Set last_viewed_at for (user_id, project_id), creating the row if needed.

        Args:
            user_id: Viewing user
            project_id: Viewed project
            viewed_at: Time to record

        Returns:
            The single ProjectView row for the pair, as stored
        """
        start_time = time.monotonic()

        stmt = self._insert().values(
            id=str(uuid4()),
            user_id=user_id,
            project_id=project_id,
            last_viewed_at=viewed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "project_id"],
            set_={"last_viewed_at": stmt.excluded.last_viewed_at},
        )

        try:
            await self.session.execute(stmt)
            result = await self.session.execute(
                select(ProjectView)
                .where(
                    ProjectView.user_id == user_id,
                    ProjectView.project_id == project_id,
                )
                .execution_options(populate_existing=True)
            )
            view = result.scalar_one()

            duration_ms = (time.monotonic() - start_time) * 1000
            logger.debug(
                "Project view recorded",
                extra={
                    "user_id": user_id,
                    "project_id": project_id,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
                db_logger.slow_query(
                    query="INSERT INTO project_views ON CONFLICT DO UPDATE",
                    duration_ms=duration_ms,
                    table=self.TABLE_NAME,
                )
            return view

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Upserting view user_id={user_id} project_id={project_id}",
            )
            raise

    async def get(self, user_id: str, project_id: str) -> ProjectView | None:
        """Return the ledger row for the pair, or None if the user never viewed it."""
        try:
            result = await self.session.execute(
                select(ProjectView)
                .where(
                    ProjectView.user_id == user_id,
                    ProjectView.project_id == project_id,
                )
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch project view",
                extra={
                    "user_id": user_id,
                    "project_id": project_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def list_for_user(
        self, user_id: str, project_ids: Sequence[str]
    ) -> list[ProjectView]:
        """Return the user's ledger rows for the given projects."""
        if not project_ids:
            return []

        try:
            result = await self.session.execute(
                select(ProjectView).where(
                    ProjectView.user_id == user_id,
                    ProjectView.project_id.in_(list(project_ids)),
                )
            )
            return list(result.scalars().all())

        except SQLAlchemyError as e:
            logger.error(
                "Failed to list project views",
                extra={
                    "user_id": user_id,
                    "project_count": len(project_ids),
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise

    async def count(self, user_id: str, project_id: str) -> int:
        """Number of rows stored for the pair (0 or 1)."""
        result = await self.session.execute(
            select(func.count())
            .select_from(ProjectView)
            .where(
                ProjectView.user_id == user_id,
                ProjectView.project_id == project_id,
            )
        )
        return int(result.scalar_one())

    async def delete_by_project(self, project_id: str) -> int:
        """Remove every user's ledger row for a project."""
        try:
            result = await self.session.execute(
                delete(ProjectView).where(ProjectView.project_id == project_id)
            )
            return result.rowcount or 0

        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Deleting views for project_id={project_id}",
            )
            raise
