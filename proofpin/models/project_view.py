"""ProjectView model: the per-user "last viewed" ledger.

One row per (user_id, project_id), enforced by a unique constraint so the
ledger upsert can rely on ON CONFLICT.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from proofpin.core.database import Base


class ProjectView(Base):
    """When a user last opened a project.

    Attributes:
        id: UUID primary key
        user_id: Viewing user
        project_id: Foreign key to projects table (cascade delete)
        last_viewed_at: Time of the most recent view
    """

    __tablename__ = "project_views"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "project_id", name="uq_project_views_user_project"
        ),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    project_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    last_viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    def __repr__(self) -> str:
        return f"<ProjectView(user_id={self.user_id!r}, project_id={self.project_id!r}, last_viewed_at={self.last_viewed_at!r})>"
