"""Project model.

A project groups the media files a reviewer collects feedback on:
- Owning user (caller-supplied identity)
- Opaque public id used for unauthenticated sharing links
- Timestamps for auditing and listing order
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from proofpin.core.database import Base


class Project(Base):
    """Project owned by a single user.

    Attributes:
        id: UUID primary key
        public_id: Opaque share identifier, unrelated to id
        title: Display title
        user_id: Owning user
        created_at: Timestamp when project was created (listing order)
        updated_at: Timestamp when project was last updated
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    public_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        default=lambda: uuid4().hex,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        onupdate=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id!r}, title={self.title!r}, user_id={self.user_id!r})>"
