"""Comment model for positioned, threaded feedback.

Comments form threads through parent_id, which is a weak reference: it is
not a foreign key, may point at a deleted row, and is never trusted to be
acyclic. Anchor columns are flat and nullable; which of them are meaningful
depends on the owning file's mime type.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from proofpin.core.database import Base


class CommentTag(str, Enum):
    """Review status of a comment."""

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


UNRESOLVED_TAGS = frozenset({CommentTag.TODO.value, CommentTag.IN_PROGRESS.value})


class Comment(Base):
    """Feedback comment on a file.

    Attributes:
        id: UUID primary key
        file_id: Foreign key to project_files table (cascade delete)
        parent_id: Id of the comment this replies to, None for a root comment
        name: Author display name
        email: Optional author email
        content: Comment body
        tag: Review status, one of CommentTag
        position_x: Horizontal position, percentage of width x 100 (image/PDF)
        position_y: Vertical position, percentage of height x 100 (image/PDF)
        timestamp: Seconds into the video (video)
        page: 1-based page number (PDF)
        created_at: Creation time, the ordering key for display and unread status
        updated_at: Timestamp of the last tag change
    """

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    file_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("project_files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    tag: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommentTag.TODO.value,
        server_default=text("'To Do'"),
        index=True,
    )

    position_x: Mapped[int | None] = mapped_column(Integer, nullable=True)
    position_y: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[int | None] = mapped_column(Integer, nullable=True)
    page: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        onupdate=lambda: datetime.now(UTC),
    )

    @property
    def is_unresolved(self) -> bool:
        return self.tag in UNRESOLVED_TAGS

    def __repr__(self) -> str:
        return f"<Comment(id={self.id!r}, file_id={self.file_id!r}, parent_id={self.parent_id!r}, tag={self.tag!r})>"
