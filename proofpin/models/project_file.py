"""ProjectFile model for uploaded media.

The mime type decides which anchor family comments on the file use
(see proofpin.services.anchors). The bytes themselves live in the blob
store; object_path is the opaque reference into it.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from proofpin.core.database import Base


class ProjectFile(Base):
    """Uploaded media file belonging to a project.

    Attributes:
        id: UUID primary key
        project_id: Foreign key to projects table (cascade delete)
        name: Sanitized storage name
        original_name: Filename as uploaded
        mime_type: MIME type of the file (e.g., 'image/png')
        size: Size of the file in bytes
        object_path: Blob store key
        public_id: Opaque share identifier for direct file links
        uploaded_at: Timestamp when the file was uploaded
    """

    __tablename__ = "project_files"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    project_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    mime_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    object_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
    )

    public_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        default=lambda: uuid4().hex,
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    def __repr__(self) -> str:
        return f"<ProjectFile(id={self.id!r}, name={self.name!r}, project_id={self.project_id!r})>"
