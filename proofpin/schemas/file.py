"""Pydantic schemas for uploaded files."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from proofpin.services.anchors import AnchorFamily, anchor_family_for_mime


class FileResponse(BaseModel):
    """Schema for file metadata in responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="File UUID")
    project_id: str = Field(..., description="Owning project UUID")
    name: str = Field(..., description="Stored filename")
    original_name: str = Field(..., description="Filename as uploaded")
    mime_type: str = Field(..., description="MIME type")
    size: int = Field(..., description="Size in bytes")
    public_id: str | None = Field(None, description="Share identifier")
    uploaded_at: datetime = Field(..., description="Upload time")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def anchor_family(self) -> AnchorFamily:
        """How comments on this file are positioned."""
        return anchor_family_for_mime(self.mime_type)


class PublicProjectRef(BaseModel):
    """Minimal project data exposed alongside a publicly shared file."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    public_id: str
    title: str


class PublicFileResponse(BaseModel):
    """Schema for a file resolved through its public id."""

    file: FileResponse
    project: PublicProjectRef
