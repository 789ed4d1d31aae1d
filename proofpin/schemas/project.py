"""Pydantic schemas for Project validation.

Defines request/response models for Project API endpoints, including the
per-project activity summary used by the project list.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from proofpin.schemas.file import FileResponse


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""

    title: str = Field(..., min_length=1, max_length=255, description="Project title")


class ProjectUpdate(BaseModel):
    """Schema for renaming a project."""

    title: str = Field(..., min_length=1, max_length=255, description="New title")


class ProjectResponse(BaseModel):
    """Schema for project responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Project UUID")
    public_id: str = Field(..., description="Share identifier")
    title: str = Field(..., description="Project title")
    user_id: str = Field(..., description="Owning user")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")


class ProjectWithStatsResponse(ProjectResponse):
    """Project plus comment activity relative to the requesting user."""

    file_count: int = Field(0, description="Number of files in the project")
    total_comments: int = Field(0, description="Comments across all files")
    unresolved_comments: int = Field(
        0, description="Comments tagged 'To Do' or 'In Progress'"
    )
    last_comment_time: datetime | None = Field(
        None, description="Creation time of the newest comment"
    )
    has_unread_comments: bool = Field(
        False,
        description="Whether any comment is newer than the user's last view",
    )


class ProjectDetailResponse(ProjectResponse):
    """Project with its files, most recent upload first."""

    files: list[FileResponse] = Field(default_factory=list)


class ProjectViewResponse(BaseModel):
    """The requesting user's view-ledger entry for a project."""

    project_id: str
    user_id: str
    last_viewed_at: datetime | None = Field(
        None, description="Null when the user has never viewed the project"
    )
