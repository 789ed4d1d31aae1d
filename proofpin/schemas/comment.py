"""Pydantic schemas for comments, threads and pins.

Request schemas only check types; content rules (blank text, tag values,
anchor fields per file type) are enforced by CommentService so failures
carry the offending field name.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from proofpin.models.comment import CommentTag
from proofpin.services.anchors import AnchorFamily


class CommentCreate(BaseModel):
    """Schema for submitting a comment or a reply."""

    parent_id: str | None = Field(None, description="Comment being replied to")
    name: str = Field(..., max_length=255, description="Author name")
    email: str | None = Field(None, max_length=255, description="Author email")
    content: str = Field(..., max_length=10000, description="Comment text")
    tag: str = Field(CommentTag.TODO.value, description="Initial review status")
    position_x: int | None = Field(
        None, description="Horizontal position, percent x 100 (image/PDF)"
    )
    position_y: int | None = Field(
        None, description="Vertical position, percent x 100 (image/PDF)"
    )
    timestamp: int | None = Field(None, description="Video time in seconds")
    page: int | None = Field(None, description="PDF page number (1-based)")


class CommentTagUpdate(BaseModel):
    """Schema for a review status change."""

    tag: str = Field(..., description="One of 'To Do', 'In Progress', 'Resolved'")


class CommentResponse(BaseModel):
    """Schema for a single comment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    file_id: str
    parent_id: str | None = None
    name: str
    email: str | None = None
    content: str
    tag: str
    position_x: int | None = None
    position_y: int | None = None
    timestamp: int | None = None
    page: int | None = None
    created_at: datetime
    updated_at: datetime


class CommentThreadResponse(CommentResponse):
    """A comment with its nested replies."""

    pin_number: int | None = Field(
        None, description="Pin number when this comment is drawn on the media"
    )
    reply_count: int = Field(0, description="Replies at any depth")
    depth: int = Field(
        0, description="Levels of nested replies below this comment, 0 without replies"
    )
    replies: list["CommentThreadResponse"] = Field(default_factory=list)


class PinResponse(BaseModel):
    """A numbered marker on the media surface."""

    number: int
    comment_id: str
    position_x: int | None = None
    position_y: int | None = None
    timestamp: int | None = None
    page: int | None = None


class FileThreadsResponse(BaseModel):
    """Threaded comments of a file plus the pins to overlay on it."""

    file_id: str
    anchor_family: AnchorFamily
    page: int | None = Field(
        None, description="PDF page the pins were filtered to, if any"
    )
    total_comments: int
    threads: list[CommentThreadResponse]
    pins: list[PinResponse]
