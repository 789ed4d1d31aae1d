"""Schemas layer - Pydantic models for API validation.

Schemas define the shape of data for API requests and responses.
They handle validation, serialization, and documentation.
"""

from proofpin.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentTagUpdate,
    CommentThreadResponse,
    FileThreadsResponse,
    PinResponse,
)
from proofpin.schemas.file import FileResponse, PublicFileResponse, PublicProjectRef
from proofpin.schemas.project import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
    ProjectViewResponse,
    ProjectWithStatsResponse,
)

__all__ = [
    "CommentCreate",
    "CommentResponse",
    "CommentTagUpdate",
    "CommentThreadResponse",
    "FileResponse",
    "FileThreadsResponse",
    "PinResponse",
    "ProjectCreate",
    "ProjectDetailResponse",
    "ProjectResponse",
    "ProjectUpdate",
    "ProjectViewResponse",
    "ProjectWithStatsResponse",
    "PublicFileResponse",
    "PublicProjectRef",
]
