"""Models layer - SQLAlchemy ORM models.

Models define the database schema.
All models inherit from the Base class defined in core.database.
"""

from proofpin.core.database import Base
from proofpin.models.comment import UNRESOLVED_TAGS, Comment, CommentTag
from proofpin.models.project import Project
from proofpin.models.project_file import ProjectFile
from proofpin.models.project_view import ProjectView

__all__ = [
    "Base",
    "Comment",
    "CommentTag",
    "Project",
    "ProjectFile",
    "ProjectView",
    "UNRESOLVED_TAGS",
]
