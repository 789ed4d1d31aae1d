"""Repositories layer - Data access and persistence.

Repositories handle all database operations using SQLAlchemy.
They abstract the database implementation from the service layer.
"""

from proofpin.repositories.comment import CommentRepository
from proofpin.repositories.file import FileRepository
from proofpin.repositories.project import ProjectRepository
from proofpin.repositories.project_view import ProjectViewRepository

__all__ = [
    "CommentRepository",
    "FileRepository",
    "ProjectRepository",
    "ProjectViewRepository",
]
