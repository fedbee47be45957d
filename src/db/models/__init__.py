"""Database models package exports."""

from src.db.models.account import Account
from src.db.models.comment import Comment
from src.db.models.like import Like
from src.db.models.project import Project

__all__ = [
    "Account",
    "Comment",
    "Like",
    "Project",
]
