"""Repository layer package."""

from src.repositories.account_repo import AccountRepo
from src.repositories.comment_repo import CommentRepo
from src.repositories.like_repo import LikeRepo
from src.repositories.project_repo import ProjectRepo

__all__ = [
    "AccountRepo",
    "CommentRepo",
    "LikeRepo",
    "ProjectRepo",
]
