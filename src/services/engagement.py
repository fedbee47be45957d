"""Likes, views and comments on projects.

Each operation is one unit of work against the store. Unique constraints are
the source of truth for likes: the existence check only picks the branch, and
a duplicate insert from a concurrent toggle by the same account is treated as
"already liked".
"""
from __future__ import annotations

from typing import List, NamedTuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from src.db.models.comment import Comment
from src.db.session import commit_or_conflict
from src.repositories.comment_repo import CommentRepo
from src.repositories.like_repo import LikeRepo
from src.repositories.project_repo import ProjectRepo


class LikeResult(NamedTuple):
    liked: bool
    like_count: int


async def _require_project(session: AsyncSession, project_id: UUID) -> ProjectRepo:
    repo = ProjectRepo(session)
    if not await repo.exists(project_id):
        raise NotFound("Project not found")
    return repo


async def toggle_like(session: AsyncSession, account_id: str, project_id: UUID) -> LikeResult:
    """Flip the caller's like on a project. Two calls cancel each other out."""

    projects = await _require_project(session, project_id)
    likes = LikeRepo(session)

    if await likes.get(account_id, project_id) is not None:
        # a concurrent unlike may already have removed the row
        await likes.delete(account_id, project_id)
        await session.commit()
        liked = False
    else:
        try:
            await likes.create(account_id, project_id)
            await commit_or_conflict(session)
        except Conflict:
            await session.rollback()
        liked = True

    return LikeResult(liked=liked, like_count=await projects.like_count(project_id))


async def count_likes(session: AsyncSession, project_id: UUID) -> int:
    return await ProjectRepo(session).like_count(project_id)


async def like_status(session: AsyncSession, account_id: str, project_id: UUID) -> LikeResult:
    projects = await _require_project(session, project_id)
    liked = await LikeRepo(session).get(account_id, project_id) is not None
    return LikeResult(liked=liked, like_count=await projects.like_count(project_id))


async def increment_views(session: AsyncSession, project_id: UUID) -> None:
    """Count one view. Every call counts; there is no per-visitor dedup."""

    touched = await ProjectRepo(session).increment_views(project_id)
    if touched == 0:
        await session.rollback()
        raise NotFound("Project not found")
    await session.commit()


def _clean_content(content: str | None) -> str:
    value = (content or "").strip()
    if not value:
        raise ValidationError("Comment cannot be empty")
    limit = settings.engagement.comment_max_length
    if len(value) > limit:
        raise ValidationError(f"Comment must be at most {limit} characters")
    return value


async def add_comment(
    session: AsyncSession, account_id: str, project_id: UUID, content: str
) -> Comment:
    body = _clean_content(content)
    await _require_project(session, project_id)
    repo = CommentRepo(session)
    comment = await repo.create(account_id, project_id, body)
    await session.commit()
    return await repo.get(comment.id)


async def delete_comment(session: AsyncSession, account_id: str, comment_id: UUID) -> None:
    repo = CommentRepo(session)
    comment = await repo.get(comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    if comment.account_id != account_id:
        raise Forbidden("Only the author can delete this comment")
    await repo.delete(comment_id)
    await session.commit()


async def list_comments(session: AsyncSession, project_id: UUID) -> List[Comment]:
    """All comments on a project, newest first."""

    await _require_project(session, project_id)
    return await CommentRepo(session).list_for_project(project_id)
