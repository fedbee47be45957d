"""Repository helpers for project comments."""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db.models.comment import Comment


class CommentRepo:
    """Data-access helpers for :class:`Comment`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, comment_id: UUID) -> Optional[Comment]:
        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(self, account_id: str, project_id: UUID, content: str) -> Comment:
        comment = Comment(account_id=account_id, project_id=project_id, content=content)
        self.session.add(comment)
        await self.session.flush()
        return comment

    async def delete(self, comment_id: UUID) -> int:
        result = await self.session.execute(
            delete(Comment)
            .where(Comment.id == comment_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    async def list_for_project(self, project_id: UUID) -> List[Comment]:
        result = await self.session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.project_id == project_id)
            .order_by(Comment.created_at.desc())
        )
        return list(result.scalars().all())
