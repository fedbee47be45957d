"""Repository helpers for project likes."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import Conflict
from src.db.models.like import Like


class LikeRepo:
    """Data-access helpers for :class:`Like`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: str, project_id: UUID) -> Optional[Like]:
        result = await self.session.execute(
            select(Like).where(
                Like.account_id == account_id,
                Like.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, account_id: str, project_id: UUID) -> Like:
        like = Like(account_id=account_id, project_id=project_id)
        self.session.add(like)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise Conflict("Project already liked") from exc
        return like

    async def delete(self, account_id: str, project_id: UUID) -> int:
        result = await self.session.execute(
            delete(Like)
            .where(
                Like.account_id == account_id,
                Like.project_id == project_id,
            )
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
