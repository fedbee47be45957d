"""Repository utilities for working with Project records."""
from typing import Any, List, Optional, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.exceptions import Conflict
from src.db.models.account import Account
from src.db.models.like import Like
from src.db.models.project import Project


def _like_count_column():
    return (
        select(func.count(Like.id))
        .where(Like.project_id == Project.id)
        .correlate(Project)
        .scalar_subquery()
        .label("like_count")
    )


class ProjectRepo:
    """Simple data-access helper for Project entities."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, project_id: UUID) -> Optional[Project]:
        result = await self.session.execute(
            select(Project).where(Project.id == project_id)
        )
        return result.scalar_one_or_none()

    async def exists(self, project_id: UUID) -> bool:
        result = await self.session.execute(
            select(Project.id).where(Project.id == project_id)
        )
        return result.scalar_one_or_none() is not None

    async def slugs_for_owner(
        self, owner_id: str, exclude_id: Optional[UUID] = None
    ) -> Set[str]:
        query = select(Project.slug).where(Project.owner_id == owner_id)
        if exclude_id is not None:
            query = query.where(Project.id != exclude_id)
        result = await self.session.execute(query)
        return set(result.scalars().all())

    async def create(self, owner_id: str, slug: str, **fields: Any) -> Project:
        project = Project(owner_id=owner_id, slug=slug, **fields)
        self.session.add(project)
        await self._flush()
        return project

    async def update(self, project: Project, **fields: Any) -> Project:
        for key, value in fields.items():
            setattr(project, key, value)
        self.session.add(project)
        await self._flush()
        await self.session.refresh(project)
        return project

    async def increment_views(self, project_id: UUID) -> int:
        """Atomically bump the counter; returns the number of rows touched."""

        result = await self.session.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(views=Project.views + 1)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    async def like_count(self, project_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Like).where(Like.project_id == project_id)
        )
        return int(result.scalar_one() or 0)

    async def list_for_owner(self, owner_id: str) -> List[Tuple[Project, int]]:
        result = await self.session.execute(
            select(Project, _like_count_column())
            .where(Project.owner_id == owner_id)
            .order_by(Project.created_at.desc())
        )
        return [(row[0], int(row[1] or 0)) for row in result.all()]

    async def list_published_for_owner(self, owner_id: str) -> List[Tuple[Project, int]]:
        result = await self.session.execute(
            select(Project, _like_count_column())
            .where(Project.owner_id == owner_id, Project.published.is_(True))
            .order_by(Project.created_at.desc())
        )
        return [(row[0], int(row[1] or 0)) for row in result.all()]

    async def get_published(
        self, username: str, slug: str
    ) -> Optional[Tuple[Project, int]]:
        result = await self.session.execute(
            select(Project, _like_count_column())
            .join(Account, Account.id == Project.owner_id)
            .options(selectinload(Project.owner))
            .execution_options(populate_existing=True)
            .where(
                Account.username == username,
                Project.slug == slug,
                Project.published.is_(True),
            )
        )
        row = result.first()
        if row is None:
            return None
        return row[0], int(row[1] or 0)

    async def list_popular(self, limit: int = 10) -> Sequence[Tuple[Project, int]]:
        result = await self.session.execute(
            select(Project, _like_count_column())
            .options(selectinload(Project.owner))
            .execution_options(populate_existing=True)
            .where(Project.published.is_(True))
            .order_by(Project.views.desc(), Project.created_at.desc())
            .limit(limit)
        )
        return [(row[0], int(row[1] or 0)) for row in result.all()]

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise Conflict("Project slug already taken for this owner") from exc
