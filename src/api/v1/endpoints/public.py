"""Anonymous read endpoints backing the public profile and project pages."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_db_session
from src.core.config import settings
from src.schemas.account import AccountRead
from src.schemas.project import ProjectRead, PublicProfileRead, PublicProjectRead
from src.services import projects as project_service


router = APIRouter(prefix="/public", tags=["public"])


@router.get("/profiles/{username}", response_model=PublicProfileRead)
async def read_profile(username: str, db: AsyncSession = Depends(get_db_session)):
    account, rows = await project_service.get_public_profile(db, username)
    profile = AccountRead.model_validate(account).model_dump()
    return PublicProfileRead(
        **profile,
        projects=[ProjectRead.from_row(project, likes) for project, likes in rows],
    )


@router.get("/projects/popular", response_model=List[PublicProjectRead])
async def popular_projects(db: AsyncSession = Depends(get_db_session)):
    rows = await project_service.list_popular_projects(
        db, limit=settings.engagement.popular_limit
    )
    return [PublicProjectRead.from_row(project, likes) for project, likes in rows]


@router.get("/projects/{username}/{slug}", response_model=PublicProjectRead)
async def read_project(
    username: str, slug: str, db: AsyncSession = Depends(get_db_session)
):
    project, likes = await project_service.get_public_project(db, username, slug)
    return PublicProjectRead.from_row(project, likes)
