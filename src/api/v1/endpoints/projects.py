"""Endpoints for managing the caller's projects."""
from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_account, get_db_session
from src.db.models.account import Account
from src.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate, PublishUpdate
from src.services import projects as project_service
from src.services.engagement import count_likes
from src.services.limits import check_rate_limit, ensure_idempotent


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectRead])
async def list_projects(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    rows = await project_service.list_owned_projects(db, account.id)
    return [ProjectRead.from_row(project, likes) for project, likes in rows]


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    account: Account = Depends(get_current_account),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db_session),
):
    await check_rate_limit(account.id, scope="projects")
    await ensure_idempotent(account.id, idempotency_key)

    project = await project_service.create_project(db, account.id, body.model_dump())
    logger.info(f"Project {project.id} created by {account.id} with slug '{project.slug}'")
    return ProjectRead.from_row(project, 0)


@router.get("/{project_id}", response_model=ProjectRead)
async def read_project(
    project_id: UUID,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    project, likes = await project_service.get_owned_project(db, account.id, project_id)
    return ProjectRead.from_row(project, likes)


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: UUID,
    body: ProjectUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    project = await project_service.update_project(
        db, account.id, project_id, body.model_dump(exclude_unset=True)
    )
    return ProjectRead.from_row(project, await count_likes(db, project.id))


@router.put("/{project_id}/publish", response_model=ProjectRead)
async def publish_project(
    project_id: UUID,
    body: PublishUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    project = await project_service.set_published(
        db, account.id, project_id, body.published
    )
    return ProjectRead.from_row(project, await count_likes(db, project.id))
