"""Endpoints for likes, views and comments."""
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_account, get_db_session
from src.db.models.account import Account
from src.schemas.engagement import CommentCreate, CommentRead, LikeState
from src.services import engagement as engagement_service
from src.services.limits import check_rate_limit


router = APIRouter(tags=["engagement"])


@router.post("/projects/{project_id}/like", response_model=LikeState)
async def toggle_like(
    project_id: UUID,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    result = await engagement_service.toggle_like(db, account.id, project_id)
    return LikeState(liked=result.liked, like_count=result.like_count)


@router.get("/projects/{project_id}/like-status", response_model=LikeState)
async def like_status(
    project_id: UUID,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    result = await engagement_service.like_status(db, account.id, project_id)
    return LikeState(liked=result.liked, like_count=result.like_count)


@router.post("/projects/{project_id}/view")
async def record_view(project_id: UUID, db: AsyncSession = Depends(get_db_session)):
    await engagement_service.increment_views(db, project_id)
    return {"success": True}


@router.get("/projects/{project_id}/comments", response_model=List[CommentRead])
async def list_comments(project_id: UUID, db: AsyncSession = Depends(get_db_session)):
    return await engagement_service.list_comments(db, project_id)


@router.post(
    "/projects/{project_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    project_id: UUID,
    body: CommentCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    await check_rate_limit(account.id, scope="comments")
    return await engagement_service.add_comment(db, account.id, project_id, body.content)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: UUID,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    await engagement_service.delete_comment(db, account.id, comment_id)
    return {"success": True}
