"""Endpoints for the caller's own account."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_account, get_db_session
from src.db.models.account import Account
from src.schemas.account import AccountRead, ProfileUpdate
from src.services.accounts import update_profile


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=AccountRead)
async def read_me(account: Account = Depends(get_current_account)):
    return account


@router.put("/me", response_model=AccountRead)
async def update_me(
    body: ProfileUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
):
    return await update_profile(db, account.id, body.model_dump(exclude_unset=True))
