"""Shared FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.jwt import Identity, require_auth
from src.db.models.account import Account
from src.db.session import get_db
from src.services.accounts import get_or_create_account


async def get_db_session(session: AsyncSession = Depends(get_db)) -> AsyncSession:
    return session


async def get_current_account(
    identity: Identity = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    """Resolve the caller's account, creating it on first authenticated access."""

    return await get_or_create_account(db, identity)
