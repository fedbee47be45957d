"""Repository utilities for Account records."""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import Conflict
from src.db.models.account import Account


class AccountRepo:
    """Data-access helpers for :class:`Account`."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account_id: str) -> Optional[Account]:
        result = await self.session.execute(
            select(Account).where(Account.id == account_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[Account]:
        result = await self.session.execute(
            select(Account).where(Account.username == username)
        )
        return result.scalar_one_or_none()

    async def username_exists(
        self, username: str, exclude_id: Optional[str] = None
    ) -> bool:
        query = select(Account.id).where(Account.username == username)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        result = await self.session.execute(select(exists(query)))
        return bool(result.scalar())

    async def create(self, **fields: Any) -> Account:
        account = Account(**fields)
        self.session.add(account)
        await self._flush()
        return account

    async def update(self, account: Account, **fields: Any) -> Account:
        for key, value in fields.items():
            setattr(account, key, value)
        self.session.add(account)
        await self._flush()
        await self.session.refresh(account)
        return account

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise Conflict("Account violates a unique constraint") from exc
