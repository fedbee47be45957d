"""Async engine and session management."""
from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
)

from src.core.config import settings
from src.core.exceptions import Conflict


def build_engine(database_uri: str | None = None, echo: bool | None = None) -> AsyncEngine:
    uri = database_uri or settings.DATABASE_URI
    connect_args = {}
    if uri.startswith("sqlite"):
        # concurrent writers wait on the file lock instead of failing fast
        connect_args["timeout"] = 30
    return create_async_engine(
        uri,
        echo=settings.DATABASE_ECHO if echo is None else echo,
        pool_pre_ping=not uri.startswith("sqlite"),
        connect_args=connect_args,
    )


engine = build_engine()
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session per request; uncommitted work is rolled back."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def commit_or_conflict(session: AsyncSession) -> None:
    """Commit the unit of work, translating constraint violations."""

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict("Unique constraint violated on commit") from exc
