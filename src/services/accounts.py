"""Account lifecycle: lazy creation, username backfill and profile updates."""
from __future__ import annotations

import re
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.jwt import Identity
from src.core.config import settings
from src.core.exceptions import Conflict, NotFound, ValidationError
from src.db.models.account import Account
from src.db.session import commit_or_conflict
from src.repositories.account_repo import AccountRepo
from src.services.identifiers import allocate, normalize, resolve_unique_username

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_NULLABLE_LINKS = ("github_url", "linkedin_url", "twitter_url", "website_url")


def username_base(name: str | None, email: str | None) -> str:
    """Pick the text a generated username is derived from."""

    source = name or (email.split("@")[0] if email else "")
    return normalize(source)[: settings.identifiers.username_max_length]


async def get_or_create_account(session: AsyncSession, identity: Identity) -> Account:
    """Return the caller's account, creating it on first access.

    Idempotent: concurrent first requests for the same identity race on the
    primary key and the loser returns the winner's row.
    """

    repo = AccountRepo(session)
    account = await repo.get(identity.uid)
    if account is None:
        return await _create_account(session, identity)
    if account.username is None:
        return await ensure_username(session, account.id)
    return account


async def _create_account(session: AsyncSession, identity: Identity) -> Account:
    repo = AccountRepo(session)
    base = username_base(identity.name, identity.email)

    async def resolve() -> str:
        return await resolve_unique_username(base, repo.username_exists)

    async def commit(username: str) -> Account:
        try:
            account = await repo.create(
                id=identity.uid,
                email=identity.email or "",
                name=identity.name or (identity.email or "").split("@")[0] or None,
                avatar_url=identity.picture,
                username=username,
                custom_links=[],
            )
            await commit_or_conflict(session)
        except Conflict:
            await session.rollback()
            existing = await repo.get(identity.uid)
            if existing is not None:
                return existing
            raise
        return account

    return await allocate(resolve, commit)


async def ensure_username(session: AsyncSession, account_id: str) -> Account:
    """Backfill a missing username using the allocator."""

    repo = AccountRepo(session)
    account = await repo.get(account_id)
    if account is None:
        raise NotFound("Account not found")
    if account.username:
        return account
    base = username_base(account.name, account.email)

    async def resolve() -> str:
        return await resolve_unique_username(base, repo.username_exists)

    async def commit(username: str) -> Account:
        target = await repo.get(account_id)
        if target is None:
            raise NotFound("Account not found")
        if target.username:
            return target
        try:
            target = await repo.update(target, username=username)
            await commit_or_conflict(session)
        except Conflict:
            await session.rollback()
            raise
        return target

    return await allocate(resolve, commit)


def validate_username(username: str) -> str:
    limits = settings.identifiers
    value = username.strip()
    if len(value) < limits.username_min_length:
        raise ValidationError(
            f"Username must be at least {limits.username_min_length} characters"
        )
    if len(value) > limits.username_max_length:
        raise ValidationError(
            f"Username must be at most {limits.username_max_length} characters"
        )
    if not _USERNAME_RE.match(value):
        raise ValidationError(
            "Username may only contain letters, digits, hyphens and underscores"
        )
    return value


async def update_profile(
    session: AsyncSession, account_id: str, changes: Dict[str, Any]
) -> Account:
    """Apply a partial profile update and return the updated account.

    ``changes`` holds only the fields the caller sent.
    """

    repo = AccountRepo(session)
    account = await repo.get(account_id)
    if account is None:
        raise NotFound("Account not found")

    fields: Dict[str, Any] = {}
    if "username" in changes:
        if changes["username"] is None:
            raise ValidationError("Username cannot be cleared")
        username = validate_username(changes["username"])
        if await repo.username_exists(username, exclude_id=account_id):
            raise ValidationError("Username taken")
        fields["username"] = username
    for key in ("name", "bio", "avatar_url", "badge_url"):
        if key in changes:
            fields[key] = changes[key]
    for key in _NULLABLE_LINKS:
        if key in changes:
            fields[key] = changes[key] or None
    if "custom_links" in changes:
        links = changes["custom_links"] or []
        fields["custom_links"] = [
            {"label": link["label"], "url": link["url"]}
            for link in links[: settings.profiles.max_custom_links]
        ]

    if not fields:
        return account
    try:
        account = await repo.update(account, **fields)
        await commit_or_conflict(session)
    except Conflict as exc:
        await session.rollback()
        raise ValidationError("Username taken") from exc
    return account
