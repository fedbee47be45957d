"""Slug and username allocation.

Two identifier spaces are handled here:

* project slugs, unique per owner. The owner's slug set is small enough to
  fetch wholesale, so collisions are resolved in memory with a deterministic
  ``-1``, ``-2`` ... suffix.
* usernames, unique across all accounts. The set cannot be enumerated
  cheaply, so each candidate is probed with an async existence check and
  extended with a random lowercase letter on collision.

Both are check-then-act: the store's unique constraint is the final arbiter.
:func:`allocate` wraps a resolve/commit pair so a commit-time ``Conflict``
causes exactly one more resolution pass.
"""
from __future__ import annotations

import random
import re
import string
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from src.core.config import settings
from src.core.exceptions import AllocationExhausted, AppError, Conflict, LookupFailed

T = TypeVar("T")

_DISALLOWED = re.compile(r"[^a-z0-9_\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")
_EDGE_HYPHENS = re.compile(r"^-+|-+$")

ExistsCheck = Callable[[str], Awaitable[bool]]


def normalize(text: Optional[str]) -> str:
    """Derive a URL-safe candidate from free text. Non-ASCII letters are dropped.

    >>> normalize("Hello, World!  Foo_Bar")
    'hello-world-foo-bar'
    """

    if not text:
        return ""
    value = text.lower().strip()
    value = _DISALLOWED.sub("", value)
    value = _SEPARATORS.sub("-", value)
    return _EDGE_HYPHENS.sub("", value)


def resolve_unique_slug(
    base: str, existing_slugs: Iterable[str], fallback: Optional[str] = None
) -> str:
    """Return ``base`` or the first free ``base-N`` (N = 1, 2, ...)."""

    taken = set(existing_slugs)
    if not base:
        base = fallback if fallback is not None else settings.identifiers.slug_fallback
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug


async def resolve_unique_username(
    base: str,
    check_exists: ExistsCheck,
    *,
    max_attempts: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Probe ``check_exists`` until a free username is found.

    Raises :class:`LookupFailed` when the check itself fails and
    :class:`AllocationExhausted` after ``max_attempts`` taken candidates.
    """

    limits = settings.identifiers
    attempts = max_attempts if max_attempts is not None else limits.username_max_attempts
    choice = (rng or random).choice

    username = base[: limits.username_max_length]
    if not username or len(username) < limits.username_min_length:
        username = limits.username_fallback

    # candidates never grow past username_max_length
    keep = limits.username_max_length - 1
    for _ in range(attempts):
        try:
            taken = await check_exists(username)
        except AppError:
            raise
        except Exception as exc:
            raise LookupFailed(f"Username lookup failed: {exc}") from exc
        if not taken:
            return username
        username = f"{username[:keep]}{choice(string.ascii_lowercase)}"

    raise AllocationExhausted(
        f"No free username derived from '{base}' after {attempts} attempts"
    )


async def allocate(
    resolve: Callable[[], Awaitable[str]],
    commit: Callable[[str], Awaitable[T]],
    *,
    on_conflict: Optional[Callable[[], Awaitable[None]]] = None,
) -> T:
    """Resolve a candidate and commit it, retrying once on a commit race.

    ``on_conflict`` runs between attempts, typically to roll back the failed
    unit of work.
    """

    candidate = await resolve()
    try:
        return await commit(candidate)
    except Conflict:
        if on_conflict is not None:
            await on_conflict()

    candidate = await resolve()
    try:
        return await commit(candidate)
    except Conflict as exc:
        if on_conflict is not None:
            await on_conflict()
        raise AllocationExhausted(
            f"Identifier '{candidate}' was taken concurrently twice"
        ) from exc
