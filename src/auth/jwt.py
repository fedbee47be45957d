"""Simple JWT authentication helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import jwt
from fastapi import Header

from src.core.config import settings
from src.core.exceptions import Unauthorized


@dataclass(frozen=True)
class Identity:
    """The verified principal behind a request."""

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


def decode_token(token: str) -> Identity:
    """Verify ``token`` and map its claims onto an :class:`Identity`."""

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token") from exc

    uid = payload.get("sub") or payload.get("uid")
    if not uid:
        raise Unauthorized("Subject missing in token")

    return Identity(
        uid=str(uid),
        email=payload.get("email"),
        name=payload.get("name"),
        picture=payload.get("picture"),
        claims=payload,
    )


def _bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def require_auth(authorization: Optional[str] = Header(default=None)) -> Identity:
    """Validate a bearer token and return the caller's identity."""

    token = _bearer(authorization)
    if token is None:
        raise Unauthorized("Missing bearer token")
    return decode_token(token)

