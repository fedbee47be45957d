"""Pydantic schemas for likes, views and comments"""
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.account import AccountSummary
from src.schemas.common import UTCDateTime


class LikeState(BaseModel):
    liked: bool
    like_count: int = Field(..., ge=0)


class CommentCreate(BaseModel):
    content: str = Field(..., description="Comment body")


class CommentRead(BaseModel):
    id: UUID
    content: str
    project_id: UUID
    account_id: str
    created_at: UTCDateTime
    author: AccountSummary

    model_config = ConfigDict(from_attributes=True)
