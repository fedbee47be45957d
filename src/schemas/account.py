"""Pydantic schemas for Account resources"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.common import UTCDateTime


class CustomLink(BaseModel):
    """A free-form label/URL pair shown on the profile."""

    label: str = Field(..., max_length=100)
    url: str = Field(..., max_length=2048)


class ProfileUpdate(BaseModel):
    """Partial profile update; only fields present in the body are applied."""

    username: Optional[str] = Field(default=None, description="Public handle")
    name: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    badge_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    website_url: Optional[str] = None
    custom_links: Optional[List[CustomLink]] = None


class AccountSummary(BaseModel):
    """Author/owner card embedded in other resources."""

    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AccountRead(BaseModel):
    """Full account as seen by its owner."""

    id: str
    email: str
    name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    badge_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    website_url: Optional[str] = None
    custom_links: List[CustomLink] = Field(default_factory=list)
    created_at: Optional[UTCDateTime] = None

    model_config = ConfigDict(from_attributes=True)
