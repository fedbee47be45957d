"""Pydantic schemas for Project resources"""
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.account import AccountRead, AccountSummary
from src.schemas.common import UTCDateTime


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    title: str = Field(..., min_length=1, max_length=255, description="Project title")
    description: Optional[str] = Field(default=None, description="Markdown description")
    image_url: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    live_url: Optional[str] = None
    repo_url: Optional[str] = None
    published: bool = False


class ProjectUpdate(BaseModel):
    """Partial update; omitted fields are left untouched."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    tech_stack: Optional[List[str]] = None
    live_url: Optional[str] = None
    repo_url: Optional[str] = None


class PublishUpdate(BaseModel):
    published: bool


class ProjectRead(BaseModel):
    """Schema returned when reading a project."""

    id: UUID = Field(..., description="Project identifier")
    owner_id: str = Field(..., description="Owning account identifier")
    title: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    live_url: Optional[str] = None
    repo_url: Optional[str] = None
    published: bool = False
    views: int = 0
    like_count: int = 0
    created_at: Optional[UTCDateTime] = Field(
        default=None, description="Creation timestamp"
    )

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, project, like_count: int):
        """Build from an ORM project plus its separately counted likes."""

        return cls.model_validate(project).model_copy(update={"like_count": like_count})


class PublicProjectRead(ProjectRead):
    owner: AccountSummary


class PublicProfileRead(AccountRead):
    """A profile as rendered on the public page; email is withheld."""

    email: Optional[str] = Field(default=None, exclude=True)
    projects: List[ProjectRead] = Field(default_factory=list)
