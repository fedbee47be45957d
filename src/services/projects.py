"""Project lifecycle: owner CRUD with slug allocation, plus public reads."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from src.db.models.account import Account
from src.db.models.project import Project
from src.db.session import commit_or_conflict
from src.repositories.account_repo import AccountRepo
from src.repositories.project_repo import ProjectRepo
from src.services.identifiers import allocate, normalize, resolve_unique_slug

ProjectWithLikes = Tuple[Project, int]

_EDITABLE = ("description", "image_url", "live_url", "repo_url")


def _clean_title(title: str | None) -> str:
    value = (title or "").strip()
    if not value:
        raise ValidationError("Title is required")
    return value


async def _get_owned(repo: ProjectRepo, owner_id: str, project_id: UUID) -> Project:
    project = await repo.get_by_id(project_id)
    if project is None:
        raise NotFound("Project not found")
    if project.owner_id != owner_id:
        raise Forbidden("Only the owner can modify this project")
    return project


async def create_project(
    session: AsyncSession, owner_id: str, data: Dict[str, Any]
) -> Project:
    """Create a project with a slug unique among the owner's projects."""

    repo = ProjectRepo(session)
    title = _clean_title(data.get("title"))
    base = normalize(title)
    fields = {
        "title": title,
        "description": data.get("description"),
        "image_url": data.get("image_url"),
        "tech_stack": list(data.get("tech_stack") or []),
        "live_url": data.get("live_url"),
        "repo_url": data.get("repo_url"),
        "published": bool(data.get("published", False)),
    }

    async def resolve() -> str:
        return resolve_unique_slug(base, await repo.slugs_for_owner(owner_id))

    async def commit(slug: str) -> Project:
        try:
            project = await repo.create(owner_id, slug, **fields)
            await commit_or_conflict(session)
        except Conflict:
            await session.rollback()
            raise
        return project

    return await allocate(resolve, commit)


async def update_project(
    session: AsyncSession, owner_id: str, project_id: UUID, changes: Dict[str, Any]
) -> Project:
    """Apply a partial update; the slug follows the title only when its base changes."""

    repo = ProjectRepo(session)
    project = await _get_owned(repo, owner_id, project_id)

    fields: Dict[str, Any] = {}
    new_base = None
    if changes.get("title") is not None:
        title = _clean_title(changes["title"])
        if title != project.title:
            fields["title"] = title
            if normalize(title) != normalize(project.title):
                new_base = normalize(title)
    for key in _EDITABLE:
        if key in changes:
            fields[key] = changes[key]
    if "tech_stack" in changes:
        fields["tech_stack"] = list(changes["tech_stack"] or [])

    if new_base is None:
        if fields:
            project = await repo.update(project, **fields)
            await commit_or_conflict(session)
        return project

    async def resolve() -> str:
        existing = await repo.slugs_for_owner(owner_id, exclude_id=project_id)
        return resolve_unique_slug(new_base, existing)

    async def commit(slug: str) -> Project:
        target = await repo.get_by_id(project_id)
        if target is None:
            raise NotFound("Project not found")
        try:
            target = await repo.update(target, slug=slug, **fields)
            await commit_or_conflict(session)
        except Conflict:
            await session.rollback()
            raise
        return target

    return await allocate(resolve, commit)


async def set_published(
    session: AsyncSession, owner_id: str, project_id: UUID, published: bool
) -> Project:
    repo = ProjectRepo(session)
    project = await _get_owned(repo, owner_id, project_id)
    project = await repo.update(project, published=published)
    await commit_or_conflict(session)
    return project


async def get_owned_project(
    session: AsyncSession, owner_id: str, project_id: UUID
) -> ProjectWithLikes:
    repo = ProjectRepo(session)
    project = await _get_owned(repo, owner_id, project_id)
    return project, await repo.like_count(project.id)


async def list_owned_projects(session: AsyncSession, owner_id: str) -> List[ProjectWithLikes]:
    return await ProjectRepo(session).list_for_owner(owner_id)


async def get_public_project(
    session: AsyncSession, username: str, slug: str
) -> ProjectWithLikes:
    found = await ProjectRepo(session).get_published(username, slug)
    if found is None:
        raise NotFound("Project not found")
    return found


async def list_popular_projects(session: AsyncSession, limit: int = 10) -> List[ProjectWithLikes]:
    return list(await ProjectRepo(session).list_popular(limit))


async def get_public_profile(
    session: AsyncSession, username: str
) -> Tuple[Account, List[ProjectWithLikes]]:
    account = await AccountRepo(session).get_by_username(username)
    if account is None:
        raise NotFound("Profile not found")
    projects = await ProjectRepo(session).list_published_for_owner(account.id)
    return account, projects
