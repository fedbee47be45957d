from __future__ import annotations

import uuid

import pytest

from src.core.exceptions import AllocationExhausted, Forbidden, NotFound, ValidationError
from src.repositories.project_repo import ProjectRepo
from src.services.projects import (
    create_project,
    get_public_profile,
    get_public_project,
    list_owned_projects,
    list_popular_projects,
    set_published,
    update_project,
)
from tests.conftest import make_account


@pytest.mark.asyncio
async def test_duplicate_titles_get_suffixed_slugs(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")

    first = await create_project(db_session, owner.id, {"title": "My Cool App"})
    second = await create_project(db_session, owner.id, {"title": "My Cool App"})
    third = await create_project(db_session, owner.id, {"title": "my cool app!"})

    assert [first.slug, second.slug, third.slug] == [
        "my-cool-app",
        "my-cool-app-1",
        "my-cool-app-2",
    ]
    assert first.published is False
    assert first.views == 0


@pytest.mark.asyncio
async def test_slugs_are_scoped_per_owner(db_session):
    alice = await make_account(db_session, "uid-a", name="Alice")
    bob = await make_account(db_session, "uid-b", name="Bob")

    a = await create_project(db_session, alice.id, {"title": "Portfolio"})
    b = await create_project(db_session, bob.id, {"title": "Portfolio"})

    assert a.slug == b.slug == "portfolio"


@pytest.mark.asyncio
async def test_punctuation_only_title_gets_fallback_slug(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    project = await create_project(db_session, owner.id, {"title": "???"})
    assert project.slug == "untitled"


@pytest.mark.asyncio
async def test_blank_title_is_rejected(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    with pytest.raises(ValidationError):
        await create_project(db_session, owner.id, {"title": "   "})


@pytest.mark.asyncio
async def test_create_keeps_optional_fields(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    project = await create_project(
        db_session,
        owner.id,
        {
            "title": "Weather CLI",
            "description": "Forecasts in the terminal",
            "tech_stack": ["python", "click"],
            "repo_url": "https://github.com/alice/weather",
            "published": True,
        },
    )
    assert project.tech_stack == ["python", "click"]
    assert project.repo_url == "https://github.com/alice/weather"
    assert project.published is True


@pytest.mark.asyncio
async def test_slug_commit_race_retries_once(db_session, monkeypatch):
    owner = await make_account(db_session, "uid-a", name="Alice")
    await create_project(db_session, owner.id, {"title": "My Cool App"})

    real_slugs = ProjectRepo.slugs_for_owner
    calls = {"n": 0}

    async def stale_slugs(self, owner_id, exclude_id=None):
        calls["n"] += 1
        if calls["n"] == 1:
            return set()
        return await real_slugs(self, owner_id, exclude_id)

    monkeypatch.setattr(ProjectRepo, "slugs_for_owner", stale_slugs)

    project = await create_project(db_session, owner.id, {"title": "My Cool App"})
    assert project.slug == "my-cool-app-1"
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_slug_conflict_twice_is_exhausted(db_session, monkeypatch):
    owner = await make_account(db_session, "uid-a", name="Alice")
    owner_id = owner.id
    await create_project(db_session, owner_id, {"title": "My Cool App"})

    async def always_stale(self, _owner_id, exclude_id=None):
        return set()

    monkeypatch.setattr(ProjectRepo, "slugs_for_owner", always_stale)

    with pytest.raises(AllocationExhausted):
        await create_project(db_session, owner_id, {"title": "My Cool App"})

    rows = await list_owned_projects(db_session, owner_id)
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_retitle_with_same_base_keeps_slug(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    first = await create_project(db_session, owner.id, {"title": "My App"})
    second = await create_project(db_session, owner.id, {"title": "My App"})
    assert second.slug == "my-app-1"

    updated = await update_project(db_session, owner.id, second.id, {"title": "My App!"})

    assert updated.title == "My App!"
    assert updated.slug == "my-app-1"
    assert first.slug == "my-app"


@pytest.mark.asyncio
async def test_retitle_regenerates_slug_excluding_itself(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    await create_project(db_session, owner.id, {"title": "Shop"})
    project = await create_project(db_session, owner.id, {"title": "Blog"})

    renamed = await update_project(db_session, owner.id, project.id, {"title": "Shop"})
    assert renamed.slug == "shop-1"

    back = await update_project(db_session, owner.id, project.id, {"title": "Blog"})
    assert back.slug == "blog"


@pytest.mark.asyncio
async def test_update_without_title_leaves_slug(db_session):
    owner = await make_account(db_session, "uid-a", name="Alice")
    project = await create_project(db_session, owner.id, {"title": "Blog"})

    updated = await update_project(
        db_session,
        owner.id,
        project.id,
        {"description": "Now with RSS", "tech_stack": ["go"], "live_url": None},
    )

    assert updated.slug == "blog"
    assert updated.description == "Now with RSS"
    assert updated.tech_stack == ["go"]


@pytest.mark.asyncio
async def test_only_owner_may_update_or_publish(db_session):
    alice = await make_account(db_session, "uid-a", name="Alice")
    bob = await make_account(db_session, "uid-b", name="Bob")
    project = await create_project(db_session, alice.id, {"title": "Blog"})

    with pytest.raises(Forbidden):
        await update_project(db_session, bob.id, project.id, {"title": "Mine"})
    with pytest.raises(Forbidden):
        await set_published(db_session, bob.id, project.id, True)
    with pytest.raises(NotFound):
        await update_project(db_session, alice.id, uuid.uuid4(), {"title": "x"})


@pytest.mark.asyncio
async def test_public_reads_only_see_published_projects(db_session):
    alice = await make_account(db_session, "uid-a", name="Alice")
    draft = await create_project(db_session, alice.id, {"title": "Draft"})
    live = await create_project(db_session, alice.id, {"title": "Live"})
    await set_published(db_session, alice.id, live.id, True)

    project, likes = await get_public_project(db_session, "alice", "live")
    assert project.id == live.id
    assert project.owner.username == "alice"
    assert likes == 0

    with pytest.raises(NotFound):
        await get_public_project(db_session, "alice", draft.slug)

    account, rows = await get_public_profile(db_session, "alice")
    assert account.id == alice.id
    assert [p.slug for p, _ in rows] == ["live"]

    with pytest.raises(NotFound):
        await get_public_profile(db_session, "nobody")


@pytest.mark.asyncio
async def test_popular_orders_by_views_then_recency(db_session):
    alice = await make_account(db_session, "uid-a", name="Alice")
    repo = ProjectRepo(db_session)
    for title, views in [("One", 3), ("Two", 10), ("Three", 3), ("Hidden", 50)]:
        project = await create_project(
            db_session, alice.id, {"title": title, "published": title != "Hidden"}
        )
        for _ in range(views):
            await repo.increment_views(project.id)
        await db_session.commit()

    rows = await list_popular_projects(db_session, limit=10)

    assert [p.slug for p, _ in rows] == ["two", "three", "one"]
