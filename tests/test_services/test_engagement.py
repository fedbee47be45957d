from __future__ import annotations

import asyncio
import uuid

import pytest
from sqlalchemy import select

from src.core.exceptions import Forbidden, NotFound, ValidationError
from src.db.models.like import Like
from src.db.models.project import Project
from src.repositories.like_repo import LikeRepo
from src.services.engagement import (
    add_comment,
    delete_comment,
    increment_views,
    like_status,
    list_comments,
    toggle_like,
)
from src.services.projects import create_project
from tests.conftest import make_account


async def _seed(session):
    owner = await make_account(session, "owner", name="Owner")
    project = await create_project(session, owner.id, {"title": "Demo", "published": True})
    return owner, project


@pytest.mark.asyncio
async def test_toggle_like_twice_is_not_idempotent(db_session):
    _, project = await _seed(db_session)
    fan = await make_account(db_session, "fan", name="Fan")

    first = await toggle_like(db_session, fan.id, project.id)
    second = await toggle_like(db_session, fan.id, project.id)

    assert (first.liked, first.like_count) == (True, 1)
    assert (second.liked, second.like_count) == (False, 0)


@pytest.mark.asyncio
async def test_like_count_tracks_distinct_accounts(db_session):
    _, project = await _seed(db_session)
    fans = [await make_account(db_session, f"fan-{i}", name=f"Fan {i}") for i in range(5)]
    fan_ids = [fan.id for fan in fans]

    for fan_id in fan_ids:
        result = await toggle_like(db_session, fan_id, project.id)
        assert result.liked is True
    assert (await like_status(db_session, fan_ids[0], project.id)).like_count == 5

    for fan_id in fan_ids:
        result = await toggle_like(db_session, fan_id, project.id)
        assert result.liked is False
    assert (await like_status(db_session, fan_ids[0], project.id)).like_count == 0


@pytest.mark.asyncio
async def test_concurrent_duplicate_like_is_a_noop(db_session, monkeypatch):
    _, project = await _seed(db_session)
    project_id = project.id
    fan = await make_account(db_session, "fan", name="Fan")
    fan_id = fan.id
    await toggle_like(db_session, fan_id, project_id)

    # the existence check loses the race and misses the committed like
    async def missed(self, account_id, project_id):
        return None

    monkeypatch.setattr(LikeRepo, "get", missed)

    result = await toggle_like(db_session, fan_id, project_id)

    assert result.liked is True
    assert result.like_count == 1


@pytest.mark.asyncio
async def test_unlike_of_already_removed_row_is_tolerated(db_session):
    _, project = await _seed(db_session)
    fan = await make_account(db_session, "fan", name="Fan")
    await toggle_like(db_session, fan.id, project.id)

    repo = LikeRepo(db_session)
    assert await repo.delete(fan.id, project.id) == 1
    assert await repo.delete(fan.id, project.id) == 0


@pytest.mark.asyncio
async def test_toggle_unlike_after_concurrent_removal(db_session, monkeypatch):
    _, project = await _seed(db_session)
    project_id = project.id
    fan = await make_account(db_session, "fan", name="Fan")
    fan_id = fan.id

    # the existence check still sees a like another request already deleted
    async def stale(self, account_id, project_id):
        return Like(account_id=account_id, project_id=project_id)

    monkeypatch.setattr(LikeRepo, "get", stale)

    result = await toggle_like(db_session, fan_id, project_id)

    assert result.liked is False
    assert result.like_count == 0


@pytest.mark.asyncio
async def test_like_missing_project_is_not_found(db_session):
    fan = await make_account(db_session, "fan", name="Fan")
    with pytest.raises(NotFound):
        await toggle_like(db_session, fan.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_concurrent_view_increments_are_not_lost(session_factory):
    async with session_factory() as session:
        _, project = await _seed(session)
        project_id = project.id

    async def visit():
        async with session_factory() as session:
            await increment_views(session, project_id)

    await asyncio.gather(*(visit() for _ in range(25)))

    async with session_factory() as session:
        views = (
            await session.execute(select(Project.views).where(Project.id == project_id))
        ).scalar_one()
    assert views == 25


@pytest.mark.asyncio
async def test_increment_views_on_missing_project(db_session):
    with pytest.raises(NotFound):
        await increment_views(db_session, uuid.uuid4())


@pytest.mark.asyncio
async def test_comments_are_listed_newest_first(db_session):
    _, project = await _seed(db_session)
    fan = await make_account(db_session, "fan", name="Fan")

    c1 = await add_comment(db_session, fan.id, project.id, "first")
    c2 = await add_comment(db_session, fan.id, project.id, "second")
    c3 = await add_comment(db_session, fan.id, project.id, "third")

    listed = await list_comments(db_session, project.id)

    assert [c.id for c in listed] == [c3.id, c2.id, c1.id]
    assert listed[0].author.username == "fan"


@pytest.mark.asyncio
async def test_comment_content_is_trimmed_and_required(db_session):
    _, project = await _seed(db_session)
    fan = await make_account(db_session, "fan", name="Fan")

    comment = await add_comment(db_session, fan.id, project.id, "  Nice work \n")
    assert comment.content == "Nice work"

    with pytest.raises(ValidationError):
        await add_comment(db_session, fan.id, project.id, "   ")
    with pytest.raises(ValidationError):
        await add_comment(db_session, fan.id, project.id, "x" * 2001)


@pytest.mark.asyncio
async def test_comment_on_missing_project_is_not_found(db_session):
    fan = await make_account(db_session, "fan", name="Fan")
    with pytest.raises(NotFound):
        await add_comment(db_session, fan.id, uuid.uuid4(), "hello")


@pytest.mark.asyncio
async def test_only_author_can_delete_comment(db_session):
    owner, project = await _seed(db_session)
    fan = await make_account(db_session, "fan", name="Fan")
    comment = await add_comment(db_session, fan.id, project.id, "Nice work")

    with pytest.raises(Forbidden):
        await delete_comment(db_session, owner.id, comment.id)

    await delete_comment(db_session, fan.id, comment.id)
    assert await list_comments(db_session, project.id) == []

    with pytest.raises(NotFound):
        await delete_comment(db_session, fan.id, comment.id)
