"""Tests for scheduled post publication."""

import asyncio

import pytest
from sqlalchemy import update

from campus_threads.core.errors import AuthorizationDenied, InvalidState
from campus_threads.db.time import now_ms
from campus_threads.models import Post
from campus_threads.schemas.post import PostCreate
from campus_threads.services import content, publisher
from tests.factories import create_post


def _schedule(db, author, offset_ms: int, **extra) -> Post:
    now = now_ms()
    return content.create_post(
        db,
        author,
        PostCreate(content="scheduled", scheduled_for=now + offset_ms, **extra),
        now=now,
    )


def test_due_posts_filtered_by_time(db_session, alice) -> None:
    soon = _schedule(db_session, alice, 1_000)
    later = _schedule(db_session, alice, 3_600_000)
    now = now_ms()

    assert publisher.get_due_scheduled_posts(db_session, now) == []
    due = publisher.get_due_scheduled_posts(db_session, now + 5_000)
    assert [post.id for post in due] == [soon.id]
    assert later.id not in {post.id for post in due}


def test_publish_is_idempotent_and_counts_once(db_session, alice, bob) -> None:
    parent = create_post(db_session, alice)
    scheduled = _schedule(db_session, bob, 60_000, parent_post_id=parent.id)

    first = publisher.publish_scheduled_post(db_session, scheduled.id)
    second = publisher.publish_scheduled_post(db_session, scheduled.id)

    assert first.duplicate is False
    assert second.duplicate is True
    db_session.refresh(parent)
    db_session.refresh(scheduled)
    assert parent.comment_count == 1
    assert scheduled.is_posted is True
    assert scheduled.is_scheduled is False


def test_publish_lost_race_reports_duplicate(db_session, session_factory, alice, bob) -> None:
    parent = create_post(db_session, alice)
    scheduled = _schedule(db_session, bob, 60_000, parent_post_id=parent.id)
    assert scheduled.is_posted is False

    # Another worker publishes the row after this session loaded it.
    other = session_factory()
    try:
        other.execute(
            update(Post)
            .where(Post.id == scheduled.id)
            .values(is_posted=True, is_scheduled=False)
        )
        other.commit()
    finally:
        other.close()

    result = publisher.publish_scheduled_post(db_session, scheduled.id)

    assert result.duplicate is True
    db_session.refresh(parent)
    assert parent.comment_count == 0


def test_manual_publish_checks_owner_and_state(db_session, alice, bob) -> None:
    scheduled = _schedule(db_session, alice, 60_000)
    draft = create_post(db_session, alice, is_posted=False, is_draft=True)

    with pytest.raises(AuthorizationDenied):
        publisher.publish_scheduled_post(db_session, scheduled.id, actor=bob)
    with pytest.raises(InvalidState):
        publisher.publish_scheduled_post(db_session, draft.id, actor=alice)

    assert publisher.publish_scheduled_post(db_session, scheduled.id, actor=alice).duplicate is False


def test_sweep_publishes_due_posts(db_session, alice) -> None:
    due = _schedule(db_session, alice, 1_000)
    _schedule(db_session, alice, 3_600_000)

    early = publisher.process_scheduled_posts(db_session, now_ms())
    result = publisher.process_scheduled_posts(db_session, now_ms() + 5_000)
    repeat = publisher.process_scheduled_posts(db_session, now_ms() + 5_000)

    assert early.published == 0
    assert result.published == 1
    assert result.failed == 0
    assert repeat.published == 0
    db_session.refresh(due)
    assert due.is_posted is True


def test_sweep_survives_a_failing_post(db_session, alice, mocker) -> None:
    first = _schedule(db_session, alice, 1_000)
    second = _schedule(db_session, alice, 1_000)
    real_publish = publisher.publish_scheduled_post

    def flaky(db, post_id, actor=None):
        if post_id == first.id:
            raise RuntimeError("boom")
        return real_publish(db, post_id, actor)

    mocker.patch.object(publisher, "publish_scheduled_post", side_effect=flaky)

    result = publisher.process_scheduled_posts(db_session, now_ms() + 5_000)

    assert result.published == 1
    assert result.failed == 1
    db_session.refresh(second)
    assert second.is_posted is True


def test_worker_run_once_uses_fresh_session(session_factory, db_session, alice) -> None:
    scheduled = _schedule(db_session, alice, 60_000)
    db_session.execute(
        update(Post)
        .where(Post.id == scheduled.id)
        .values(scheduled_for=now_ms() - 1)
        .execution_options(synchronize_session=False)
    )
    db_session.commit()

    worker = publisher.ScheduledPostWorker(session_factory=session_factory, interval=60)
    result = worker.run_once()

    assert result.published == 1


@pytest.mark.asyncio
async def test_worker_start_stop(session_factory, mocker) -> None:
    worker = publisher.ScheduledPostWorker(session_factory=session_factory, interval=0.1)
    run_once = mocker.patch.object(worker, "run_once")

    await worker.start()
    await asyncio.sleep(0.05)
    await worker.stop()

    assert run_once.called
    assert worker._task is None
