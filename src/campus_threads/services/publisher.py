"""Publication of scheduled posts.

An external timer (or the in-process :class:`ScheduledPostWorker`) runs
:func:`process_scheduled_posts`, which promotes every scheduled post whose
time has come. Publishing is idempotent: the state flip is a compare-and-set
on ``is_posted``, so two overlapping sweeps, or a sweep racing a manual
publish, publish each post exactly once.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy import update
from sqlalchemy.orm import Session

from campus_threads.core.errors import AuthorizationDenied, InvalidState
from campus_threads.core.settings import settings
from campus_threads.db.time import now_ms
from campus_threads.models import Post, User
from campus_threads.schemas.post import PublishResult, SweepResult
from campus_threads.services.content import get_post_or_404
from campus_threads.services.counters import increment

logger = logging.getLogger(__name__)

__all__ = [
    "get_due_scheduled_posts",
    "publish_scheduled_post",
    "process_scheduled_posts",
    "ScheduledPostWorker",
]


def get_due_scheduled_posts(db: Session, now: int | None = None) -> list[Post]:
    """Scheduled, unpublished posts whose ``scheduled_for`` has passed."""
    now = now if now is not None else now_ms()
    pending = (
        db.query(Post)
        .filter(Post.is_scheduled.is_(True), Post.is_posted.is_(False))
        .order_by(Post.scheduled_for, Post.id)
        .all()
    )
    due = [post for post in pending if post.scheduled_for is not None and post.scheduled_for <= now]
    logger.debug("Found %d scheduled posts, %d due for publishing", len(pending), len(due))
    return due


def publish_scheduled_post(db: Session, post_id: int, actor: User | None = None) -> PublishResult:
    """Promote one scheduled post to published.

    An already-published post is reported as ``duplicate`` rather than an
    error. When ``actor`` is given the post must belong to them.
    """
    post = get_post_or_404(db, post_id)
    if post.is_posted:
        logger.warning("Post %s already posted, skipping duplicate publish", post_id)
        return PublishResult(duplicate=True)
    if actor is not None and post.user_id != actor.id:
        raise AuthorizationDenied("Not authorized to publish this post")
    if not post.is_scheduled:
        raise InvalidState("Post is not scheduled")

    # Re-check at write time: only one caller can flip is_posted.
    result = db.execute(
        update(Post)
        .where(Post.id == post_id, Post.is_posted.is_(False), Post.is_scheduled.is_(True))
        .values(is_posted=True, is_scheduled=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        logger.warning("Post %s was published by another process", post_id)
        return PublishResult(duplicate=True)

    if post.parent_post_id is not None:
        increment(db, Post.comment_count, post.parent_post_id)
    db.commit()
    db.refresh(post)
    logger.info("Published scheduled post %s", post_id)
    return PublishResult(duplicate=False)


def process_scheduled_posts(db: Session, now: int | None = None) -> SweepResult:
    """Publish every due scheduled post.

    Each post is published in its own transaction. A failure on one post is
    logged and counted; the rest of the batch still runs.
    """
    now = now if now is not None else now_ms()
    due_ids = [post.id for post in get_due_scheduled_posts(db, now)]
    summary = SweepResult()

    for post_id in due_ids:
        try:
            result = publish_scheduled_post(db, post_id)
        except Exception:  # noqa: BLE001 - one bad post must not abort the sweep
            db.rollback()
            summary.failed += 1
            logger.exception("Failed to publish scheduled post %s", post_id)
            continue
        if result.duplicate:
            summary.skipped += 1
        else:
            summary.published += 1

    logger.info(
        "Scheduled sweep finished: published=%d skipped=%d failed=%d",
        summary.published,
        summary.skipped,
        summary.failed,
    )
    return summary


class ScheduledPostWorker:
    """Runs the scheduled-post sweep periodically inside the API process.

    Deployments that drive the sweep from an external cron trigger leave this
    disabled.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        interval: float | None = None,
    ) -> None:
        if session_factory is None:
            from campus_threads.db.session import SessionLocal

            session_factory = SessionLocal
        self.session_factory = session_factory
        self.interval = max(0.1, float(interval or settings.publish_sweep_interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    def run_once(self) -> SweepResult:
        """Run one sweep in a fresh session."""
        db = self.session_factory()
        try:
            return process_scheduled_posts(db)
        finally:
            db.close()

    async def start(self) -> None:
        """Start the background loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop and wait for the current sweep."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.run_once)
            except Exception as e:  # noqa: BLE001 - keep the loop alive
                logger.error("Scheduled post sweep failed: %s", e, exc_info=True)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                continue
