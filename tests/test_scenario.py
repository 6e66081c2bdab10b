"""End-to-end walk through likes, follows and scheduled publishing."""

from campus_threads.db.time import now_ms
from campus_threads.schemas.post import PostCreate
from campus_threads.services import content, publisher, social_graph


def test_campus_day(db_session, resolver, alice, bob, carol) -> None:
    post = content.create_post(db_session, alice, PostCreate(content="Hello campus"))

    liked = content.toggle_like(db_session, bob, post.id)
    bob_view = content.get_thread(db_session, bob, post.id, resolver)
    unliked = content.toggle_like(db_session, bob, post.id)

    assert liked.like_count == 1
    assert bob_view.is_liked is True
    assert unliked.like_count == 0

    assert alice.followers_count == 0
    assert social_graph.follow(db_session, carol, alice.id).followers_count == 1

    now = now_ms()
    scheduled = content.create_post(
        db_session,
        alice,
        PostCreate(content="Later today", scheduled_for=now + 1_000),
        now=now,
    )

    assert publisher.process_scheduled_posts(db_session, now).published == 0
    assert publisher.process_scheduled_posts(db_session, now + 1_001).published == 1
    assert publisher.publish_scheduled_post(db_session, scheduled.id).duplicate is True
