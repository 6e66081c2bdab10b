"""Builders for the denormalised view models returned to clients.

Each listing inlines the creator, resolves media to URLs and attaches the
viewer's like/save/follow flags. Flags are loaded with one query per kind
for the whole page.
"""
from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_threads.models import Follow, Like, Post, SavedPost, User
from campus_threads.schemas.common import MediaRef
from campus_threads.schemas.post import PostView
from campus_threads.schemas.user import UserProfile, UserSummary
from campus_threads.services.media import MediaResolver, as_media_ref

__all__ = ["avatar_ref", "user_summary", "user_profile", "build_post_views", "build_post_view"]


def avatar_ref(user: User) -> MediaRef | None:
    """Return the user's avatar as a tagged reference, if set."""
    if not user.avatar_kind or not user.avatar_value:
        return None
    return as_media_ref({"kind": user.avatar_kind, "value": user.avatar_value})


def _avatar_url(user: User, resolver: MediaResolver) -> str | None:
    ref = avatar_ref(user)
    if ref is None:
        return None
    urls = resolver.resolve_many([ref])
    return urls[0] if urls else None


def user_summary(user: User, resolver: MediaResolver) -> UserSummary:
    return UserSummary(
        id=user.id,
        external_id=user.external_id,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
        avatar_url=_avatar_url(user, resolver),
        followers_count=user.followers_count,
    )


def user_profile(user: User, resolver: MediaResolver) -> UserProfile:
    summary = user_summary(user, resolver)
    return UserProfile(
        **summary.model_dump(),
        email=user.email,
        avatar=avatar_ref(user),
        bio=user.bio,
        website_url=user.website_url,
        location=user.location,
        is_private=user.is_private,
        college=user.college,
        course=user.course,
        branch=user.branch,
        semester=user.semester,
        created_at=user.created_at,
    )


def _ids_in(db: Session, column, owner_column, owner_id: int, ids: Sequence[int]) -> set[int]:
    if not ids:
        return set()
    rows = db.execute(select(column).where(owner_column == owner_id, column.in_(ids)))
    return {row[0] for row in rows}


def build_post_views(
    db: Session,
    viewer: User | None,
    posts: Sequence[Post],
    resolver: MediaResolver,
    *,
    saved: bool | None = None,
) -> list[PostView]:
    """Convert posts into viewer-specific view models, preserving order."""
    if not posts:
        return []

    post_ids = [post.id for post in posts]
    creator_ids = list({post.user_id for post in posts})
    creators = {
        user.id: user_summary(user, resolver)
        for user in db.query(User).filter(User.id.in_(creator_ids)).all()
    }

    liked: set[int] = set()
    saved_ids: set[int] = set()
    following: set[int] = set()
    if viewer is not None:
        liked = _ids_in(db, Like.post_id, Like.user_id, viewer.id, post_ids)
        if saved is None:
            saved_ids = _ids_in(db, SavedPost.post_id, SavedPost.user_id, viewer.id, post_ids)
        others = [uid for uid in creator_ids if uid != viewer.id]
        following = _ids_in(db, Follow.following_id, Follow.follower_id, viewer.id, others)

    views = []
    for post in posts:
        views.append(
            PostView(
                id=post.id,
                user_id=post.user_id,
                parent_post_id=post.parent_post_id,
                parent_comment_id=post.parent_comment_id,
                content=post.content,
                media_urls=resolver.resolve_many(post.media),
                website_url=post.website_url,
                like_count=post.like_count,
                comment_count=post.comment_count,
                retweet_count=post.retweet_count,
                is_draft=post.is_draft,
                is_scheduled=post.is_scheduled,
                is_posted=post.is_posted,
                scheduled_for=post.scheduled_for,
                is_poll=post.is_poll,
                poll_question=post.poll_question,
                poll_options=post.poll_options,
                poll_duration_hours=post.poll_duration_hours,
                poll_multiple_choice=post.poll_multiple_choice,
                created_at=post.created_at,
                creator=creators.get(post.user_id) or UserSummary(id=post.user_id),
                is_liked=post.id in liked,
                is_following=post.user_id in following,
                is_saved=saved if saved is not None else post.id in saved_ids,
            )
        )
    return views


def build_post_view(
    db: Session,
    viewer: User | None,
    post: Post,
    resolver: MediaResolver,
) -> PostView:
    return build_post_views(db, viewer, [post], resolver)[0]
