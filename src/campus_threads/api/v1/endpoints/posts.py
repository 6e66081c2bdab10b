"""Post, comment, like and bookmark endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from campus_threads.api.v1.dependencies import (
    CurrentUserDep,
    MediaResolverDep,
    OptionalUserDep,
    PaginationDep,
    SessionDep,
)
from campus_threads.schemas.common import Page
from campus_threads.schemas.post import (
    CommentNode,
    DeleteResult,
    LikeResult,
    PostCreate,
    PostView,
    PublishResult,
    SaveResult,
)
from campus_threads.services import content, publisher
from campus_threads.services.views import build_post_view

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostView, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> PostView:
    """Create a post, comment or reply.

    A future ``scheduled_for`` stores the post unpublished until the
    scheduled-post sweep picks it up.
    """
    post = content.create_post(db, current_user, payload)
    return build_post_view(db, current_user, post, resolver)


@router.get("", response_model=Page[PostView])
def list_threads(
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
    user_id: Annotated[int | None, Query(description="Only posts by this user")] = None,
) -> Page[PostView]:
    """Published top-level posts, newest first."""
    return content.get_threads(db, viewer, pagination, resolver, user_id=user_id)


@router.get("/replies", response_model=Page[PostView])
def list_user_replies(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
) -> Page[PostView]:
    return content.get_user_replies(db, viewer, user_id, pagination, resolver)


@router.get("/saved", response_model=Page[PostView])
def list_saved(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
) -> Page[PostView]:
    return content.get_saved_posts(db, current_user, pagination, resolver)


@router.get("/liked", response_model=Page[PostView])
def list_liked(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
) -> Page[PostView]:
    return content.get_liked_posts(db, current_user, pagination, resolver)


@router.get("/scheduled", response_model=Page[PostView])
def list_scheduled(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
) -> Page[PostView]:
    """The caller's scheduled posts that are still waiting to be published."""
    return content.get_scheduled_posts(db, current_user, pagination, resolver)


@router.get("/saved-status")
def saved_status(
    db: SessionDep,
    current_user: CurrentUserDep,
    post_ids: Annotated[list[int], Query(description="Posts to check")],
) -> dict[int, bool]:
    """Batch lookup of which posts the caller has saved."""
    return content.get_saved_status(db, current_user, post_ids)


@router.get("/{post_id}", response_model=PostView)
def get_post(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
) -> PostView:
    return content.get_thread(db, viewer, post_id, resolver)


@router.delete("/{post_id}", response_model=DeleteResult)
def delete_post(post_id: int, db: SessionDep, current_user: CurrentUserDep) -> DeleteResult:
    """Delete one of the caller's posts together with its likes, saves and votes."""
    return content.delete_thread(db, current_user, post_id)


@router.get("/{post_id}/comments", response_model=list[CommentNode])
def get_comments(
    post_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
) -> list[CommentNode]:
    """Published comments on a post as a reply tree."""
    return content.get_comments(db, viewer, post_id, resolver)


@router.post("/{post_id}/like", response_model=LikeResult)
def like_post(post_id: int, db: SessionDep, current_user: CurrentUserDep) -> LikeResult:
    """Like the post, or remove the caller's like if it is already there."""
    return content.toggle_like(db, current_user, post_id)


@router.post("/{post_id}/save", response_model=SaveResult)
def save_post(post_id: int, db: SessionDep, current_user: CurrentUserDep) -> SaveResult:
    """Bookmark the post, or remove the bookmark if it is already there."""
    return content.toggle_save(db, current_user, post_id)


@router.get("/{post_id}/saved", response_model=SaveResult)
def is_saved(post_id: int, db: SessionDep, current_user: CurrentUserDep) -> SaveResult:
    return SaveResult(saved=content.is_post_saved(db, current_user, post_id))


@router.post("/{post_id}/publish", response_model=PublishResult)
def publish_now(post_id: int, db: SessionDep, current_user: CurrentUserDep) -> PublishResult:
    """Publish one of the caller's scheduled posts ahead of time."""
    return publisher.publish_scheduled_post(db, post_id, actor=current_user)


@router.delete("/{post_id}/schedule", response_model=DeleteResult)
def delete_scheduled(
    post_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> DeleteResult:
    """Delete a scheduled post before it is published."""
    return content.delete_scheduled_post(db, current_user, post_id)
