"""Draft endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from campus_threads.api.v1.dependencies import (
    CurrentUserDep,
    MediaResolverDep,
    PaginationDep,
    SessionDep,
)
from campus_threads.schemas.common import Page
from campus_threads.schemas.post import DeleteResult, DraftSave, PostView
from campus_threads.services import content
from campus_threads.services.views import build_post_view

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.get("", response_model=Page[PostView])
def list_drafts(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
    pagination: PaginationDep,
) -> Page[PostView]:
    return content.get_draft_posts(db, current_user, pagination, resolver)


@router.put("", response_model=PostView)
def save_draft(
    payload: DraftSave,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> PostView:
    """Save a new draft, or overwrite the one named by ``draft_id``."""
    draft = content.save_draft(db, current_user, payload)
    return build_post_view(db, current_user, draft, resolver)


@router.post("/{draft_id}/publish", response_model=PostView)
def publish_draft(
    draft_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> PostView:
    post = content.publish_draft(db, current_user, draft_id)
    return build_post_view(db, current_user, post, resolver)


@router.delete("/{draft_id}", response_model=DeleteResult)
def delete_draft(draft_id: int, db: SessionDep, current_user: CurrentUserDep) -> DeleteResult:
    return content.delete_draft(db, current_user, draft_id)
