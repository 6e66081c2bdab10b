"""Schemas for follow edges and follow requests."""

from typing import Literal

from pydantic import BaseModel

from .user import UserSummary


class FollowResult(BaseModel):
    """Outcome of a follow attempt.

    ``requested``/``already_requested`` mean the target is private and the
    edge will only exist once they accept.
    """

    status: Literal["following", "already_following", "requested", "already_requested"]
    followers_count: int


class UnfollowResult(BaseModel):
    removed: bool
    followers_count: int


class CancelRequestResult(BaseModel):
    cancelled: bool


class FollowStatus(BaseModel):
    """Viewer-relative follow state plus edge-derived counts."""

    is_following: bool
    has_pending_request: bool
    followers_count: int
    following_count: int


class FollowRequestView(BaseModel):
    id: int
    from_user_id: int
    to_user_id: int
    status: Literal["pending", "accepted", "rejected"]
    created_at: int
    updated_at: int
    user: UserSummary | None = None
