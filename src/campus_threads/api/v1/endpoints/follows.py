"""Follow graph endpoints: edges, follow status and follow requests."""

from __future__ import annotations

from fastapi import APIRouter

from campus_threads.api.v1.dependencies import (
    CurrentUserDep,
    MediaResolverDep,
    OptionalUserDep,
    SessionDep,
)
from campus_threads.schemas.follow import (
    CancelRequestResult,
    FollowRequestView,
    FollowResult,
    FollowStatus,
    UnfollowResult,
)
from campus_threads.schemas.user import UserSummary
from campus_threads.services import social_graph
from campus_threads.services.views import user_summary

router = APIRouter(prefix="/users", tags=["follows"])
requests_router = APIRouter(prefix="/follow-requests", tags=["follows"])


@router.post("/{user_id}/follow", response_model=FollowResult)
def follow_user(user_id: int, db: SessionDep, current_user: CurrentUserDep) -> FollowResult:
    """Follow a user, or send a follow request when their account is private."""
    return social_graph.follow(db, current_user, user_id)


@router.delete("/{user_id}/follow", response_model=UnfollowResult)
def unfollow_user(user_id: int, db: SessionDep, current_user: CurrentUserDep) -> UnfollowResult:
    return social_graph.unfollow(db, current_user, user_id)


@router.delete("/{user_id}/follow-request", response_model=CancelRequestResult)
def cancel_follow_request(
    user_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> CancelRequestResult:
    """Withdraw the caller's pending request to follow ``user_id``."""
    return social_graph.cancel_follow_request(db, current_user, user_id)


@router.get("/{user_id}/followers", response_model=list[UserSummary])
def list_followers(user_id: int, db: SessionDep, resolver: MediaResolverDep) -> list[UserSummary]:
    return [user_summary(user, resolver) for user in social_graph.get_followers(db, user_id)]


@router.get("/{user_id}/following", response_model=list[UserSummary])
def list_following(user_id: int, db: SessionDep, resolver: MediaResolverDep) -> list[UserSummary]:
    return [user_summary(user, resolver) for user in social_graph.get_following(db, user_id)]


@router.get("/{user_id}/follow-status", response_model=FollowStatus)
def follow_status(user_id: int, db: SessionDep, viewer: OptionalUserDep) -> FollowStatus:
    """Whether the caller follows ``user_id``, plus live follower/following counts."""
    return social_graph.get_follow_status(db, viewer, user_id)


@router.get("/{user_id}/is-following")
def is_following(user_id: int, db: SessionDep, viewer: OptionalUserDep) -> dict[str, bool]:
    return {"is_following": social_graph.is_following(db, viewer, user_id)}


@requests_router.get("", response_model=list[FollowRequestView])
def pending_requests(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> list[FollowRequestView]:
    """Pending follow requests addressed to the caller."""
    return social_graph.get_pending_follow_requests(db, current_user, resolver)


@requests_router.post("/{request_id}/accept", response_model=FollowRequestView)
def accept_request(
    request_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> FollowRequestView:
    return social_graph.accept_follow_request(db, current_user, request_id, resolver)


@requests_router.post("/{request_id}/reject", response_model=FollowRequestView)
def reject_request(
    request_id: int,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> FollowRequestView:
    return social_graph.reject_follow_request(db, current_user, request_id, resolver)
