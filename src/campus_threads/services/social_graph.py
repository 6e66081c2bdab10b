"""Follow graph: edges, private-account follow requests and follower counts.

Edges and requests are keyed by internal user ids only. ``followers_count``
on a user is a denormalised copy of the number of edges pointing at them;
it is adjusted atomically alongside every edge insert/delete and can be
recomputed with :func:`reconcile_followers_count`.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_threads.core.errors import AuthorizationDenied, InvalidState, NotFound, ValidationError
from campus_threads.db.time import now_ms
from campus_threads.models import Follow, FollowRequest, FollowRequestStatus, User
from campus_threads.schemas.follow import (
    CancelRequestResult,
    FollowRequestView,
    FollowResult,
    FollowStatus,
    UnfollowResult,
)
from campus_threads.services.counters import current_value, decrement_floored, increment
from campus_threads.services.media import MediaResolver
from campus_threads.services.user_service import get_user_or_404
from campus_threads.services.views import user_summary

logger = logging.getLogger(__name__)

PENDING = FollowRequestStatus.PENDING.value

__all__ = [
    "follow",
    "unfollow",
    "accept_follow_request",
    "reject_follow_request",
    "cancel_follow_request",
    "get_followers",
    "get_following",
    "is_following",
    "get_follow_status",
    "get_pending_follow_requests",
    "reconcile_followers_count",
]


def _edge(db: Session, follower_id: int, following_id: int) -> Follow | None:
    return (
        db.query(Follow)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .one_or_none()
    )


def _pending_request(db: Session, from_user_id: int, to_user_id: int) -> FollowRequest | None:
    return (
        db.query(FollowRequest)
        .filter(
            FollowRequest.from_user_id == from_user_id,
            FollowRequest.to_user_id == to_user_id,
            FollowRequest.status == PENDING,
        )
        .one_or_none()
    )


def _create_edge(db: Session, follower_id: int, following_id: int) -> bool:
    """Insert an edge and bump the target's counter; False if it already existed."""
    try:
        with db.begin_nested():
            db.add(Follow(follower_id=follower_id, following_id=following_id, created_at=now_ms()))
    except IntegrityError:
        # Lost a race with a concurrent follow of the same pair.
        return False
    increment(db, User.followers_count, following_id)
    return True


def follow(db: Session, actor: User, target_id: int) -> FollowResult:
    """Follow ``target_id``, or ask to when the target account is private.

    Following someone already followed, or re-requesting while a request is
    pending, succeeds without changing anything.
    """
    if actor.id == target_id:
        raise ValidationError("You can't follow yourself")
    target = get_user_or_404(db, target_id)

    if _edge(db, actor.id, target.id) is not None:
        return FollowResult(status="already_following", followers_count=target.followers_count)

    if target.is_private:
        if _pending_request(db, actor.id, target.id) is not None:
            return FollowResult(status="already_requested", followers_count=target.followers_count)
        try:
            with db.begin_nested():
                timestamp = now_ms()
                db.add(
                    FollowRequest(
                        from_user_id=actor.id,
                        to_user_id=target.id,
                        status=PENDING,
                        created_at=timestamp,
                        updated_at=timestamp,
                    )
                )
        except IntegrityError:
            db.commit()
            return FollowResult(status="already_requested", followers_count=target.followers_count)
        db.commit()
        logger.info("User %s requested to follow private user %s", actor.id, target.id)
        return FollowResult(status="requested", followers_count=target.followers_count)

    created = _create_edge(db, actor.id, target.id)
    db.commit()
    count = current_value(db, User.followers_count, target.id)
    if not created:
        return FollowResult(status="already_following", followers_count=count)
    logger.info("User %s followed user %s", actor.id, target.id)
    return FollowResult(status="following", followers_count=count)


def unfollow(db: Session, actor: User, target_id: int) -> UnfollowResult:
    """Remove the actor's edge to ``target_id``; a missing edge is not an error."""
    target = get_user_or_404(db, target_id)
    result = db.execute(
        delete(Follow)
        .where(Follow.follower_id == actor.id, Follow.following_id == target.id)
        .execution_options(synchronize_session=False)
    )
    # Only the call that actually removed the row touches the counter.
    if result.rowcount:
        count = decrement_floored(db, User.followers_count, target.id)
    else:
        count = current_value(db, User.followers_count, target.id)
    db.commit()
    if result.rowcount:
        logger.info("User %s unfollowed user %s", actor.id, target.id)
    return UnfollowResult(removed=bool(result.rowcount), followers_count=count)


def _resolve_request(db: Session, actor: User, request_id: int, new_status: str) -> FollowRequest:
    request = db.get(FollowRequest, request_id)
    if request is None:
        raise NotFound("Follow request not found")
    if request.to_user_id != actor.id:
        raise AuthorizationDenied("Not authorized to act on this follow request")

    # Compare-and-set so a request is accepted or rejected at most once.
    result = db.execute(
        update(FollowRequest)
        .where(FollowRequest.id == request_id, FollowRequest.status == PENDING)
        .values(status=new_status, updated_at=now_ms())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise InvalidState("Follow request is no longer pending")
    return request


def _request_view(db: Session, request: FollowRequest, resolver: MediaResolver | None) -> FollowRequestView:
    requester = db.get(User, request.from_user_id) if resolver is not None else None
    return FollowRequestView(
        id=request.id,
        from_user_id=request.from_user_id,
        to_user_id=request.to_user_id,
        status=request.status,
        created_at=request.created_at,
        updated_at=request.updated_at,
        user=user_summary(requester, resolver) if requester is not None and resolver else None,
    )


def accept_follow_request(
    db: Session,
    actor: User,
    request_id: int,
    resolver: MediaResolver | None = None,
) -> FollowRequestView:
    """Accept a pending request addressed to the actor and create the edge."""
    request = _resolve_request(db, actor, request_id, FollowRequestStatus.ACCEPTED.value)
    if _edge(db, request.from_user_id, request.to_user_id) is None:
        _create_edge(db, request.from_user_id, request.to_user_id)
    db.commit()
    db.refresh(request)
    logger.info("User %s accepted follow request %s", actor.id, request_id)
    return _request_view(db, request, resolver)


def reject_follow_request(
    db: Session,
    actor: User,
    request_id: int,
    resolver: MediaResolver | None = None,
) -> FollowRequestView:
    """Reject a pending request addressed to the actor. No edge is created."""
    request = _resolve_request(db, actor, request_id, FollowRequestStatus.REJECTED.value)
    db.commit()
    db.refresh(request)
    logger.info("User %s rejected follow request %s", actor.id, request_id)
    return _request_view(db, request, resolver)


def cancel_follow_request(db: Session, actor: User, target_id: int) -> CancelRequestResult:
    """Withdraw the actor's pending request to ``target_id``, if any."""
    result = db.execute(
        delete(FollowRequest)
        .where(
            FollowRequest.from_user_id == actor.id,
            FollowRequest.to_user_id == target_id,
            FollowRequest.status == PENDING,
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return CancelRequestResult(cancelled=bool(result.rowcount))


def get_followers(db: Session, user_id: int) -> Sequence[User]:
    """Users following ``user_id``, most recent first."""
    get_user_or_404(db, user_id)
    return (
        db.query(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
        .all()
    )


def get_following(db: Session, user_id: int) -> Sequence[User]:
    """Users that ``user_id`` follows, most recent first."""
    get_user_or_404(db, user_id)
    return (
        db.query(User)
        .join(Follow, Follow.following_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
        .all()
    )


def is_following(db: Session, actor: User | None, target_id: int) -> bool:
    if actor is None:
        return False
    return _edge(db, actor.id, target_id) is not None


def _count_edges(db: Session, column, user_id: int) -> int:
    return db.query(func.count(Follow.id)).filter(column == user_id).scalar() or 0


def get_follow_status(db: Session, viewer: User | None, target_id: int) -> FollowStatus:
    """Viewer-relative follow state with counts taken from the edges themselves."""
    get_user_or_404(db, target_id)
    has_pending = viewer is not None and _pending_request(db, viewer.id, target_id) is not None
    return FollowStatus(
        is_following=is_following(db, viewer, target_id),
        has_pending_request=has_pending,
        followers_count=_count_edges(db, Follow.following_id, target_id),
        following_count=_count_edges(db, Follow.follower_id, target_id),
    )


def get_pending_follow_requests(
    db: Session,
    actor: User,
    resolver: MediaResolver,
) -> list[FollowRequestView]:
    """Pending requests addressed to the actor, newest first."""
    requests = (
        db.query(FollowRequest)
        .filter(FollowRequest.to_user_id == actor.id, FollowRequest.status == PENDING)
        .order_by(FollowRequest.created_at.desc(), FollowRequest.id.desc())
        .all()
    )
    return [_request_view(db, request, resolver) for request in requests]


def reconcile_followers_count(db: Session, user_id: int) -> int:
    """Recompute ``followers_count`` from the edge table and store it."""
    user = get_user_or_404(db, user_id)
    actual = _count_edges(db, Follow.following_id, user_id)
    if user.followers_count != actual:
        logger.warning(
            "Reconciled followers_count for user %s: %s -> %s",
            user_id,
            user.followers_count,
            actual,
        )
        user.followers_count = actual
    db.commit()
    return actual
