"""CRUD-style helpers for managing user profiles."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from campus_threads.core.errors import AuthorizationDenied, NotFound
from campus_threads.core.settings import settings
from campus_threads.models import User
from campus_threads.schemas.common import MediaRef
from campus_threads.schemas.user import UserSync, UserUpdate
from campus_threads.services.identity import user_by_external_id

logger = logging.getLogger(__name__)

__all__ = [
    "get_user",
    "get_user_or_404",
    "sync_user",
    "update_profile",
    "update_avatar",
    "set_privacy",
    "search_users",
    "get_recommended_users",
]


def get_user(db: Session, user_id: int) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _default_username(data: UserSync) -> str | None:
    if data.username:
        return data.username
    return f"{data.first_name or ''}{data.last_name or ''}" or None


def sync_user(db: Session, data: UserSync) -> tuple[User, bool]:
    """Create or refresh the user linked to ``data.external_id``.

    Safe to call on every sign-in and from the provider webhook. An avatar the
    user uploaded themselves (a storage handle) is never replaced by the
    provider's profile image.

    Returns:
        The user record and whether it was newly created.
    """
    existing = user_by_external_id(db, data.external_id)
    if existing is not None:
        existing.email = data.email
        existing.first_name = data.first_name
        existing.last_name = data.last_name
        if data.image_url and existing.avatar_kind != "handle":
            existing.avatar_kind = "url"
            existing.avatar_value = data.image_url
        db.commit()
        db.refresh(existing)
        logger.debug("Synced existing user %s", existing.id)
        return existing, False

    user = User(
        external_id=data.external_id,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        username=_default_username(data),
        avatar_kind="url" if data.image_url else None,
        avatar_value=data.image_url,
        followers_count=0,
        is_private=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s for external subject %s", user.id, data.external_id)
    return user, True


def update_profile(db: Session, actor: User, user_id: int, update_data: UserUpdate) -> User:
    """Apply partial profile updates. Users may only edit their own record."""
    user = get_user_or_404(db, user_id)
    if user.id != actor.id:
        raise AuthorizationDenied("Not authorized to edit this profile")

    for key, value in update_data.model_dump(exclude_unset=True).items():
        setattr(user, key, value)

    db.commit()
    db.refresh(user)
    return user


def update_avatar(db: Session, actor: User, avatar: MediaRef | None) -> User:
    """Replace the actor's avatar with a URL or an uploaded storage handle."""
    actor.avatar_kind = avatar.kind if avatar else None
    actor.avatar_value = avatar.value if avatar else None
    db.commit()
    db.refresh(actor)
    return actor


def set_privacy(db: Session, actor: User, is_private: bool) -> User:
    """Switch the actor's account between public and private."""
    actor.is_private = is_private
    db.commit()
    db.refresh(actor)
    logger.info("User %s set is_private=%s", actor.id, is_private)
    return actor


def search_users(
    db: Session,
    viewer: User | None,
    search_text: str,
    limit: int | None = None,
) -> Sequence[User]:
    """Case-insensitive substring search on username and names.

    This is a scan with ``LIKE``; it is only meant for small user bases.
    """
    text = search_text.strip().lower()
    if not text:
        return []

    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    query = db.query(User).filter(
        or_(
            func.lower(func.coalesce(User.username, "")).like(pattern, escape="\\"),
            func.lower(func.coalesce(User.first_name, "")).like(pattern, escape="\\"),
            func.lower(func.coalesce(User.last_name, "")).like(pattern, escape="\\"),
        )
    )
    if viewer is not None:
        query = query.filter(User.id != viewer.id)
    return query.order_by(User.id).limit(limit or settings.search_result_limit).all()


def get_recommended_users(
    db: Session,
    viewer: User | None,
    limit: int | None = None,
) -> Sequence[User]:
    """Return the most-followed users other than the viewer."""
    query = db.query(User)
    if viewer is not None:
        query = query.filter(User.id != viewer.id)
    return (
        query.order_by(User.followers_count.desc(), User.id)
        .limit(limit or settings.search_result_limit)
        .all()
    )
