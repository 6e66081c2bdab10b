"""User profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from campus_threads.api.v1.dependencies import (
    CurrentUserDep,
    MediaResolverDep,
    OptionalUserDep,
    SessionDep,
    SubjectDep,
)
from campus_threads.core.errors import AuthenticationRequired, NotFound
from campus_threads.schemas.user import (
    AvatarUpdate,
    PrivacyUpdate,
    UserProfile,
    UserSummary,
    UserSync,
    UserUpdate,
)
from campus_threads.services import user_service
from campus_threads.services.identity import user_by_external_id
from campus_threads.services.views import user_profile, user_summary

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync", response_model=UserProfile)
def sync_current_user(
    payload: UserSync,
    db: SessionDep,
    subject: SubjectDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    """Create or refresh the caller's user record from identity-provider data.

    The token subject must match ``payload.external_id``; a caller can only
    sync their own record.
    """
    if subject is None:
        raise AuthenticationRequired()
    if payload.external_id != subject:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token subject does not match external_id",
        )
    user, _ = user_service.sync_user(db, payload)
    return user_profile(user, resolver)


@router.get("/me", response_model=UserProfile)
def get_me(current_user: CurrentUserDep, resolver: MediaResolverDep) -> UserProfile:
    """Return the caller's full profile."""
    return user_profile(current_user, resolver)


@router.put("/me/avatar", response_model=UserProfile)
def set_avatar(
    payload: AvatarUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    user = user_service.update_avatar(db, current_user, payload.avatar)
    return user_profile(user, resolver)


@router.delete("/me/avatar", response_model=UserProfile)
def clear_avatar(
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    user = user_service.update_avatar(db, current_user, None)
    return user_profile(user, resolver)


@router.put("/me/privacy", response_model=UserProfile)
def set_privacy(
    payload: PrivacyUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    """Switch the caller's account between public and private."""
    user = user_service.set_privacy(db, current_user, payload.is_private)
    return user_profile(user, resolver)


@router.get("/search", response_model=list[UserSummary])
def search_users(
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
    q: Annotated[str, Query(max_length=100, description="Text to match")] = "",
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[UserSummary]:
    """Case-insensitive search on usernames and names."""
    users = user_service.search_users(db, viewer, q, limit)
    return [user_summary(user, resolver) for user in users]


@router.get("/recommended", response_model=list[UserSummary])
def recommended_users(
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> list[UserSummary]:
    """Most-followed users, excluding the caller."""
    users = user_service.get_recommended_users(db, viewer, limit)
    return [user_summary(user, resolver) for user in users]


@router.get("/by-external/{external_id}", response_model=UserSummary)
def get_user_by_external_id(
    external_id: str,
    db: SessionDep,
    resolver: MediaResolverDep,
) -> UserSummary:
    user = user_by_external_id(db, external_id)
    if user is None:
        raise NotFound("User not found")
    return user_summary(user, resolver)


@router.get("/{user_id}", response_model=UserProfile)
def get_user(
    user_id: int,
    db: SessionDep,
    viewer: OptionalUserDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    """Return a user's profile. Email is only included for the caller's own record."""
    user = user_service.get_user_or_404(db, user_id)
    profile = user_profile(user, resolver)
    if viewer is None or viewer.id != user.id:
        profile.email = None
    return profile


@router.patch("/{user_id}", response_model=UserProfile)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
    resolver: MediaResolverDep,
) -> UserProfile:
    """Apply partial profile changes to the caller's own record."""
    user = user_service.update_profile(db, current_user, user_id, payload)
    return user_profile(user, resolver)
