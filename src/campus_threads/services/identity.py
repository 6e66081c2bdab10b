"""Resolve the acting user from the identity provider's subject id."""
from __future__ import annotations

from sqlalchemy.orm import Session

from campus_threads.core.errors import AuthenticationRequired
from campus_threads.models import User

__all__ = ["user_by_external_id", "get_current_user", "get_current_user_or_throw"]


def user_by_external_id(db: Session, external_id: str) -> User | None:
    """Return the user record linked to an external subject id."""
    return db.query(User).filter(User.external_id == external_id).one_or_none()


def get_current_user(db: Session, subject: str | None) -> User | None:
    """Return the caller's user record, or None when there is no session."""
    if not subject:
        return None
    return user_by_external_id(db, subject)


def get_current_user_or_throw(db: Session, subject: str | None) -> User:
    """Return the caller's user record.

    Raises:
        AuthenticationRequired: If there is no session or the subject has no
            matching user record yet.
    """
    user = get_current_user(db, subject)
    if user is None:
        raise AuthenticationRequired("Can't get current user")
    return user
