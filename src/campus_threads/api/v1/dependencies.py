"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_threads.core.security import decode_subject
from campus_threads.core.settings import settings
from campus_threads.db.session import get_db
from campus_threads.models import User
from campus_threads.schemas.common import PaginationOpts
from campus_threads.services.identity import get_current_user, get_current_user_or_throw
from campus_threads.services.media import MediaResolver, get_media_resolver

# Missing credentials mean an anonymous caller, not an error
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_subject(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the external subject of the bearer token, if one was sent.

    Raises:
        AuthenticationRequired: If a token was sent but does not verify.
    """
    if credentials is None:
        return None
    return decode_subject(credentials.credentials)


SubjectDep = Annotated[str | None, Depends(get_subject)]


def get_optional_user(db: SessionDep, subject: SubjectDep) -> User | None:
    """Resolve the caller's user record, or None for anonymous callers."""
    return get_current_user(db, subject)


def get_required_user(db: SessionDep, subject: SubjectDep) -> User:
    """Resolve the caller's user record.

    Raises:
        AuthenticationRequired: If there is no session or no matching user.
    """
    return get_current_user_or_throw(db, subject)


def get_media_resolver_dep() -> MediaResolver:
    """Return the shared media resolver."""
    return get_media_resolver()


def get_pagination(
    num_items: Annotated[
        int, Query(ge=1, le=settings.max_page_size, description="Page size")
    ] = settings.default_page_size,
    cursor: Annotated[str | None, Query(description="Cursor from the previous page")] = None,
) -> PaginationOpts:
    """Read ``num_items``/``cursor`` query parameters into pagination options."""
    return PaginationOpts(num_items=num_items, cursor=cursor)


OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
CurrentUserDep = Annotated[User, Depends(get_required_user)]
MediaResolverDep = Annotated[MediaResolver, Depends(get_media_resolver_dep)]
PaginationDep = Annotated[PaginationOpts, Depends(get_pagination)]
