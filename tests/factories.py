"""Helpers for building persisted test data."""

from __future__ import annotations

from itertools import count
from typing import Any

from sqlalchemy.orm import Session

from campus_threads.core.security import create_access_token
from campus_threads.db.time import now_ms
from campus_threads.models import Post, User

_USER_COUNTER = count(1)


class FakeBlobStorage:
    """In-memory blob storage: known handles resolve, unknown ones return None."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.broken: set[str] = set()
        self.uploads = 0

    def add(self, handle: str, url: str | None = None) -> str:
        self.files[handle] = url or f"https://blobs.test/{handle}"
        return self.files[handle]

    def generate_upload_url(self) -> str:
        self.uploads += 1
        return f"https://blobs.test/upload/{self.uploads}"

    def get_url(self, handle: str) -> str | None:
        if handle in self.broken:
            raise RuntimeError(f"storage unavailable for {handle}")
        return self.files.get(handle)


def create_user(db: Session, **overrides: Any) -> User:
    """Persist a user with unique identity fields."""
    n = next(_USER_COUNTER)
    fields: dict[str, Any] = {
        "external_id": f"user_{n}",
        "email": f"user{n}@campus.test",
        "first_name": f"First{n}",
        "last_name": f"Last{n}",
        "username": f"user{n}",
        "followers_count": 0,
        "is_private": False,
    }
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_post(db: Session, author: User, **overrides: Any) -> Post:
    """Persist a published top-level post directly, bypassing the content engine."""
    fields: dict[str, Any] = {
        "user_id": author.id,
        "content": "hello campus",
        "media": [],
        "is_posted": True,
        "is_draft": False,
        "is_scheduled": False,
        "created_at": now_ms(),
    }
    fields.update(overrides)
    post = Post(**fields)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.external_id)}"}
