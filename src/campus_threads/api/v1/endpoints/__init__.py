"""API endpoint modules for version 1."""

from .drafts import router as drafts_router
from .follows import requests_router as follow_requests_router
from .follows import router as follows_router
from .media import router as media_router
from .polls import router as polls_router
from .posts import router as posts_router
from .system import router as system_router
from .users import router as users_router
from .webhooks import router as webhooks_router

__all__ = [
    "users_router",
    "follows_router",
    "follow_requests_router",
    "posts_router",
    "drafts_router",
    "polls_router",
    "media_router",
    "system_router",
    "webhooks_router",
]
