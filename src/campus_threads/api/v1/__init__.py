"""Version 1 API endpoints."""

from .endpoints import (
    drafts_router,
    follow_requests_router,
    follows_router,
    media_router,
    polls_router,
    posts_router,
    system_router,
    users_router,
    webhooks_router,
)

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
