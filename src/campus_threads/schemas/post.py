"""Post-related Pydantic schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .common import MediaRef
from .user import UserSummary


class PollSpec(BaseModel):
    """Poll attached to a post.

    ``duration_hours`` and ``multiple_choice`` are stored and echoed back;
    the vote path does not enforce them.
    """

    question: str | None = Field(None, max_length=300)
    options: list[str] = Field(default_factory=list)
    duration_hours: int | None = Field(None, ge=1)
    multiple_choice: bool = False


class PostCreate(BaseModel):
    """Composer payload for posts, comments and replies."""

    content: str = Field("", max_length=5000)
    media: list[MediaRef] = Field(default_factory=list)
    website_url: str | None = None
    parent_post_id: int | None = Field(None, description="Post this comments on")
    parent_comment_id: int | None = Field(None, description="Comment this replies to")
    poll: PollSpec | None = None
    scheduled_for: int | None = Field(
        None,
        description="Publish time in epoch milliseconds; past or absent means now",
    )


class DraftSave(BaseModel):
    """Draft upsert payload; ``draft_id`` updates an existing draft in place."""

    content: str = Field("", max_length=5000)
    media: list[MediaRef] = Field(default_factory=list)
    website_url: str | None = None
    parent_post_id: int | None = None
    poll: PollSpec | None = None
    draft_id: int | None = None


class PostView(BaseModel):
    """Denormalised post as shown to one viewer."""

    id: int
    user_id: int
    parent_post_id: int | None = None
    parent_comment_id: int | None = None
    content: str
    media_urls: list[str] = Field(default_factory=list)
    website_url: str | None = None
    like_count: int = 0
    comment_count: int = 0
    retweet_count: int = 0
    is_draft: bool = False
    is_scheduled: bool = False
    is_posted: bool = False
    scheduled_for: int | None = None
    is_poll: bool = False
    poll_question: str | None = None
    poll_options: list[str] | None = None
    poll_duration_hours: int | None = None
    poll_multiple_choice: bool = False
    created_at: int
    creator: UserSummary | None = None
    is_liked: bool = False
    is_following: bool = False
    is_saved: bool = False


class CommentNode(PostView):
    replies: list[CommentNode] = Field(default_factory=list)


class LikeResult(BaseModel):
    action: Literal["like", "unlike"]
    like_count: int


class SaveResult(BaseModel):
    saved: bool


class PublishResult(BaseModel):
    success: bool = True
    duplicate: bool


class SweepResult(BaseModel):
    """Totals from one pass of the scheduled-post sweep."""

    published: int = 0
    skipped: int = 0
    failed: int = 0


class DeleteResult(BaseModel):
    success: bool = True
