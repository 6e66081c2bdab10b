"""SQLAlchemy model for posts, comments and replies."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_threads.db.session import Base
from campus_threads.db.time import now_ms


class Post(Base):
    """Unified content entity.

    A top-level post has no ``parent_post_id``. A comment points at the post it
    comments on; a reply additionally points at the comment it answers through
    ``parent_comment_id``.

    Lifecycle flags form a small state machine:
    draft -> posted, or draft/composer -> scheduled -> posted.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint(
            "NOT (is_posted AND is_scheduled)",
            name="ck_post_not_posted_and_scheduled",
        ),
        CheckConstraint("like_count >= 0", name="ck_post_like_count_non_negative"),
        CheckConstraint("comment_count >= 0", name="ck_post_comment_count_non_negative"),
        Index("ix_post_user_posted", "user_id", "is_posted"),
        Index("ix_post_user_draft", "user_id", "is_draft"),
        Index("ix_post_parent_posted", "parent_post_id", "is_posted"),
        Index("ix_post_scheduled", "is_scheduled", "is_posted", "scheduled_for"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )

    # Post -> comment relation; NULL for top-level posts. Comments go with their post.
    parent_post_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=True,
    )
    # Comment -> reply relation inside one comment tree.
    parent_comment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Ordered list of {"kind": "url" | "handle", "value": str}.
    media: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    retweet_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_posted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scheduled_for: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    is_poll: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    poll_question: Mapped[str | None] = mapped_column(Text, nullable=True)
    poll_options: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    # Stored and returned, not enforced by the vote path.
    poll_duration_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    poll_multiple_choice: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
