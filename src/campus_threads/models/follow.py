"""Models for the follow graph and private-account follow requests."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from campus_threads.db.session import Base
from campus_threads.db.time import now_ms


class FollowRequestStatus(str, Enum):
    """Lifecycle of a follow request. ``accepted`` and ``rejected`` are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Follow(Base):
    """Directed edge: ``follower_id`` follows ``following_id``."""

    __tablename__ = "follow"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follow_no_self_edge"),
        Index("ix_follow_following", "following_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    following_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


_PENDING_ONLY = text("status = 'pending'")


class FollowRequest(Base):
    """Approval gate for following a private account."""

    __tablename__ = "follow_request"
    __table_args__ = (
        # At most one pending request per ordered pair; history rows may repeat.
        Index(
            "uq_follow_request_pending_pair",
            "from_user_id",
            "to_user_id",
            unique=True,
            sqlite_where=_PENDING_ONLY,
            postgresql_where=_PENDING_ONLY,
        ),
        Index("ix_follow_request_to_status", "to_user_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    from_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    to_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=FollowRequestStatus.PENDING.value,
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
