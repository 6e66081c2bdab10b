"""Per-user engagement records: likes, bookmarks and poll votes."""

from sqlalchemy import BigInteger, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from campus_threads.db.session import Base
from campus_threads.db.time import now_ms


class Like(Base):
    """A user's like on a post; at most one per (user, post)."""

    __tablename__ = "post_like"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_post_like_user_post"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id"), nullable=False)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


class SavedPost(Base):
    """A bookmark. Same toggle rules as a like, without a counter."""

    __tablename__ = "saved_post"
    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_saved_post_user_post"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    saved_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)


class PollVote(Base):
    """A user's current choice on a poll post."""

    __tablename__ = "poll_vote"
    # One vote per user per poll; re-voting updates or retracts this row.
    __table_args__ = (UniqueConstraint("user_id", "poll_id", name="uq_poll_vote_user_poll"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    poll_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_account.id"), nullable=False)
    option_index: Mapped[int] = mapped_column(Integer, nullable=False)
