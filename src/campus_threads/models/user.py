"""SQLAlchemy model for user profiles."""

from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_threads.db.session import Base
from campus_threads.db.time import now_ms


class User(Base):
    """Profile record for a person signed in through the identity provider.

    ``external_id`` is the provider's subject id and is only used at the
    authentication boundary; everything else references ``id``.
    """

    __tablename__ = "user_account"
    __table_args__ = (
        CheckConstraint("followers_count >= 0", name="ck_user_followers_count_non_negative"),
        CheckConstraint(
            "avatar_kind IS NULL OR avatar_kind IN ('url', 'handle')",
            name="ck_user_avatar_kind",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Display/search key only; uniqueness is not enforced.
    username: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)

    # Tagged avatar reference: a fetchable URL or an opaque blob-storage handle.
    avatar_kind: Mapped[str | None] = mapped_column(String(16), nullable=True)
    avatar_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    push_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    college: Mapped[str | None] = mapped_column(Text, nullable=True)
    course: Mapped[str | None] = mapped_column(Text, nullable=True)
    branch: Mapped[str | None] = mapped_column(Text, nullable=True)
    semester: Mapped[str | None] = mapped_column(Text, nullable=True)

    followers_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_ms)
