"""initial schema

Revision ID: 5c1e2a9b7d40
Revises:
Create Date: 2026-10-19 09:12:41.508133

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a9b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PENDING_ONLY = sa.text("status = 'pending'")


def upgrade() -> None:
    """Create users, posts, engagement and follow graph tables."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("avatar_kind", sa.String(length=16), nullable=True),
        sa.Column("avatar_value", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("push_token", sa.Text(), nullable=True),
        sa.Column("college", sa.Text(), nullable=True),
        sa.Column("course", sa.Text(), nullable=True),
        sa.Column("branch", sa.Text(), nullable=True),
        sa.Column("semester", sa.Text(), nullable=True),
        sa.Column("followers_count", sa.Integer(), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("followers_count >= 0", name="ck_user_followers_count_non_negative"),
        sa.CheckConstraint(
            "avatar_kind IS NULL OR avatar_kind IN ('url', 'handle')",
            name="ck_user_avatar_kind",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_account_external_id", "user_account", ["external_id"], unique=True)
    op.create_index("ix_user_account_username", "user_account", ["username"], unique=False)

    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("parent_post_id", sa.Integer(), nullable=True),
        sa.Column("parent_comment_id", sa.Integer(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("media", sa.JSON(), nullable=False),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("retweet_count", sa.Integer(), nullable=False),
        sa.Column("is_draft", sa.Boolean(), nullable=False),
        sa.Column("is_scheduled", sa.Boolean(), nullable=False),
        sa.Column("is_posted", sa.Boolean(), nullable=False),
        sa.Column("scheduled_for", sa.BigInteger(), nullable=True),
        sa.Column("is_poll", sa.Boolean(), nullable=False),
        sa.Column("poll_question", sa.Text(), nullable=True),
        sa.Column("poll_options", sa.JSON(), nullable=True),
        sa.Column("poll_duration_hours", sa.Integer(), nullable=True),
        sa.Column("poll_multiple_choice", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("NOT (is_posted AND is_scheduled)", name="ck_post_not_posted_and_scheduled"),
        sa.CheckConstraint("like_count >= 0", name="ck_post_like_count_non_negative"),
        sa.CheckConstraint("comment_count >= 0", name="ck_post_comment_count_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["parent_post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_comment_id"], ["post.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_user_id", "post", ["user_id"], unique=False)
    op.create_index("ix_post_parent_comment_id", "post", ["parent_comment_id"], unique=False)
    op.create_index("ix_post_user_posted", "post", ["user_id", "is_posted"], unique=False)
    op.create_index("ix_post_user_draft", "post", ["user_id", "is_draft"], unique=False)
    op.create_index("ix_post_parent_posted", "post", ["parent_post_id", "is_posted"], unique=False)
    op.create_index(
        "ix_post_scheduled",
        "post",
        ["is_scheduled", "is_posted", "scheduled_for"],
        unique=False,
    )

    op.create_table(
        "post_like",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_post_like_user_post"),
    )
    op.create_index("ix_post_like_post_id", "post_like", ["post_id"], unique=False)

    op.create_table(
        "saved_post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("saved_at", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_saved_post_user_post"),
    )
    op.create_index("ix_saved_post_user_id", "saved_post", ["user_id"], unique=False)

    op.create_table(
        "poll_vote",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("poll_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("option_index", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["poll_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "poll_id", name="uq_poll_vote_user_poll"),
    )
    op.create_index("ix_poll_vote_poll_id", "poll_vote", ["poll_id"], unique=False)

    op.create_table(
        "follow",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("follower_id", sa.Integer(), nullable=False),
        sa.Column("following_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follow_no_self_edge"),
        sa.ForeignKeyConstraint(["follower_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["following_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
    )
    op.create_index("ix_follow_following", "follow", ["following_id"], unique=False)

    op.create_table(
        "follow_request",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("to_user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["from_user_id"], ["user_account.id"]),
        sa.ForeignKeyConstraint(["to_user_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_follow_request_pending_pair",
        "follow_request",
        ["from_user_id", "to_user_id"],
        unique=True,
        sqlite_where=PENDING_ONLY,
        postgresql_where=PENDING_ONLY,
    )
    op.create_index("ix_follow_request_to_status", "follow_request", ["to_user_id", "status"], unique=False)


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_follow_request_to_status", table_name="follow_request")
    op.drop_index("uq_follow_request_pending_pair", table_name="follow_request")
    op.drop_table("follow_request")
    op.drop_index("ix_follow_following", table_name="follow")
    op.drop_table("follow")
    op.drop_index("ix_poll_vote_poll_id", table_name="poll_vote")
    op.drop_table("poll_vote")
    op.drop_index("ix_saved_post_user_id", table_name="saved_post")
    op.drop_table("saved_post")
    op.drop_index("ix_post_like_post_id", table_name="post_like")
    op.drop_table("post_like")
    op.drop_index("ix_post_scheduled", table_name="post")
    op.drop_index("ix_post_parent_posted", table_name="post")
    op.drop_index("ix_post_user_draft", table_name="post")
    op.drop_index("ix_post_user_posted", table_name="post")
    op.drop_index("ix_post_parent_comment_id", table_name="post")
    op.drop_index("ix_post_user_id", table_name="post")
    op.drop_table("post")
    op.drop_index("ix_user_account_username", table_name="user_account")
    op.drop_index("ix_user_account_external_id", table_name="user_account")
    op.drop_table("user_account")
