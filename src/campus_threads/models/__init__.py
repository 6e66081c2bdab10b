"""SQLAlchemy models for the Campus Threads core."""

from .engagement import Like, PollVote, SavedPost
from .follow import Follow, FollowRequest, FollowRequestStatus
from .post import Post
from .user import User

__all__ = [
    "Follow", "FollowRequest", "FollowRequestStatus",
    "Like", "PollVote", "SavedPost",
    "Post",
    "User",
]
