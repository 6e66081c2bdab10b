"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import MediaRef, Page, PaginationOpts
from .follow import CancelRequestResult, FollowRequestView, FollowResult, FollowStatus, UnfollowResult
from .poll import PollOptionResult, PollResults, PollVoteCreate, PollVoteResult
from .post import (
    CommentNode,
    DeleteResult,
    DraftSave,
    LikeResult,
    PollSpec,
    PostCreate,
    PostView,
    PublishResult,
    SaveResult,
    SweepResult,
)
from .user import AvatarUpdate, PrivacyUpdate, UserProfile, UserSummary, UserSync, UserUpdate

__all__ = [
    "MediaRef", "Page", "PaginationOpts",
    "CancelRequestResult", "FollowRequestView", "FollowResult", "FollowStatus", "UnfollowResult",
    "PollOptionResult", "PollResults", "PollVoteCreate", "PollVoteResult",
    "CommentNode", "DeleteResult", "DraftSave", "LikeResult", "PollSpec", "PostCreate",
    "PostView", "PublishResult", "SaveResult", "SweepResult",
    "AvatarUpdate", "PrivacyUpdate", "UserProfile", "UserSummary", "UserSync", "UserUpdate",
]
