"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .common import MediaRef


class UserSummary(BaseModel):
    """Creator/follower card inlined into other view models."""

    id: int
    external_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    followers_count: int = 0


class UserProfile(UserSummary):
    """Full profile as returned by profile lookups."""

    email: str | None = None
    avatar: MediaRef | None = None
    bio: str | None = None
    website_url: str | None = None
    location: str | None = None
    is_private: bool = False
    college: str | None = None
    course: str | None = None
    branch: str | None = None
    semester: str | None = None
    created_at: int | None = None


class UserSync(BaseModel):
    """Identity-provider fields pushed on sign-in or by the webhook."""

    external_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    username: str | None = None


class UserUpdate(BaseModel):
    """Editable profile fields. Unset fields are left untouched."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    username: str | None = Field(None, max_length=50)
    bio: str | None = Field(None, max_length=500)
    website_url: str | None = Field(None, max_length=2048)
    location: str | None = Field(None, max_length=200)
    push_token: str | None = None
    college: str | None = Field(None, max_length=200)
    course: str | None = Field(None, max_length=200)
    branch: str | None = Field(None, max_length=200)
    semester: str | None = Field(None, max_length=50)

    model_config = ConfigDict(extra="forbid")


class AvatarUpdate(BaseModel):
    avatar: MediaRef


class PrivacyUpdate(BaseModel):
    is_private: bool
