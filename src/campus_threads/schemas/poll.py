"""Poll vote schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class PollVoteCreate(BaseModel):
    option_index: int = Field(..., ge=0)


class PollVoteResult(BaseModel):
    """Which branch of the vote toggle ran."""

    action: Literal["created", "removed", "updated"]
    option_index: int | None


class PollOptionResult(BaseModel):
    option_index: int
    voters: list[int]
    count: int
    percentage: int


class PollResults(BaseModel):
    total_votes: int
    results: list[PollOptionResult]
    user_vote: int | None
