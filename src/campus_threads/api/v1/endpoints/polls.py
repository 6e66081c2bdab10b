"""Poll voting endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from campus_threads.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from campus_threads.schemas.poll import PollResults, PollVoteCreate, PollVoteResult
from campus_threads.services import polls

router = APIRouter(prefix="/polls", tags=["polls"])


@router.post("/{poll_id}/votes", response_model=PollVoteResult)
def vote(
    poll_id: int,
    payload: PollVoteCreate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> PollVoteResult:
    """Vote for an option; voting for the current choice again retracts the vote."""
    return polls.vote_poll(db, current_user, poll_id, payload.option_index)


@router.get("/{poll_id}/results", response_model=PollResults)
def results(poll_id: int, db: SessionDep, viewer: OptionalUserDep) -> PollResults:
    return polls.get_poll_results(db, viewer, poll_id)
