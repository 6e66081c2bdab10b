"""Poll voting and result aggregation.

Each user holds at most one vote per poll. Voting for the option already
chosen retracts the vote; voting for another option moves it.
"""
from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_threads.core.errors import InvalidState, ValidationError
from campus_threads.models import PollVote, Post, User
from campus_threads.schemas.poll import PollOptionResult, PollResults, PollVoteResult
from campus_threads.services.content import get_post_or_404

logger = logging.getLogger(__name__)

__all__ = ["vote_poll", "get_poll_results"]


def _get_poll(db: Session, poll_id: int) -> Post:
    poll = get_post_or_404(db, poll_id)
    if not poll.is_poll:
        raise InvalidState("This is not a poll")
    return poll


def _existing_vote(db: Session, user_id: int, poll_id: int) -> PollVote | None:
    return (
        db.query(PollVote)
        .filter(PollVote.user_id == user_id, PollVote.poll_id == poll_id)
        .one_or_none()
    )


def vote_poll(db: Session, actor: User, poll_id: int, option_index: int) -> PollVoteResult:
    """Cast, move or retract the actor's vote on a poll."""
    poll = _get_poll(db, poll_id)
    options = poll.poll_options or []
    if not 0 <= option_index < len(options):
        raise ValidationError("Poll option index out of range")

    existing = _existing_vote(db, actor.id, poll.id)
    if existing is not None:
        if existing.option_index == option_index:
            db.delete(existing)
            db.commit()
            logger.debug("User %s retracted vote on poll %s", actor.id, poll.id)
            return PollVoteResult(action="removed", option_index=None)
        existing.option_index = option_index
        db.commit()
        return PollVoteResult(action="updated", option_index=option_index)

    try:
        with db.begin_nested():
            db.add(PollVote(poll_id=poll.id, user_id=actor.id, option_index=option_index))
    except IntegrityError:
        # A concurrent vote landed first; move it to the requested option.
        existing = _existing_vote(db, actor.id, poll.id)
        if existing is not None:
            existing.option_index = option_index
        db.commit()
        return PollVoteResult(action="updated", option_index=option_index)
    db.commit()
    return PollVoteResult(action="created", option_index=option_index)


def get_poll_results(db: Session, viewer: User | None, poll_id: int) -> PollResults:
    """Per-option voters, counts and rounded percentages, plus the viewer's vote."""
    poll = _get_poll(db, poll_id)
    votes = db.query(PollVote).filter(PollVote.poll_id == poll.id).order_by(PollVote.id).all()

    voters_by_option: dict[int, list[int]] = defaultdict(list)
    user_vote: int | None = None
    for vote in votes:
        voters_by_option[vote.option_index].append(vote.user_id)
        if viewer is not None and vote.user_id == viewer.id:
            user_vote = vote.option_index

    total = len(votes)
    option_count = max(len(poll.poll_options or []), max(voters_by_option, default=-1) + 1)
    results = [
        PollOptionResult(
            option_index=index,
            voters=voters_by_option.get(index, []),
            count=len(voters_by_option.get(index, [])),
            percentage=round(len(voters_by_option.get(index, [])) / total * 100) if total else 0,
        )
        for index in range(option_count)
    ]
    return PollResults(total_votes=total, results=results, user_vote=user_vote)
