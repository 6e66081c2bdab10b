"""Tests for poll voting and results."""

import pytest

from campus_threads.core.errors import InvalidState, NotFound, ValidationError
from campus_threads.models import PollVote
from campus_threads.schemas.post import PollSpec, PostCreate
from campus_threads.services import content, polls
from tests.factories import create_post, create_user


@pytest.fixture()
def poll(db_session, alice):
    return content.create_post(
        db_session,
        alice,
        PostCreate(
            content="Where do we meet?",
            poll=PollSpec(question="Venue", options=["Library", "Cafe", "Quad"], duration_hours=24),
        ),
    )


def _count(results, option_index: int) -> int:
    return results.results[option_index].count


def test_vote_tri_state(db_session, poll, bob) -> None:
    first = polls.vote_poll(db_session, bob, poll.id, 0)
    after_first = polls.get_poll_results(db_session, bob, poll.id)
    assert first.action == "created"
    assert _count(after_first, 0) == 1
    assert after_first.user_vote == 0

    second = polls.vote_poll(db_session, bob, poll.id, 0)
    after_second = polls.get_poll_results(db_session, bob, poll.id)
    assert second.action == "removed"
    assert _count(after_second, 0) == 0
    assert after_second.user_vote is None

    polls.vote_poll(db_session, bob, poll.id, 0)
    third = polls.vote_poll(db_session, bob, poll.id, 1)
    after_third = polls.get_poll_results(db_session, bob, poll.id)
    assert third.action == "updated"
    assert _count(after_third, 0) == 0
    assert _count(after_third, 1) == 1
    assert db_session.query(PollVote).count() == 1


def test_results_percentages_and_voters(db_session, poll, alice, bob) -> None:
    voters = [create_user(db_session) for _ in range(2)]
    polls.vote_poll(db_session, alice, poll.id, 0)
    polls.vote_poll(db_session, bob, poll.id, 0)
    polls.vote_poll(db_session, voters[0], poll.id, 1)

    results = polls.get_poll_results(db_session, voters[1], poll.id)

    assert results.total_votes == 3
    assert [r.count for r in results.results] == [2, 1, 0]
    assert [r.percentage for r in results.results] == [67, 33, 0]
    assert results.results[0].voters == [alice.id, bob.id]
    assert results.user_vote is None


def test_results_without_votes(db_session, poll) -> None:
    results = polls.get_poll_results(db_session, None, poll.id)

    assert results.total_votes == 0
    assert [r.percentage for r in results.results] == [0, 0, 0]


def test_vote_rejects_non_poll_and_bad_index(db_session, alice, bob, poll) -> None:
    plain = create_post(db_session, alice)

    with pytest.raises(InvalidState):
        polls.vote_poll(db_session, bob, plain.id, 0)
    with pytest.raises(ValidationError):
        polls.vote_poll(db_session, bob, poll.id, 3)
    with pytest.raises(NotFound):
        polls.vote_poll(db_session, bob, 99999, 0)
