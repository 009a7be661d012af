"""Result aggregation and turnout."""

from dataclasses import replace
from types import SimpleNamespace

import pytest

from evote.core.exceptions import EligibilityError
from evote.domain import Voter
from evote.services.results import ResultsService, compute_results, compute_turnout
from evote.services.timeline import get_status

from conftest import AFTER_VOTING, RESULTS_OUT, add_all, utc


def cand(id, votes, position="President", name=None):
    return SimpleNamespace(id=id, full_name=name or id.upper(), vote_count=votes, position=position)


def status(voting_ended=True, published=True):
    base = get_status([], utc(2025, 1, 5))
    return replace(base, is_voting_ended=voting_ended, is_results_published=published)


def test_tie_at_the_top_is_a_draw():
    (result,) = compute_results([cand("a", 10), cand("b", 10), cand("c", 5)], status())
    assert result.total_votes == 25
    assert result.is_draw is True
    assert result.winner is None
    assert [c.percentage for c in result.candidates] == [40.0, 40.0, 20.0]


def test_strict_leader_wins_with_rounded_percentages():
    (result,) = compute_results([cand("b", 10), cand("a", 12)], status())
    assert result.winner.id == "a"
    assert result.winner.percentage == 54.55
    assert result.candidates[1].percentage == 45.45
    assert result.is_draw is False


def test_no_votes_means_no_winner_and_no_draw():
    (result,) = compute_results([cand("a", 0), cand("b", 0)], status())
    assert result.total_votes == 0
    assert result.winner is None
    assert result.is_draw is False
    assert all(c.percentage == 0.0 for c in result.candidates)


def test_lone_candidate_with_votes_wins():
    (result,) = compute_results([cand("a", 3)], status())
    assert result.winner.id == "a"
    assert result.winner.percentage == 100.0


def test_no_winner_while_voting_is_still_open():
    (result,) = compute_results([cand("a", 12), cand("b", 10)], status(voting_ended=False))
    assert result.winner is None
    assert result.total_votes == 22


def test_tallies_withheld_until_published():
    results = compute_results([cand("a", 12), cand("b", 10)], status(published=False))
    assert [(r.position, r.withheld, r.total_votes, r.candidates, r.winner) for r in results] == [
        ("President", True, 0, [], None)
    ]


def test_positions_follow_ballot_order_then_name():
    candidates = [cand("s", 1, "Senate"), cand("z", 1, "Zoo"), cand("p", 1, "President"), cand("a", 1, "Alpha")]
    names = [r.position for r in compute_results(candidates, status(), ["President", "Senate"])]
    assert names == ["President", "Senate", "Alpha", "Zoo"]


def test_equal_counts_rank_by_name():
    (result,) = compute_results([cand("x", 2, name="Zed"), cand("y", 2, name="Amy")], status())
    assert [c.full_name for c in result.candidates] == ["Amy", "Zed"]


@pytest.mark.parametrize("voted,verified,expected", [(0, 0, 0.0), (1, 3, 33.33), (2, 2, 100.0)])
def test_turnout(voted, verified, expected):
    assert compute_turnout(voted, verified).percentage == expected


async def test_results_service_gates_on_publication(session_factory, timeline, ballot, clock):
    clock.now = AFTER_VOTING
    async with session_factory() as session:
        with pytest.raises(EligibilityError) as exc:
            await ResultsService(session, clock).results()
    assert exc.value.code == "RESULTS_NOT_PUBLISHED"


async def test_results_service_reports_positions_and_turnout(session_factory, timeline, ballot, clock):
    await add_all(
        session_factory,
        Voter(id="v1", matric="21/55abc101", name="A", email="a@example.edu", verified=True, voted=True),
        Voter(id="v2", matric="21/55abc102", name="B", email="b@example.edu", verified=True),
        Voter(id="v3", matric="21/55abc103", name="C", email="c@example.edu"),
    )
    clock.now = RESULTS_OUT
    async with session_factory() as session:
        current, positions, turnout = await ResultsService(session, clock).results()

    assert current.is_results_published
    assert [p.position for p in positions] == ["President", "Senate"]
    assert (turnout.voted, turnout.verified, turnout.percentage) == (1, 2, 50.0)
