"""Eligibility gate decisions."""

import pytest

from evote.core.exceptions import EligibilityError, VotingClosedError
from evote.domain.stage import StageCategory
from evote.services.eligibility import ALLOW, Action, DenyReason, authorize, require
from evote.services.timeline import StageWindow, get_status

from conftest import utc

STAGES = [
    StageWindow("reg", "Registration", StageCategory.REGISTRATION, utc(2024, 12, 1), utc(2024, 12, 31), True),
    StageWindow("app", "Applications", StageCategory.APPLICATION, utc(2024, 12, 10), utc(2024, 12, 20), False),
    StageWindow("vote", "Voting", StageCategory.VOTING, utc(2025, 1, 1), utc(2025, 1, 3), True),
    StageWindow("res", "Results", StageCategory.RESULTS, utc(2025, 1, 4), utc(2025, 1, 10), True),
]


def decide(action, now):
    return authorize(action, get_status(STAGES, now))


@pytest.mark.parametrize(
    "action,now,expected",
    [
        (Action.REGISTER, utc(2024, 12, 15), ALLOW),
        (Action.REGISTER, utc(2024, 11, 30), DenyReason.STAGE_NOT_OPEN),
        (Action.REGISTER, utc(2025, 1, 2), DenyReason.STAGE_CLOSED),
        (Action.APPLY, utc(2024, 12, 15), DenyReason.STAGE_NOT_OPEN),  # inactive stage
        (Action.APPLY, utc(2024, 12, 25), DenyReason.STAGE_CLOSED),
        (Action.VOTE, utc(2024, 12, 31), DenyReason.STAGE_NOT_OPEN),
        (Action.VOTE, utc(2025, 1, 2), ALLOW),
        (Action.VOTE, utc(2025, 1, 3, 0, 0, 1), DenyReason.STAGE_CLOSED),
        (Action.VIEW_RESULTS, utc(2025, 1, 2), DenyReason.RESULTS_NOT_PUBLISHED),
        (Action.VIEW_RESULTS, utc(2025, 1, 4), ALLOW),
    ],
)
def test_authorize(action, now, expected):
    decision = decide(action, now)
    if expected is ALLOW:
        assert decision == ALLOW
        assert bool(decision) is True
    else:
        assert decision.allowed is False
        assert decision.reason is expected


def test_vote_decision_agrees_with_is_voting_active():
    for day in range(1, 6):
        status = get_status(STAGES, utc(2025, 1, day))
        assert bool(authorize(Action.VOTE, status)) == status.is_voting_active


def test_no_stage_for_action_is_not_open():
    assert authorize(Action.APPLY, get_status([], utc(2025, 1, 1))).reason is DenyReason.STAGE_NOT_OPEN


def test_require_raises_voting_closed_for_votes():
    with pytest.raises(VotingClosedError) as exc:
        require(Action.VOTE, get_status(STAGES, utc(2025, 1, 5)))
    assert exc.value.code == "NOT_ELIGIBLE_WINDOW_CLOSED"
    assert exc.value.reason == "STAGE_CLOSED"
    assert exc.value.status_code == 403


def test_require_raises_eligibility_error_with_reason_code():
    with pytest.raises(EligibilityError) as exc:
        require(Action.VIEW_RESULTS, get_status(STAGES, utc(2025, 1, 2)))
    assert exc.value.code == "RESULTS_NOT_PUBLISHED"
    assert not isinstance(exc.value, VotingClosedError)


def test_require_passes_silently_when_allowed():
    require(Action.REGISTER, get_status(STAGES, utc(2024, 12, 2)))
