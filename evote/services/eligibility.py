"""Eligibility gate — maps a requested action to allow/deny from a TimelineStatus.

Pure and side-effect free.  Call it immediately before each state-changing
operation; never hold a decision across one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from evote.core.exceptions import EligibilityError, VotingClosedError
from evote.domain.stage import StageCategory
from evote.services.timeline import TimelineStatus


class Action(str, enum.Enum):
    REGISTER = "register"
    APPLY = "apply"
    VOTE = "vote"
    VIEW_RESULTS = "view_results"


class DenyReason(str, enum.Enum):
    STAGE_NOT_OPEN = "STAGE_NOT_OPEN"
    STAGE_CLOSED = "STAGE_CLOSED"
    RESULTS_NOT_PUBLISHED = "RESULTS_NOT_PUBLISHED"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def Deny(reason: DenyReason) -> Decision:  # noqa: N802 - reads like a variant
    return Decision(allowed=False, reason=reason)


_WINDOWED = {
    Action.REGISTER: StageCategory.REGISTRATION,
    Action.APPLY: StageCategory.APPLICATION,
    Action.VOTE: StageCategory.VOTING,
}


def authorize(action: Action, status: TimelineStatus) -> Decision:
    if action is Action.VIEW_RESULTS:
        return ALLOW if status.is_results_published else Deny(DenyReason.RESULTS_NOT_PUBLISHED)

    stage = status.stage_for(_WINDOWED[action])
    now = status.evaluated_at
    if stage is None:
        return Deny(DenyReason.STAGE_NOT_OPEN)
    # A passed window is closed whether or not the stage is still flagged active
    if stage.has_ended(now):
        return Deny(DenyReason.STAGE_CLOSED)
    if not stage.is_active or not stage.has_started(now):
        return Deny(DenyReason.STAGE_NOT_OPEN)
    return ALLOW


def require(action: Action, status: TimelineStatus) -> None:
    """Raise the matching 403 when ``action`` is not permitted."""
    decision = authorize(action, status)
    if decision:
        return
    reason = decision.reason.value
    if action is Action.VOTE:
        raise VotingClosedError(reason)
    raise EligibilityError(action.value, reason)
