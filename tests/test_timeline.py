"""Timeline status derivation."""

from datetime import datetime

import pytest

from evote.domain.stage import StageCategory
from evote.services.timeline import StageWindow, TimelineService, get_status

from conftest import utc


def window(
    id: str,
    category: StageCategory,
    start: datetime,
    end: datetime,
    active: bool = True,
    name: str | None = None,
) -> StageWindow:
    return StageWindow(
        id=id,
        stage_name=name or id,
        category=category,
        start_time=start,
        end_time=end,
        is_active=active,
    )


VOTING_STAGE = window("v", StageCategory.VOTING, utc(2025, 1, 1), utc(2025, 1, 3))


def test_voting_active_inside_window():
    status = get_status([VOTING_STAGE], utc(2025, 1, 2))
    assert status.is_voting_active is True
    assert status.is_voting_ended is False
    assert status.current_stage == VOTING_STAGE
    assert status.voting_end_time == utc(2025, 1, 3)


@pytest.mark.parametrize("active", [True, False])
def test_voting_ended_after_window_regardless_of_active_flag(active):
    stage = window("v", StageCategory.VOTING, utc(2025, 1, 1), utc(2025, 1, 3), active=active)
    status = get_status([stage], utc(2025, 1, 4))
    assert status.is_voting_ended is True
    assert status.is_voting_active is False


def test_inactive_voting_stage_is_not_active_inside_window():
    stage = window("v", StageCategory.VOTING, utc(2025, 1, 1), utc(2025, 1, 3), active=False)
    status = get_status([stage], utc(2025, 1, 2))
    assert status.is_voting_active is False
    assert status.current_stage is None


def test_window_bounds_are_inclusive():
    assert get_status([VOTING_STAGE], utc(2025, 1, 1)).is_voting_active
    assert get_status([VOTING_STAGE], utc(2025, 1, 3)).is_voting_active
    assert not get_status([VOTING_STAGE], utc(2025, 1, 3)).is_voting_ended


def test_results_published_from_start_while_active():
    results = window("r", StageCategory.RESULTS, utc(2025, 1, 4), utc(2025, 1, 5))
    assert get_status([results], utc(2025, 1, 4)).is_results_published
    # Stays published after the window passes
    assert get_status([results], utc(2025, 2, 1)).is_results_published
    assert not get_status([results], utc(2025, 1, 3)).is_results_published

    hidden = window("r", StageCategory.RESULTS, utc(2025, 1, 4), utc(2025, 1, 5), active=False)
    assert not get_status([hidden], utc(2025, 1, 4, 12)).is_results_published


def test_missing_categories_default_to_false_and_none():
    status = get_status([], utc(2025, 1, 2))
    assert status.current_stage is None
    assert status.is_voting_active is False
    assert status.is_voting_ended is False
    assert status.is_results_published is False
    assert status.voting_end_time is None
    assert status.results_publish_time is None


def test_overlapping_stages_resolve_to_earliest_start_then_lowest_id():
    early = window("b", StageCategory.OTHER, utc(2025, 1, 1), utc(2025, 1, 9))
    late = window("a", StageCategory.OTHER, utc(2025, 1, 2), utc(2025, 1, 9))
    twin = window("c", StageCategory.OTHER, utc(2025, 1, 1), utc(2025, 1, 9))

    assert get_status([late, twin, early], utc(2025, 1, 3)).current_stage.id == "b"


def test_category_decides_not_the_name():
    misleading = window("x", StageCategory.OTHER, utc(2025, 1, 1), utc(2025, 1, 3), name="Voting Period")
    assert get_status([misleading], utc(2025, 1, 2)).is_voting_active is False


def test_get_status_is_pure():
    stages = [
        VOTING_STAGE,
        window("r", StageCategory.RESULTS, utc(2025, 1, 4), utc(2025, 1, 5)),
    ]
    now = utc(2025, 1, 2, 6)
    assert get_status(stages, now) == get_status(list(stages), now)


def test_naive_datetimes_are_read_as_utc():
    naive_now = datetime(2025, 1, 2)
    status = get_status([VOTING_STAGE], naive_now)
    assert status.is_voting_active is True
    assert status.evaluated_at.tzinfo is not None


async def test_timeline_service_reads_stages_from_store(session_factory, timeline, clock):
    async with session_factory() as session:
        status = await TimelineService(session, clock).status()

    assert status.current_stage.id == "stage-vote"
    assert status.registration_stage.id == "stage-reg"
    assert status.is_voting_active is True
    assert status.results_publish_time == utc(2025, 1, 4)
