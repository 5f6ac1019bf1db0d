"""
backend/tests/test_pick_eligibility.py

Purpose:
    Game status precedence, kickoff/completion boundaries and the gameweek
    lock rules.

Dependencies:
    - pytest
    - app.services.pick_eligibility
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import sys

import pytest

sys.path.insert(0, "backend")

from app.services.pick_eligibility import (
    are_picks_locked,
    can_change_existing_pick,
    can_make_first_pick,
    can_pick_from_game,
    compute_game_status,
    game_start,
    game_status_display,
    has_gameweek_started,
    is_game_disabled,
    should_disable_pick_changes,
)

KICKOFF = "2024-01-01T12:00:00Z"


def _at(hh: int, mm: int, ss: int) -> datetime:
    return datetime(2024, 1, 1, hh, mm, ss, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "now, expected",
    [
        (_at(11, 59, 59), "not_started"),
        (_at(12, 0, 0), "in_progress"),
        (_at(14, 29, 59), "in_progress"),
        (_at(14, 30, 0), "in_progress"),
        (_at(14, 30, 1), "completed"),
    ],
)
def test_status_boundaries_around_kickoff(now, expected):
    assert compute_game_status({"start_time": KICKOFF}, now) == expected


def test_manual_override_wins_over_everything():
    game = {
        "start_time": KICKOFF,
        "status": "completed",
        "manual_status_override": "not_started",
    }
    assert compute_game_status(game, _at(20, 0, 0)) == "not_started"
    assert can_pick_from_game(game, _at(20, 0, 0)) is True

    game = {"start_time": "2099-01-01T00:00:00Z", "manual_status_override": "in_progress"}
    assert compute_game_status(game, _at(0, 0, 0)) == "in_progress"


def test_stored_completed_beats_future_start():
    game = {"start_time": "2099-01-01T00:00:00Z", "status": "completed"}
    assert compute_game_status(game, _at(9, 0, 0)) == "completed"
    assert can_pick_from_game(game, _at(9, 0, 0)) is False


def test_stored_in_progress_does_not_beat_the_clock():
    game = {"start_time": KICKOFF, "status": "in_progress"}
    assert compute_game_status(game, _at(10, 0, 0)) == "not_started"


def test_no_time_data_falls_back_to_stored_status():
    assert compute_game_status({}, _at(12, 0, 0)) == "not_started"
    assert compute_game_status({"status": "in_progress"}, _at(12, 0, 0)) == "in_progress"
    assert compute_game_status({"start_time": None, "date": None}, _at(12, 0, 0)) == "not_started"


def test_date_used_when_start_time_missing():
    game = {"date": KICKOFF}
    assert compute_game_status(game, _at(13, 0, 0)) == "in_progress"
    assert game_start(game) == _at(12, 0, 0)


def test_start_time_preferred_over_date():
    game = {"start_time": "2024-01-01T15:00:00Z", "date": KICKOFF}
    assert compute_game_status(game, _at(13, 0, 0)) == "not_started"


def test_unparseable_time_is_treated_as_absent():
    game = {"start_time": "next tuesday", "status": "in_progress"}
    assert compute_game_status(game, _at(12, 0, 0)) == "in_progress"
    assert can_change_existing_pick({"start_time": "garbage"}, _at(12, 0, 0)) is True


def test_naive_datetimes_and_offsets_are_utc():
    naive = {"start_time": datetime(2024, 1, 1, 12, 0, 0)}
    assert compute_game_status(naive, _at(11, 59, 59)) == "not_started"
    assert compute_game_status(naive, _at(12, 0, 0)) == "in_progress"

    offset = {"start_time": "2024-01-01T13:00:00+01:00"}
    assert compute_game_status(offset, _at(12, 0, 0)) == "in_progress"


def test_unknown_status_values_are_ignored():
    game = {"start_time": KICKOFF, "status": "postponed", "manual_status_override": "bogus"}
    assert compute_game_status(game, _at(11, 0, 0)) == "not_started"


def test_kickoff_near_datetime_max_does_not_overflow():
    game = {"start_time": "9999-12-31T23:00:00Z"}
    assert compute_game_status(game, _at(12, 0, 0)) == "not_started"
    assert can_pick_from_game(game, _at(12, 0, 0)) is True
    assert can_change_existing_pick(game, _at(12, 0, 0)) is True

    late = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert compute_game_status(game, late) == "in_progress"

    # converting this offset to UTC lands past datetime.max: treated as no time data
    beyond = {"start_time": "9999-12-31T23:00:00-05:00", "status": "in_progress"}
    assert compute_game_status(beyond, _at(12, 0, 0)) == "in_progress"


def test_custom_buffer():
    game = {"start_time": KICKOFF}
    assert compute_game_status(game, _at(13, 30, 1), buffer=timedelta(minutes=90)) == "completed"


def test_compute_is_idempotent():
    game = {"start_time": KICKOFF, "status": "not_started"}
    now = _at(13, 0, 0)
    assert compute_game_status(game, now) == compute_game_status(game, now)
    assert game == {"start_time": KICKOFF, "status": "not_started"}


def test_can_pick_only_before_kickoff():
    game = {"start_time": KICKOFF}
    assert can_pick_from_game(game, _at(11, 59, 59)) is True
    assert can_pick_from_game(game, _at(12, 0, 0)) is False
    assert can_pick_from_game(game, _at(15, 0, 0)) is False


def test_is_game_disabled_mirrors_can_pick():
    game = {"start_time": KICKOFF}
    for now in (_at(11, 0, 0), _at(12, 30, 0), _at(18, 0, 0)):
        assert is_game_disabled(game, now) is not can_pick_from_game(game, now)


def test_can_change_existing_pick_is_time_only():
    game = {"start_time": KICKOFF, "status": "completed", "manual_status_override": "completed"}
    assert can_change_existing_pick(game, _at(11, 59, 59)) is True
    assert can_change_existing_pick(game, _at(12, 0, 0)) is True
    assert can_change_existing_pick(game, _at(12, 0, 1)) is False
    assert can_change_existing_pick({}, _at(12, 0, 0)) is True


def test_default_now_is_current_time():
    future = {"start_time": datetime.now(timezone.utc) + timedelta(hours=1)}
    past = {"start_time": datetime.now(timezone.utc) - timedelta(hours=5)}
    assert compute_game_status(future) == "not_started"
    assert compute_game_status(past) == "completed"
    assert can_change_existing_pick(future) is True
    assert can_change_existing_pick(past) is False


@pytest.mark.parametrize(
    "league, expected",
    [
        ({"current_pick_week": 5, "current_game_week": 5}, True),
        ({"current_pick_week": 6, "current_game_week": 5}, False),
        ({"current_pick_week": 0, "current_game_week": 0}, False),
        ({"current_pick_week": None, "current_game_week": None}, False),
        ({}, False),
        ({"current_pick_week": 3}, False),
    ],
)
def test_has_gameweek_started(league, expected):
    assert has_gameweek_started(league) is expected


@pytest.mark.parametrize("has_pick", [True, False])
@pytest.mark.parametrize("started", [True, False])
def test_lock_rules_truth_table(has_pick, started):
    assert are_picks_locked(has_pick, started) is (started and has_pick)
    assert can_make_first_pick(has_pick, started) is (started and not has_pick)
    assert should_disable_pick_changes(has_pick, started) is are_picks_locked(has_pick, started)
    assert not (are_picks_locked(has_pick, started) and can_make_first_pick(has_pick, started))


def test_status_labels():
    assert game_status_display("not_started") == "Not Started"
    assert game_status_display("in_progress") == "LIVE"
    assert game_status_display("completed") == "FINAL"
