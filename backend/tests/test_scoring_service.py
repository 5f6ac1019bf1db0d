"""
backend/tests/test_scoring_service.py

Purpose:
    Pick result resolution and points/strikes recomputation.

Dependencies:
    - pytest
    - app.services.scoring_service
"""

from __future__ import annotations

import sys

import pytest
from bson import ObjectId

sys.path.insert(0, "backend")

from app.services import scoring_service
from app.services.scoring_service import calculate_pick_result, tally


def _final(home_score, away_score, status="completed"):
    return {
        "id": 1,
        "week": 1,
        "home_team_id": 10,
        "away_team_id": 20,
        "home_score": home_score,
        "away_score": away_score,
        "status": status,
    }


def test_pick_result_home_and_away():
    game = _final(2, 1)
    assert calculate_pick_result(game, 10) == "win"
    assert calculate_pick_result(game, 20) == "loss"

    game = _final(0, 3)
    assert calculate_pick_result(game, 10) == "loss"
    assert calculate_pick_result(game, 20) == "win"


def test_pick_result_draw():
    assert calculate_pick_result(_final(1, 1), 10) == "draw"
    assert calculate_pick_result(_final(0, 0), 20) == "draw"


def test_pick_result_needs_stored_completion_and_scores():
    assert calculate_pick_result(_final(2, 1, status="in_progress"), 10) is None
    assert calculate_pick_result(_final(None, 1), 10) is None
    assert calculate_pick_result(_final(2, 1), 99) is None


def test_tally_counts_missed_weeks_as_strikes():
    totals = tally(["win", "draw", "loss"], weeks_picked=3, last_completed_week=5)
    assert totals == {
        "points": 4,
        "strikes": 3,
        "loss_strikes": 1,
        "missing_pick_strikes": 2,
    }


def test_tally_never_negative_missing_strikes():
    assert tally(["win"], weeks_picked=1, last_completed_week=0)["missing_pick_strikes"] == 0


@pytest.mark.asyncio
async def test_run_scoring_calculation(fake_db):
    league_id = ObjectId()
    user_id = str(ObjectId())
    membership_id = ObjectId()
    fake_db.leagues.docs.append({
        "_id": league_id, "name": "Pool", "is_active": True, "last_completed_week": 3,
    })
    fake_db.league_memberships.docs.append({
        "_id": membership_id,
        "league_id": str(league_id),
        "user_id": user_id,
        "team_name": "Underdogs",
        "points": 0,
        "strikes": 0,
        "is_active": True,
        "status": "active",
    })
    fake_db.games.docs.extend([
        {"id": 1, "week": 1, "home_team_id": 10, "away_team_id": 20,
         "home_score": 2, "away_score": 0, "status": "completed"},
        {"id": 2, "week": 2, "home_team_id": 30, "away_team_id": 40,
         "home_score": 1, "away_score": 1, "status": "completed"},
        {"id": 4, "week": 4, "home_team_id": 50, "away_team_id": 60,
         "home_score": None, "away_score": None, "status": "not_started"},
    ])
    for week, game_id, team_id in ((1, 1, 20), (2, 2, 30), (4, 4, 50)):
        fake_db.picks.docs.append({
            "_id": ObjectId(), "user_id": user_id, "league_id": str(league_id),
            "game_id": game_id, "team_id": team_id, "week": week, "result": None,
        })

    summary = await scoring_service.run_scoring_calculation()

    assert summary["picks_updated"] == 2
    assert summary["memberships_updated"] == 1
    assert summary["completed_at"] is not None

    results = {p["week"]: p["result"] for p in fake_db.picks.docs}
    assert results == {1: "loss", 2: "draw", 4: None}

    membership = fake_db.league_memberships.docs[0]
    # week 1 loss, week 2 draw, week 3 missed
    assert membership["points"] == 1
    assert membership["loss_strikes"] == 1
    assert membership["missing_pick_strikes"] == 1
    assert membership["strikes"] == 2


@pytest.mark.asyncio
async def test_update_pick_results_skips_missing_games(fake_db):
    fake_db.picks.docs.append({
        "_id": ObjectId(), "user_id": "u", "league_id": "l",
        "game_id": 77, "team_id": 1, "week": 1, "result": None,
    })
    assert await scoring_service.update_pick_results() == 0
    assert fake_db.picks.docs[0]["result"] is None
