"""
backend/app/services/pick_service.py

Purpose:
    Weekly survivor picks: make or change a pick, list a member's picks,
    teams still available, and the lock state of the current week. All
    timing decisions are delegated to app.services.pick_eligibility; this
    module turns a negative answer into an HTTP rejection.

Dependencies:
    - app.database
    - app.services.pick_eligibility
    - app.services.league_service
    - app.services.game_service
"""

import logging

from fastapi import HTTPException, status
from pymongo import ReturnDocument

import app.database as _db
from app.models.pick import PickCreate
from app.services.game_service import get_game_or_404, team_ref, teams_by_id
from app.services.league_service import get_league_or_404, require_active_member
from app.services.pick_eligibility import (
    are_picks_locked,
    can_change_existing_pick,
    can_make_first_pick,
    can_pick_from_game,
    game_start,
    has_gameweek_started,
    should_disable_pick_changes,
)
from app.utils import utcnow

logger = logging.getLogger("survivor.pick_service")


def _week_in_play(league: dict, week: int) -> bool:
    """Lock rules apply to the gameweek being played, not to future weeks."""
    return has_gameweek_started(league) and week == (league.get("current_game_week") or 0)


async def make_pick(user_id: str, body: PickCreate) -> dict:
    """Create or replace the caller's pick for a league week.

    Validates:
    - Caller is an active member of the league
    - Game belongs to the week and competition, team plays in it
    - Team not already used by the caller in another week
    - Picks not locked (gameweek in play and a pick already exists)
    - Existing pick's game has not kicked off
    - Chosen game has not started
    """
    league_id = body.league_id
    league = await get_league_or_404(league_id)
    await require_active_member(league_id, user_id)

    game = await get_game_or_404(body.game_id)
    if game["week"] != body.week:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Game is not part of this week.")
    if game.get("sports_league") != league["sports_league"] or game.get("season") != league["season"]:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Game is not part of this league's competition.")
    if body.team_id not in (game["home_team_id"], game["away_team_id"]):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Team is not playing in this game.")

    used = await _db.db.picks.find_one({
        "user_id": user_id,
        "league_id": league_id,
        "team_id": body.team_id,
        "week": {"$ne": body.week},
    })
    if used:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            f"You already picked this team in week {used['week']}. Choose a different team.",
        )

    existing = await _db.db.picks.find_one({
        "user_id": user_id, "league_id": league_id, "week": body.week,
    })
    gameweek_started = _week_in_play(league, body.week)

    if are_picks_locked(existing is not None, gameweek_started):
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Picks are locked because the gameweek has started and you already have a pick for this week.",
        )

    if existing:
        # Missing game record: nothing to compare against, allow the change.
        picked_game = await _db.db.games.find_one({"id": existing["game_id"]})
        if picked_game and not can_change_existing_pick(picked_game):
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Cannot change pick because your selected game has already started.",
            )

    if not can_pick_from_game(game):
        if can_make_first_pick(existing is not None, gameweek_started):
            detail = (
                "Cannot pick from this game because it has already started. During an active "
                "gameweek, you can only pick from games that haven't started yet."
            )
        else:
            detail = "Pick failed because game has already started."
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail)

    now = utcnow()
    pick = await _db.db.picks.find_one_and_update(
        {"user_id": user_id, "league_id": league_id, "week": body.week},
        {
            "$set": {
                "game_id": body.game_id,
                "team_id": body.team_id,
                "result": None,
                "updated_at": now,
            },
            "$setOnInsert": {"created_at": now},
        },
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )

    logger.info(
        "Pick %s: user=%s league=%s week=%d team=%d game=%d",
        "changed" if existing else "made", user_id, league_id, body.week, body.team_id, body.game_id,
    )
    teams = await teams_by_id({body.team_id})
    return pick_response(pick, game, teams)


def pick_response(pick: dict, game: dict | None, teams: dict[int, dict]) -> dict:
    return {
        "id": str(pick["_id"]),
        "league_id": pick["league_id"],
        "game_id": pick["game_id"],
        "team": team_ref(teams.get(pick["team_id"]), pick["team_id"]),
        "week": pick["week"],
        "result": pick.get("result"),
        "game_start": game_start(game) if game else None,
        "can_change": can_change_existing_pick(game) if game else True,
    }


async def get_user_picks(user_id: str, league_id: str) -> list[dict]:
    picks = await _db.db.picks.find(
        {"user_id": user_id, "league_id": league_id}
    ).sort("week", 1).to_list(length=100)
    if not picks:
        return []

    games = await _db.db.games.find(
        {"id": {"$in": [p["game_id"] for p in picks]}}
    ).to_list(length=len(picks))
    games_by_id = {g["id"]: g for g in games}
    teams = await teams_by_id({p["team_id"] for p in picks})
    return [pick_response(p, games_by_id.get(p["game_id"]), teams) for p in picks]


async def get_picks_remaining(user_id: str, league_id: str) -> list[dict]:
    """Every team of the league's competition; each may be picked once."""
    league = await get_league_or_404(league_id)
    teams = await _db.db.teams.find(
        {"sports_league": league["sports_league"]}
    ).sort("name", 1).to_list(length=None)
    used = set(await _db.db.picks.distinct("team_id", {"user_id": user_id, "league_id": league_id}))
    return [
        {"team": team_ref(t, t["id"]), "remaining": 0 if t["id"] in used else 1}
        for t in teams
    ]


async def get_week_status(user_id: str, league_id: str) -> dict:
    league = await get_league_or_404(league_id)
    await require_active_member(league_id, user_id)

    week = league.get("current_pick_week") or 0
    has_pick = bool(await _db.db.picks.find_one(
        {"user_id": user_id, "league_id": league_id, "week": week}, {"_id": 1},
    ))
    started = has_gameweek_started(league)
    return {
        "week": week,
        "gameweek_started": started,
        "has_pick": has_pick,
        "picks_locked": are_picks_locked(has_pick, started),
        "can_make_first_pick": can_make_first_pick(has_pick, started),
        "disable_pick_changes": should_disable_pick_changes(has_pick, started),
    }
