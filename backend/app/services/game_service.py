"""Game queries with computed status, plus admin corrections."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status

import app.database as _db
from app.models.game import NOT_STARTED, GameScoreUpdate
from app.services.pick_eligibility import (
    can_pick_from_game,
    compute_game_status,
    game_status_display,
    valid_status,
)
from app.utils import as_utc, try_parse_utc, utcnow

logger = logging.getLogger("survivor.game_service")


def team_ref(team: Optional[dict], team_id: int) -> dict:
    if not team:
        return {"id": team_id, "name": f"Team {team_id}", "abbreviation": None, "logo": None}
    return {
        "id": team["id"],
        "name": team["name"],
        "abbreviation": team.get("abbreviation"),
        "logo": team.get("logo"),
    }


async def teams_by_id(team_ids: Optional[set[int]] = None) -> dict[int, dict]:
    query = {"id": {"$in": sorted(team_ids)}} if team_ids is not None else {}
    docs = await _db.db.teams.find(query).to_list(length=None)
    return {t["id"]: t for t in docs}


def game_response(
    game: dict,
    teams: dict[int, dict],
    user_pick: Optional[dict] = None,
    now: Optional[datetime] = None,
) -> dict:
    computed = compute_game_status(game, now)
    row = {
        "id": game["id"],
        "week": game["week"],
        "home_team": team_ref(teams.get(game["home_team_id"]), game["home_team_id"]),
        "away_team": team_ref(teams.get(game["away_team_id"]), game["away_team_id"]),
        "home_score": game.get("home_score"),
        "away_score": game.get("away_score"),
        "status": valid_status(game.get("status")) or NOT_STARTED,
        "computed_status": computed,
        "status_label": game_status_display(computed),
        "can_pick": can_pick_from_game(game, now),
        "date": as_utc(try_parse_utc(game.get("date"))),
        "start_time": as_utc(try_parse_utc(game.get("start_time"))),
        "manual_status_override": valid_status(game.get("manual_status_override")),
        "sports_league": game.get("sports_league", ""),
        "season": game.get("season", ""),
        "user_pick": None,
    }
    if user_pick:
        row["user_pick"] = {
            "id": str(user_pick["_id"]),
            "team": team_ref(teams.get(user_pick["team_id"]), user_pick["team_id"]),
            "result": user_pick.get("result"),
            "week": user_pick["week"],
        }
    return row


async def get_game_or_404(game_id: int) -> dict:
    game = await _db.db.games.find_one({"id": game_id})
    if not game:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Game not found.")
    return game


async def get_games_by_week(
    week: int,
    league: Optional[dict] = None,
    user_id: Optional[str] = None,
) -> list[dict]:
    """Games of a week, scoped to the league's competition when given.

    With both league and user the caller's pick for the week is attached to
    the game it was made from.
    """
    query: dict = {"week": week}
    if league:
        query["sports_league"] = league["sports_league"]
        query["season"] = league["season"]
    games = await _db.db.games.find(query).sort([("start_time", 1), ("id", 1)]).to_list(length=200)

    user_pick = None
    if league and user_id:
        user_pick = await _db.db.picks.find_one({
            "user_id": user_id, "league_id": str(league["_id"]), "week": week,
        })

    ids = {g["home_team_id"] for g in games} | {g["away_team_id"] for g in games}
    teams = await teams_by_id(ids)
    now = utcnow()
    return [
        game_response(
            g, teams,
            user_pick=user_pick if user_pick and user_pick["game_id"] == g["id"] else None,
            now=now,
        )
        for g in games
    ]


async def set_status_override(game_id: int, override: Optional[str], admin_id: str) -> dict:
    game = await get_game_or_404(game_id)
    await _db.db.games.update_one(
        {"id": game_id},
        {"$set": {"manual_status_override": override, "updated_at": utcnow()}},
    )
    game["manual_status_override"] = override
    logger.info("Game %d status override set to %s by %s", game_id, override, admin_id)
    return game


async def update_score(game_id: int, body: GameScoreUpdate, admin_id: str) -> dict:
    game = await get_game_or_404(game_id)
    updates = body.model_dump(exclude_none=True)
    if not updates:
        return game
    updates["updated_at"] = utcnow()
    await _db.db.games.update_one({"id": game_id}, {"$set": updates})
    game.update(updates)
    logger.info(
        "Game %d updated by %s: %s-%s (%s)",
        game_id, admin_id, game.get("home_score"), game.get("away_score"), game.get("status"),
    )
    return game
