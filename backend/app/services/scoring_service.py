"""
backend/app/services/scoring_service.py

Purpose:
    Resolve pick results from final scores and recompute each member's
    points and strikes.

    Scoring: win = 3 points, draw = 1 point, loss = 1 strike. Every completed
    week without a pick is one more strike.

Dependencies:
    - app.database
"""

import logging
import time
from typing import Optional

from bson import ObjectId

import app.database as _db
from app.models.game import COMPLETED
from app.models.pick import PickResult
from app.utils import utcnow

logger = logging.getLogger("survivor.scoring")

POINTS = {"win": 3, "draw": 1, "loss": 0}


def calculate_pick_result(game: dict, team_id: int) -> Optional[PickResult]:
    """Outcome of a pick on ``team_id``, or None while the game is unscored.

    Only the stored status counts here: a game is scored once it is
    persisted as completed with both scores present.
    """
    if game.get("status") != COMPLETED:
        return None
    home_score = game.get("home_score")
    away_score = game.get("away_score")
    if home_score is None or away_score is None:
        return None

    if home_score == away_score:
        return "draw"
    if team_id == game["home_team_id"]:
        return "win" if home_score > away_score else "loss"
    if team_id == game["away_team_id"]:
        return "win" if away_score > home_score else "loss"
    return None


def tally(results: list[str], weeks_picked: int, last_completed_week: int) -> dict:
    """Points and strikes from resolved results of completed weeks."""
    points = sum(POINTS.get(r, 0) for r in results)
    loss_strikes = sum(1 for r in results if r == "loss")
    missing_pick_strikes = max(0, last_completed_week - weeks_picked)
    return {
        "points": points,
        "strikes": loss_strikes + missing_pick_strikes,
        "loss_strikes": loss_strikes,
        "missing_pick_strikes": missing_pick_strikes,
    }


async def update_pick_results() -> int:
    """Fill in results for unresolved picks whose games are final."""
    picks = await _db.db.picks.find({"result": None}).to_list(length=None)
    logger.info("Found %d picks without result", len(picks))
    if not picks:
        return 0

    games = await _db.db.games.find(
        {"id": {"$in": sorted({p["game_id"] for p in picks})}}
    ).to_list(length=None)
    games_by_id = {g["id"]: g for g in games}

    updated = 0
    for pick in picks:
        game = games_by_id.get(pick["game_id"])
        if not game:
            logger.warning("Game %s not found for pick %s", pick["game_id"], pick["_id"])
            continue

        result = calculate_pick_result(game, pick["team_id"])
        if result is None:
            continue

        await _db.db.picks.update_one(
            {"_id": pick["_id"]},
            {"$set": {"result": result, "updated_at": utcnow()}},
        )
        updated += 1
        logger.debug("Pick %s resolved: %s (game %s, week %s)", pick["_id"], result, game["id"], game["week"])

    logger.info("Pick results updated: %d", updated)
    return updated


async def calculate_scores_and_strikes() -> int:
    """Recompute points/strikes of every active membership."""
    memberships = await _db.db.league_memberships.find(
        {"is_active": True, "status": "active"}
    ).to_list(length=None)
    leagues = await _db.db.leagues.find(
        {"is_active": True}, {"last_completed_week": 1},
    ).to_list(length=None)
    last_week_by_league = {str(lg["_id"]): lg.get("last_completed_week") or 0 for lg in leagues}

    processed = 0
    for membership in memberships:
        last_completed_week = last_week_by_league.get(membership["league_id"], 0)
        picks = await _db.db.picks.find({
            "user_id": membership["user_id"],
            "league_id": membership["league_id"],
            "result": {"$ne": None},
            "week": {"$lte": last_completed_week},
        }).to_list(length=None)

        weeks_picked = len({p["week"] for p in picks})
        totals = tally([p["result"] for p in picks], weeks_picked, last_completed_week)

        result = await _db.db.league_memberships.update_one(
            {"_id": ObjectId(membership["_id"])},
            {"$set": totals},
        )
        if result.modified_count:
            processed += 1
            logger.info(
                "Updated %s: %d points, %d strikes (%d losses + %d missed weeks)",
                membership["team_name"], totals["points"], totals["strikes"],
                totals["loss_strikes"], totals["missing_pick_strikes"],
            )

    logger.info("Score calculation complete: %d memberships updated", processed)
    return processed


async def run_scoring_calculation() -> dict:
    """Resolve pick results, then recompute all scoreboards."""
    started = time.monotonic()
    logger.info("Scoring calculation started")

    picks_updated = await update_pick_results()
    memberships_updated = await calculate_scores_and_strikes()

    summary = {
        "picks_updated": picks_updated,
        "memberships_updated": memberships_updated,
        "execution_time": round(time.monotonic() - started, 3),
        "completed_at": utcnow(),
    }
    logger.info(
        "Scoring calculation finished: %d picks, %d memberships in %.3fs",
        picks_updated, memberships_updated, summary["execution_time"],
    )
    return summary
