"""Admin endpoints: scoring trigger (API key) and game corrections (site admin)."""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.config import settings
from app.models.game import GameResponse, GameScoreUpdate, GameStatusOverride
from app.services import game_service, scoring_service
from app.services.auth_service import get_admin_user

logger = logging.getLogger("survivor.admin")
router = APIRouter(prefix="/api/admin", tags=["admin"])


async def verify_scoring_key(x_api_key: Optional[str] = Header(None)):
    """Verify the API key sent by the scoring cron job."""
    if not settings.SCORING_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scoring API key not configured on server.",
        )
    if not x_api_key or not secrets.compare_digest(x_api_key, settings.SCORING_API_KEY):
        logger.warning("Scoring trigger rejected: invalid or missing API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key.",
        )


@router.post("/recompute-scores", dependencies=[Depends(verify_scoring_key)])
async def recompute_scores():
    """Resolve pick results from final scores, then recompute points and strikes."""
    return await scoring_service.run_scoring_calculation()


async def _game_payload(game: dict) -> dict:
    teams = await game_service.teams_by_id({game["home_team_id"], game["away_team_id"]})
    return game_service.game_response(game, teams)


@router.put("/games/{game_id}/status-override", response_model=GameResponse)
async def set_status_override(game_id: int, body: GameStatusOverride, admin=Depends(get_admin_user)):
    """Force a game's displayed status, or clear the override with null."""
    game = await game_service.set_status_override(game_id, body.manual_status_override, str(admin["_id"]))
    return await _game_payload(game)


@router.patch("/games/{game_id}", response_model=GameResponse)
async def update_game(game_id: int, body: GameScoreUpdate, admin=Depends(get_admin_user)):
    """Correct a game's scores and/or stored status."""
    game = await game_service.update_score(game_id, body, str(admin["_id"]))
    return await _game_payload(game)
