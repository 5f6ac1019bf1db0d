from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

import app.database as _db
from app.models.game import GameResponse
from app.services import game_service
from app.services.auth_service import get_current_user
from app.services.league_service import get_league_or_404, require_active_member

router = APIRouter(prefix="/api/games", tags=["games"])


@router.get("", response_model=list[GameResponse])
async def list_games(
    request: Request,
    week: int = Query(..., gt=0),
    league_id: Optional[str] = Query(None),
):
    """Games of a week with their computed status.

    With a league the list is scoped to its competition and, for a logged-in
    member, carries their pick for the week.
    """
    if not league_id:
        return await game_service.get_games_by_week(week)

    league = await get_league_or_404(league_id)
    user_id = None
    if request.cookies.get("access_token"):
        user = await get_current_user(request, _db.db)
        user_id = str(user["_id"])
        await require_active_member(league_id, user_id)
    return await game_service.get_games_by_week(week, league=league, user_id=user_id)
