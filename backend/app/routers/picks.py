"""Pick endpoints: make/change a pick, list picks, remaining teams, week lock state."""

from fastapi import APIRouter, Depends, Query

from app.models.pick import PickCreate, PickRemaining, PickResponse, WeekPickStatus
from app.services import pick_service
from app.services.auth_service import get_current_user
from app.services.league_service import require_active_member

router = APIRouter(prefix="/api/picks", tags=["picks"])


@router.post("", response_model=PickResponse)
async def make_pick(body: PickCreate, user=Depends(get_current_user)):
    """Make or change the pick for a league week."""
    return await pick_service.make_pick(str(user["_id"]), body)


@router.get("", response_model=list[PickResponse])
async def my_picks(league_id: str = Query(...), user=Depends(get_current_user)):
    user_id = str(user["_id"])
    await require_active_member(league_id, user_id)
    return await pick_service.get_user_picks(user_id, league_id)


@router.get("/remaining", response_model=list[PickRemaining])
async def picks_remaining(league_id: str = Query(...), user=Depends(get_current_user)):
    user_id = str(user["_id"])
    await require_active_member(league_id, user_id)
    return await pick_service.get_picks_remaining(user_id, league_id)


@router.get("/week-status", response_model=WeekPickStatus)
async def week_status(league_id: str = Query(...), user=Depends(get_current_user)):
    return await pick_service.get_week_status(str(user["_id"]), league_id)
