"""League endpoints: leagues, membership, join requests, settings, scoreboard."""

from fastapi import APIRouter, Depends, status

from app.models.league import (
    JoinRequestResponse,
    LeagueCreate,
    LeagueJoin,
    LeagueResponse,
    LeagueSettingsUpdate,
    MemberUpdate,
    MembershipResponse,
    ScoreboardEntry,
)
from app.services import league_service
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/api/leagues", tags=["leagues"])


@router.get("", response_model=list[LeagueResponse])
async def list_leagues():
    """All active leagues."""
    leagues = await league_service.list_leagues()
    return [league_service.league_response(lg) for lg in leagues]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LeagueResponse)
async def create_league(body: LeagueCreate, user=Depends(get_current_user)):
    """Create a league. The creator becomes its admin."""
    league = await league_service.create_league(user, body)
    return league_service.league_response(league)


@router.get("/mine")
async def my_leagues(user=Depends(get_current_user)):
    return await league_service.get_user_memberships(str(user["_id"]))


@router.get("/{league_id}", response_model=LeagueResponse)
async def get_league(league_id: str):
    league = await league_service.get_league_or_404(league_id)
    return league_service.league_response(league)


@router.patch("/{league_id}", response_model=LeagueResponse)
async def update_settings(league_id: str, body: LeagueSettingsUpdate, user=Depends(get_current_user)):
    """Update league settings, including the week pointers (admin only)."""
    league = await league_service.update_settings(league_id, str(user["_id"]), body)
    return league_service.league_response(league)


@router.post("/{league_id}/join", status_code=status.HTTP_201_CREATED)
async def join_league(league_id: str, body: LeagueJoin, user=Depends(get_current_user)):
    """Join a league, or request to join when it requires approval."""
    return await league_service.join_league(league_id, str(user["_id"]), body.team_name, body.message)


# ---------- Join Requests ----------


@router.get("/{league_id}/join-requests", response_model=list[JoinRequestResponse])
async def get_join_requests(league_id: str, user=Depends(get_current_user)):
    """Pending join requests (admin only)."""
    return await league_service.list_join_requests(league_id, str(user["_id"]))


@router.post("/{league_id}/join-requests/{request_id}/approve")
async def approve_join_request(league_id: str, request_id: str, user=Depends(get_current_user)):
    return await league_service.approve_join_request(league_id, request_id, str(user["_id"]))


@router.post("/{league_id}/join-requests/{request_id}/reject")
async def reject_join_request(league_id: str, request_id: str, user=Depends(get_current_user)):
    return await league_service.reject_join_request(league_id, request_id, str(user["_id"]))


# ---------- Members ----------


@router.get("/{league_id}/members", response_model=list[MembershipResponse])
async def list_members(league_id: str, user=Depends(get_current_user)):
    await league_service.require_active_member(league_id, str(user["_id"]))
    return await league_service.list_members(league_id)


@router.get("/{league_id}/members/{member_id}", response_model=MembershipResponse)
async def get_member(league_id: str, member_id: str, user=Depends(get_current_user)):
    member = await league_service.get_member_or_404(league_id, member_id)
    return league_service.membership_response(member)


@router.patch("/{league_id}/members/{member_id}", response_model=MembershipResponse)
async def update_member(
    league_id: str, member_id: str, body: MemberUpdate, user=Depends(get_current_user),
):
    """Update a member's paid/admin flags or team name (admin only)."""
    member = await league_service.update_member(league_id, member_id, str(user["_id"]), body)
    return league_service.membership_response(member)


@router.delete("/{league_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(league_id: str, member_id: str, user=Depends(get_current_user)):
    await league_service.remove_member(league_id, member_id, str(user["_id"]))


# ---------- Standings ----------


@router.get("/{league_id}/scoreboard", response_model=list[ScoreboardEntry])
async def scoreboard(league_id: str):
    return await league_service.get_scoreboard(league_id)


@router.get("/{league_id}/results")
async def results(league_id: str, user=Depends(get_current_user)):
    """Everybody's picks for every completed week."""
    await league_service.require_active_member(league_id, str(user["_id"]))
    return await league_service.get_results(league_id)
