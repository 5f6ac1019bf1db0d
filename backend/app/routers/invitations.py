"""League invitation links: admin management and the public accept flow."""

from fastapi import APIRouter, Depends, status

from app.models.invitation import (
    InvitationAccept,
    InvitationCreate,
    InvitationPreview,
    InvitationResponse,
)
from app.services import invitation_service
from app.services.auth_service import get_current_user
from app.services.league_service import membership_response

router = APIRouter(prefix="/api", tags=["invitations"])


@router.post(
    "/leagues/{league_id}/invitations",
    status_code=status.HTTP_201_CREATED,
    response_model=InvitationResponse,
)
async def create_invitation(league_id: str, body: InvitationCreate, user=Depends(get_current_user)):
    inv = await invitation_service.create_invitation(
        league_id, str(user["_id"]), body.max_uses, body.expires_at,
    )
    return invitation_service.invitation_response(inv)


@router.get("/leagues/{league_id}/invitations", response_model=list[InvitationResponse])
async def list_invitations(league_id: str, user=Depends(get_current_user)):
    invitations = await invitation_service.list_invitations(league_id, str(user["_id"]))
    return [invitation_service.invitation_response(inv) for inv in invitations]


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_invitation(invitation_id: str, user=Depends(get_current_user)):
    await invitation_service.deactivate_invitation(invitation_id, str(user["_id"]))


@router.get("/invite/{token}", response_model=InvitationPreview)
async def preview_invitation(token: str):
    """Public: invite landing page data. No auth required."""
    return await invitation_service.preview_invitation(token)


@router.post("/invite/{token}/accept")
async def accept_invitation(token: str, body: InvitationAccept, user=Depends(get_current_user)):
    membership = await invitation_service.accept_invitation(token, str(user["_id"]), body.team_name)
    return membership_response(membership)
