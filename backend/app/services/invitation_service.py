"""Shareable league invitation links."""

import logging
import secrets
from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException, status

import app.database as _db
from app.config import settings
from app.services.league_service import (
    add_membership,
    get_league_or_404,
    get_membership,
    require_league_admin,
)
from app.utils import as_utc, ensure_utc, utcnow

logger = logging.getLogger("survivor.invitations")


def invite_link(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/invite/{token}"


def invitation_response(inv: dict) -> dict:
    return {
        "id": str(inv["_id"]),
        "league_id": inv["league_id"],
        "token": inv["token"],
        "invite_link": invite_link(inv["token"]),
        "created_by": inv["created_by"],
        "max_uses": inv.get("max_uses"),
        "current_uses": inv.get("current_uses", 0),
        "expires_at": as_utc(inv.get("expires_at")),
        "is_active": inv.get("is_active", True),
        "created_at": as_utc(inv["created_at"]),
    }


def invitation_state(inv: dict, now: Optional[datetime] = None) -> dict:
    """Expired / exhausted / valid flags of an invitation."""
    now = now or utcnow()
    expires_at = inv.get("expires_at")
    is_expired = bool(expires_at) and now > ensure_utc(expires_at)
    max_uses = inv.get("max_uses")
    is_at_max_uses = max_uses is not None and inv.get("current_uses", 0) >= max_uses
    return {
        "is_expired": is_expired,
        "is_at_max_uses": is_at_max_uses,
        "is_valid": inv.get("is_active", True) and not is_expired and not is_at_max_uses,
    }


async def create_invitation(
    league_id: str, admin_id: str, max_uses: Optional[int], expires_at: Optional[datetime],
) -> dict:
    await get_league_or_404(league_id)
    await require_league_admin(league_id, admin_id)

    now = utcnow()
    doc = {
        "league_id": league_id,
        "token": secrets.token_urlsafe(24),
        "created_by": admin_id,
        "max_uses": max_uses,
        "current_uses": 0,
        "expires_at": ensure_utc(expires_at) if expires_at else None,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    result = await _db.db.league_invitations.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("Invitation created for league %s by %s", league_id, admin_id)
    return doc


async def list_invitations(league_id: str, admin_id: str) -> list[dict]:
    await require_league_admin(league_id, admin_id)
    return await _db.db.league_invitations.find(
        {"league_id": league_id}
    ).sort("created_at", -1).to_list(length=100)


async def deactivate_invitation(invitation_id: str, admin_id: str) -> None:
    inv = await _db.db.league_invitations.find_one({"_id": ObjectId(invitation_id)})
    if not inv:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Invitation not found.")
    await require_league_admin(inv["league_id"], admin_id)
    await _db.db.league_invitations.update_one(
        {"_id": inv["_id"]},
        {"$set": {"is_active": False, "updated_at": utcnow()}},
    )


async def _invitation_by_token(token: str) -> dict:
    inv = await _db.db.league_invitations.find_one({"token": token})
    if not inv:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Invitation not found.")
    return inv


async def preview_invitation(token: str) -> dict:
    """Public: what the invite landing page shows. No auth required."""
    inv = await _invitation_by_token(token)
    league = await get_league_or_404(inv["league_id"])
    creator = await _db.db.users.find_one({"_id": ObjectId(inv["created_by"])}, {"username": 1})
    state = invitation_state(inv)
    return {
        "token": token,
        **state,
        "league_id": inv["league_id"],
        "league_name": league["name"],
        "league_description": league.get("description", ""),
        "sports_league": league["sports_league"],
        "member_count": league.get("member_count", 0),
        "creator_username": creator.get("username", "?") if creator else "?",
    }


async def accept_invitation(token: str, user_id: str, team_name: str) -> dict:
    inv = await _invitation_by_token(token)
    state = invitation_state(inv)
    if not state["is_valid"]:
        if state["is_expired"]:
            detail = "This invitation has expired."
        elif state["is_at_max_uses"]:
            detail = "This invitation has reached its maximum number of uses."
        else:
            detail = "This invitation is no longer active."
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail)

    league_id = inv["league_id"]
    if await get_membership(league_id, user_id):
        raise HTTPException(status.HTTP_409_CONFLICT, "You are already a member of this league.")

    # Claim a use first so concurrent accepts cannot overshoot max_uses.
    claim_filter: dict = {"_id": inv["_id"], "is_active": True}
    if inv.get("max_uses") is not None:
        claim_filter["current_uses"] = {"$lt": inv["max_uses"]}
    claimed = await _db.db.league_invitations.update_one(
        claim_filter,
        {"$inc": {"current_uses": 1}, "$set": {"updated_at": utcnow()}},
    )
    if not claimed.modified_count:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "This invitation has reached its maximum number of uses.")

    try:
        membership = await add_membership(league_id, user_id, team_name)
    except HTTPException:
        # Joined through another path in the meantime: hand the use back.
        await _db.db.league_invitations.update_one(
            {"_id": inv["_id"]},
            {"$inc": {"current_uses": -1}, "$set": {"updated_at": utcnow()}},
        )
        raise
    logger.info("User %s joined league %s via invitation", user_id, league_id)
    return membership
