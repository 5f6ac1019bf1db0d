"""
backend/tests/test_invitation_service.py

Purpose:
    Invitation links: creation by league admins, public preview flags and
    acceptance limits.

Dependencies:
    - pytest
    - app.services.invitation_service
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import sys

import pytest
from bson import ObjectId
from fastapi import HTTPException

sys.path.insert(0, "backend")

from app.services import invitation_service, league_service
from app.services.invitation_service import invitation_state


@pytest.fixture
def league(fake_db):
    owner_id = ObjectId()
    fake_db.users.docs.append({"_id": owner_id, "email": "owner@example.com", "username": "owner"})
    doc = {
        "_id": ObjectId(),
        "name": "Office Pool",
        "description": "Friday survivor",
        "sports_league": "EPL",
        "season": "2024/2025",
        "created_by": str(owner_id),
        "member_count": 1,
        "is_active": True,
    }
    fake_db.leagues.docs.append(doc)
    fake_db.league_memberships.docs.append({
        "_id": ObjectId(),
        "league_id": str(doc["_id"]),
        "user_id": str(owner_id),
        "team_name": "Owners XI",
        "is_admin": True,
        "is_active": True,
        "status": "active",
    })
    return {"id": str(doc["_id"]), "owner_id": str(owner_id)}


def test_invitation_state_flags():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert invitation_state({"is_active": True}, now)["is_valid"] is True

    expired = invitation_state({"expires_at": datetime(2023, 12, 31)}, now)
    assert expired["is_expired"] is True and expired["is_valid"] is False

    used_up = invitation_state({"max_uses": 2, "current_uses": 2}, now)
    assert used_up["is_at_max_uses"] is True and used_up["is_valid"] is False

    assert invitation_state({"is_active": False}, now)["is_valid"] is False


@pytest.mark.asyncio
async def test_only_admins_create_invitations(league):
    with pytest.raises(HTTPException) as exc:
        await invitation_service.create_invitation(league["id"], str(ObjectId()), None, None)
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_preview_and_accept(league, fake_db):
    inv = await invitation_service.create_invitation(league["id"], league["owner_id"], 1, None)
    response = invitation_service.invitation_response(inv)
    assert response["invite_link"].endswith(f"/invite/{inv['token']}")

    preview = await invitation_service.preview_invitation(inv["token"])
    assert preview["is_valid"] is True
    assert preview["league_name"] == "Office Pool"
    assert preview["creator_username"] == "owner"

    player_id = str(ObjectId())
    membership = await invitation_service.accept_invitation(inv["token"], player_id, "Player FC")
    assert membership["league_id"] == league["id"]
    assert fake_db.league_invitations.docs[0]["current_uses"] == 1
    assert fake_db.leagues.docs[0]["member_count"] == 2

    with pytest.raises(HTTPException) as exc:
        await invitation_service.accept_invitation(inv["token"], str(ObjectId()), "Late FC")
    assert exc.value.status_code == 400
    assert "maximum" in exc.value.detail


@pytest.mark.asyncio
async def test_accept_twice_is_conflict(league):
    inv = await invitation_service.create_invitation(league["id"], league["owner_id"], None, None)
    with pytest.raises(HTTPException) as exc:
        await invitation_service.accept_invitation(inv["token"], league["owner_id"], "Again")
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_expired_and_deactivated_invitations(league, fake_db):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    expired = await invitation_service.create_invitation(league["id"], league["owner_id"], None, past)
    with pytest.raises(HTTPException) as exc:
        await invitation_service.accept_invitation(expired["token"], str(ObjectId()), "Player FC")
    assert exc.value.detail == "This invitation has expired."

    inv = await invitation_service.create_invitation(league["id"], league["owner_id"], None, None)
    await invitation_service.deactivate_invitation(str(inv["_id"]), league["owner_id"])
    with pytest.raises(HTTPException) as exc:
        await invitation_service.accept_invitation(inv["token"], str(ObjectId()), "Player FC")
    assert exc.value.detail == "This invitation is no longer active."

    listed = await invitation_service.list_invitations(league["id"], league["owner_id"])
    assert len(listed) == 2


@pytest.mark.asyncio
async def test_unknown_token_is_404(league):
    with pytest.raises(HTTPException) as exc:
        await invitation_service.preview_invitation("nope")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_use_returned_when_membership_appears_concurrently(league, fake_db, monkeypatch):
    inv = await invitation_service.create_invitation(league["id"], league["owner_id"], 1, None)
    player_id = str(ObjectId())

    # The membership check passes, then a parallel join wins the insert.
    async def _not_yet_member(league_id, user_id):
        await league_service.add_membership(league_id, user_id, "Parallel FC")
        return None

    monkeypatch.setattr(invitation_service, "get_membership", _not_yet_member)

    with pytest.raises(HTTPException) as exc:
        await invitation_service.accept_invitation(inv["token"], player_id, "Player FC")
    assert exc.value.status_code == 409
    assert fake_db.league_invitations.docs[0]["current_uses"] == 0

    preview = await invitation_service.preview_invitation(inv["token"])
    assert preview["is_valid"] is True
