"""
backend/tests/test_auth_router.py

Purpose:
    Profile update: display name validation and its effect on the
    scoreboard label.

Dependencies:
    - pytest
    - app.routers.auth
"""

from __future__ import annotations

from datetime import datetime, timezone
import sys

import pytest
from bson import ObjectId

sys.path.insert(0, "backend")

from app.models.user import UserProfileUpdate
from app.routers import auth as auth_router
from app.services import league_service


def _user(fake_db, name=None) -> dict:
    doc = {
        "_id": ObjectId(),
        "email": "player@example.com",
        "username": "player",
        "name": name,
        "is_admin": False,
        "created_at": datetime.now(timezone.utc),
    }
    fake_db.users.docs.append(doc)
    return dict(doc)


@pytest.mark.asyncio
async def test_update_name_shows_on_scoreboard(fake_db):
    user = _user(fake_db)
    league_id = ObjectId()
    fake_db.leagues.docs.append({"_id": league_id, "name": "Pool"})
    fake_db.league_memberships.docs.append({
        "_id": ObjectId(), "league_id": str(league_id), "user_id": str(user["_id"]),
        "team_name": "Underdogs", "points": 0, "strikes": 0, "status": "active",
    })

    data = await auth_router.update_profile(UserProfileUpdate(name="  Sam  "), user, fake_db)

    assert data["name"] == "Sam"
    assert fake_db.users.docs[0]["name"] == "Sam"
    board = await league_service.get_scoreboard(str(league_id))
    assert board[0]["name"] == "Underdogs (Sam)"


@pytest.mark.asyncio
async def test_clear_and_keep_name(fake_db):
    user = _user(fake_db, name="Sam")

    kept = await auth_router.update_profile(UserProfileUpdate(), user, fake_db)
    assert kept["name"] == "Sam"
    assert fake_db.users.docs[0]["name"] == "Sam"

    cleared = await auth_router.update_profile(UserProfileUpdate(name=""), user, fake_db)
    assert cleared["name"] is None
    assert fake_db.users.docs[0]["name"] is None


def test_name_longer_than_twelve_characters_rejected():
    with pytest.raises(ValueError):
        UserProfileUpdate(name="Thirteen chars")
    assert UserProfileUpdate(name="Twelve chars").name == "Twelve chars"
