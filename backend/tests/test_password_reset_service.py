"""
backend/tests/test_password_reset_service.py

Purpose:
    Admin-issued reset links and temporary passwords: who may issue them,
    token validation and one-shot completion.

Dependencies:
    - pytest
    - app.services.password_reset_service
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import sys

import pytest
from bson import ObjectId
from fastapi import HTTPException

sys.path.insert(0, "backend")

from app.services import password_reset_service
from app.services.auth_service import hash_password, verify_password


@pytest.fixture
def setup(fake_db):
    admin_id, member_id, outsider_id = ObjectId(), ObjectId(), ObjectId()
    league_id = ObjectId()
    for oid, name in ((admin_id, "admin"), (member_id, "member"), (outsider_id, "outsider")):
        fake_db.users.docs.append({
            "_id": oid,
            "email": f"{name}@example.com",
            "username": name,
            "hashed_password": hash_password("oldpass123"),
        })
    fake_db.leagues.docs.append({"_id": league_id, "name": "Office Pool", "created_by": str(admin_id)})
    for oid, is_admin in ((admin_id, True), (member_id, False)):
        fake_db.league_memberships.docs.append({
            "_id": ObjectId(),
            "league_id": str(league_id),
            "user_id": str(oid),
            "team_name": "x",
            "is_admin": is_admin,
            "is_active": True,
            "status": "active",
        })
    return {
        "admin": str(admin_id),
        "member": str(member_id),
        "outsider": str(outsider_id),
        "league": str(league_id),
    }


def _token(link: str) -> str:
    return link.rsplit("/", 1)[-1]


@pytest.mark.asyncio
async def test_generate_rules(setup):
    with pytest.raises(HTTPException) as exc:
        await password_reset_service.generate_reset_link(setup["admin"], setup["admin"], setup["league"])
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.generate_reset_link(setup["member"], setup["admin"], setup["league"])
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.generate_reset_link(setup["admin"], setup["outsider"], setup["league"])
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.generate_reset_link(setup["admin"], str(ObjectId()), setup["league"])
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_generate_validate_complete(setup, fake_db):
    first = await password_reset_service.generate_reset_link(setup["admin"], setup["member"], setup["league"])
    second = await password_reset_service.generate_reset_link(setup["admin"], setup["member"], setup["league"])
    assert first["user_email"] == "member@example.com"
    assert first["expires_at"] - datetime.now(timezone.utc) > timedelta(hours=23)

    info = await password_reset_service.validate_token(_token(first["reset_link"]))
    assert info["token"]["is_valid"] is True
    assert info["user"]["username"] == "member"
    assert info["league"]["name"] == "Office Pool"

    await password_reset_service.complete_reset(_token(first["reset_link"]), "newpass123")

    member = next(u for u in fake_db.users.docs if str(u["_id"]) == setup["member"])
    assert verify_password("newpass123", member["hashed_password"])
    assert all(not t["is_active"] for t in fake_db.password_reset_tokens.docs)

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.complete_reset(_token(second["reset_link"]), "another123")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_expired_token_is_rejected(setup, fake_db):
    link = await password_reset_service.generate_reset_link(setup["admin"], setup["member"], setup["league"])
    fake_db.password_reset_tokens.docs[0]["expires_at"] = datetime.now(timezone.utc) - timedelta(minutes=1)

    info = await password_reset_service.validate_token(_token(link["reset_link"]))
    assert info["token"]["is_expired"] is True
    assert info["token"]["is_valid"] is False

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.complete_reset(_token(link["reset_link"]), "newpass123")
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_temporary_password_replaces_old_one(setup, fake_db):
    link = await password_reset_service.generate_reset_link(setup["admin"], setup["member"], setup["league"])

    result = await password_reset_service.reset_with_temporary_password(
        setup["admin"], setup["member"], setup["league"],
    )

    assert result["user_email"] == "member@example.com"
    temporary = result["temporary_password"]
    assert len(temporary) == 12 and any(c.isdigit() for c in temporary)
    member = next(u for u in fake_db.users.docs if str(u["_id"]) == setup["member"])
    assert verify_password(temporary, member["hashed_password"])
    assert not verify_password("oldpass123", member["hashed_password"])

    # the earlier link is void now
    with pytest.raises(HTTPException) as exc:
        await password_reset_service.validate_token(_token(link["reset_link"]))
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_temporary_password_needs_league_admin(setup):
    with pytest.raises(HTTPException) as exc:
        await password_reset_service.reset_with_temporary_password(
            setup["admin"], setup["admin"], setup["league"],
        )
    assert exc.value.status_code == 400

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.reset_with_temporary_password(
            setup["member"], setup["admin"], setup["league"],
        )
    assert exc.value.status_code == 403

    with pytest.raises(HTTPException) as exc:
        await password_reset_service.reset_with_temporary_password(
            setup["admin"], setup["outsider"], setup["league"],
        )
    assert exc.value.status_code == 403


def test_generated_temporary_passwords_always_carry_a_digit():
    for _ in range(50):
        password = password_reset_service.generate_temporary_password()
        assert len(password) == 12
        assert any(c.isdigit() for c in password)
        assert password.isalnum()
