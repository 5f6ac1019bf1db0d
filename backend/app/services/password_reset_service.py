"""
backend/app/services/password_reset_service.py

Purpose:
    Admin-issued password reset links. A league admin can create a
    time-limited link for another member of the same league; the member
    opens it and sets a new password without knowing the old one. For
    members who cannot open a link, the admin can instead set a temporary
    password and hand it over.

Dependencies:
    - app.database
    - app.services.auth_service
    - app.services.league_service
"""

import logging
import secrets
import string
from datetime import datetime, timedelta

from bson import ObjectId
from fastapi import HTTPException, status

import app.database as _db
from app.config import settings
from app.services.auth_service import hash_password
from app.services.league_service import get_league_or_404, get_membership, require_league_admin
from app.utils import as_utc, ensure_utc, utcnow

logger = logging.getLogger("survivor.password_reset")


def reset_link(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/reset-password/{token}"


_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length: int = 12) -> str:
    """Random password that passes the registration rules (contains a digit)."""
    chars = [secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length - 1)]
    chars.insert(secrets.randbelow(length), secrets.choice(string.digits))
    return "".join(chars)


async def _authorize_admin_reset(admin_id: str, target_user_id: str, league_id: str) -> tuple[dict, dict]:
    """League admin acting on another member of the same league.

    Returns (league, target user).
    """
    if admin_id == target_user_id:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST,
            "Cannot reset the password of your own account. Use account settings instead.",
        )

    league = await get_league_or_404(league_id)
    await require_league_admin(league_id, admin_id)

    target = await _db.db.users.find_one({"_id": ObjectId(target_user_id)})
    if not target:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Target user not found.")
    if not await get_membership(league_id, target_user_id):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Target user is not a member of this league.")
    return league, target


async def _revoke_reset_tokens(user_id: str, now: datetime) -> None:
    await _db.db.password_reset_tokens.update_many(
        {"user_id": user_id, "is_active": True},
        {"$set": {"is_active": False, "updated_at": now}},
    )


async def reset_with_temporary_password(admin_id: str, target_user_id: str, league_id: str) -> dict:
    """Replace a member's password with a one-off temporary one.

    The admin hands the password over; outstanding reset links of that
    member stop working.
    """
    league, target = await _authorize_admin_reset(admin_id, target_user_id, league_id)

    temporary_password = generate_temporary_password()
    now = utcnow()
    await _db.db.users.update_one(
        {"_id": target["_id"]},
        {"$set": {"hashed_password": hash_password(temporary_password), "updated_at": now}},
    )
    await _revoke_reset_tokens(target_user_id, now)

    logger.info(
        "Temporary password set: admin=%s target=%s league=%s",
        admin_id, target_user_id, league["_id"],
    )
    return {"temporary_password": temporary_password, "user_email": target["email"]}


async def generate_reset_link(admin_id: str, target_user_id: str, league_id: str) -> dict:
    league, target = await _authorize_admin_reset(admin_id, target_user_id, league_id)

    now = utcnow()
    expires_at = now + timedelta(hours=settings.PASSWORD_RESET_EXPIRE_HOURS)
    token = secrets.token_hex(32)
    await _db.db.password_reset_tokens.insert_one({
        "token": token,
        "user_id": target_user_id,
        "created_by": admin_id,
        "league_id": league_id,
        "expires_at": expires_at,
        "used_at": None,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })

    logger.info(
        "Password reset link generated: admin=%s target=%s league=%s",
        admin_id, target_user_id, league["_id"],
    )
    return {
        "reset_link": reset_link(token),
        "user_email": target["email"],
        "expires_at": expires_at,
    }


async def _active_token(token: str) -> dict:
    doc = await _db.db.password_reset_tokens.find_one({"token": token, "is_active": True})
    if not doc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Password reset token not found.")
    return doc


async def validate_token(token: str) -> dict:
    doc = await _active_token(token)
    is_expired = utcnow() > ensure_utc(doc["expires_at"])
    is_used = doc.get("used_at") is not None

    user = await _db.db.users.find_one({"_id": ObjectId(doc["user_id"])})
    if not user:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found.")
    league = await get_league_or_404(doc["league_id"])

    return {
        "token": {
            "is_valid": not is_expired and not is_used,
            "is_expired": is_expired,
            "is_used": is_used,
            "expires_at": as_utc(doc["expires_at"]),
        },
        "user": {"id": str(user["_id"]), "username": user.get("username"), "email": user["email"]},
        "league": {"id": str(league["_id"]), "name": league["name"]},
    }


async def complete_reset(token: str, new_password: str) -> None:
    doc = await _active_token(token)
    if utcnow() > ensure_utc(doc["expires_at"]):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Password reset token has expired.")
    if doc.get("used_at") is not None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Password reset token has already been used.")

    now = utcnow()
    result = await _db.db.users.update_one(
        {"_id": ObjectId(doc["user_id"])},
        {"$set": {"hashed_password": hash_password(new_password), "updated_at": now}},
    )
    if not result.matched_count:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "User not found.")

    await _db.db.password_reset_tokens.update_one(
        {"_id": doc["_id"]},
        {"$set": {"used_at": now, "is_active": False, "updated_at": now}},
    )
    # Any other outstanding links for this user are void now.
    await _revoke_reset_tokens(doc["user_id"], now)
    logger.info("Password reset completed for user %s", doc["user_id"])
