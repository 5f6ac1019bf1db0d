import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jwt.exceptions import InvalidTokenError as JWTError

from app.database import get_db
from app.models.user import ChangePasswordRequest, UserCreate, UserLogin, UserProfileUpdate
from app.services.auth_service import (
    ACCESS_COOKIE,
    blocklist_access_token,
    clear_auth_cookie,
    create_access_token,
    decode_jwt,
    get_current_user,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from app.services.league_service import get_user_memberships
from app.utils import as_utc, utcnow

logger = logging.getLogger("survivor.auth")
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(user: dict) -> dict:
    return {
        "id": str(user["_id"]),
        "email": user["email"],
        "username": user["username"],
        "name": user.get("name"),
        "is_admin": user.get("is_admin", False),
        "created_at": as_utc(user["created_at"]),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, response: Response, db=Depends(get_db)):
    """Register a new user and log them in."""
    email = body.email.lower()
    existing = await db.users.find_one({"email": email})
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email address is already registered.",
        )

    now = utcnow()
    user_doc = {
        "email": email,
        "username": body.username.strip(),
        "name": body.name,
        "hashed_password": hash_password(body.password),
        "is_admin": False,
        "created_at": now,
        "updated_at": now,
    }
    result = await db.users.insert_one(user_doc)
    user_doc["_id"] = result.inserted_id
    user_id = str(result.inserted_id)

    set_auth_cookie(response, create_access_token(user_id, email))
    logger.info("User registered: %s", user_id)
    return {"message": "Registration successful.", "user": _user_response(user_doc)}


@router.post("/login")
async def login(body: UserLogin, response: Response, db=Depends(get_db)):
    """Login with email and password."""
    email = body.email.lower()
    user = await db.users.find_one({"email": email})
    if not user or not verify_password(body.password, user["hashed_password"]):
        logger.warning("Failed login for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    user_id = str(user["_id"])
    set_auth_cookie(response, create_access_token(user_id, email))
    logger.info("User logged in: %s", user_id)
    return {"message": "Login successful.", "user": _user_response(user)}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Revoke the current access token and clear the cookie."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        try:
            payload = decode_jwt(token)
        except JWTError:
            payload = {}
        jti = payload.get("jti")
        exp = payload.get("exp")
        if jti and exp:
            await blocklist_access_token(jti, datetime.fromtimestamp(exp, tz=timezone.utc))
    clear_auth_cookie(response)
    return {"message": "Logged out."}


@router.get("/me")
async def me(user=Depends(get_current_user)):
    """Current user with their league memberships."""
    data = _user_response(user)
    data["leagues"] = await get_user_memberships(str(user["_id"]))
    return data


@router.patch("/me")
async def update_profile(body: UserProfileUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    """Update the display name shown next to the team name on scoreboards."""
    if "name" not in body.model_fields_set:
        return _user_response(user)

    updates = {"name": body.name, "updated_at": utcnow()}
    await db.users.update_one({"_id": user["_id"]}, {"$set": updates})
    user.update(updates)
    logger.info("Profile updated for user %s", user["_id"])
    return _user_response(user)


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    response: Response,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    """Change password; the current session is rotated onto a fresh token."""
    if not verify_password(body.current_password, user["hashed_password"]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect.",
        )

    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"hashed_password": hash_password(body.new_password), "updated_at": utcnow()}},
    )

    old = decode_jwt(request.cookies[ACCESS_COOKIE])
    if old.get("jti") and old.get("exp"):
        await blocklist_access_token(old["jti"], datetime.fromtimestamp(old["exp"], tz=timezone.utc))
    user_id = str(user["_id"])
    set_auth_cookie(response, create_access_token(user_id, user["email"]))
    logger.info("Password changed for user %s", user_id)
    return {"message": "Password changed."}
