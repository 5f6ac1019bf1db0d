"""
backend/app/services/league_service.py

Purpose:
    League lifecycle: creation, membership (direct join or approval flow),
    member administration, settings including the week pointers, and the
    scoreboard/results views.

Dependencies:
    - app.database
    - app.models.league
"""

import logging
from typing import Optional

from bson import ObjectId
from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError

import app.database as _db
from app.models.league import LeagueCreate, LeagueSettingsUpdate, MemberUpdate
from app.utils import as_utc, utcnow

logger = logging.getLogger("survivor.league_service")


def league_response(league: dict) -> dict:
    return {
        "id": str(league["_id"]),
        "name": league["name"],
        "description": league.get("description", ""),
        "sports_league": league["sports_league"],
        "season": league["season"],
        "logo": league.get("logo"),
        "is_public": league.get("is_public", False),
        "requires_approval": league.get("requires_approval", True),
        "is_active": league.get("is_active", True),
        "created_by": league["created_by"],
        "member_count": league.get("member_count", 0),
        "current_pick_week": league.get("current_pick_week") or 0,
        "current_game_week": league.get("current_game_week") or 0,
        "last_completed_week": league.get("last_completed_week") or 0,
        "created_at": as_utc(league["created_at"]),
    }


def membership_response(membership: dict, username: Optional[str] = None) -> dict:
    return {
        "id": str(membership["_id"]),
        "league_id": membership["league_id"],
        "user_id": membership["user_id"],
        "username": username,
        "team_name": membership["team_name"],
        "points": membership.get("points", 0),
        "strikes": membership.get("strikes", 0),
        "rank": membership.get("rank", 0),
        "is_active": membership.get("is_active", True),
        "is_admin": membership.get("is_admin", False),
        "is_paid": membership.get("is_paid", False),
        "status": membership.get("status", "active"),
        "joined_at": as_utc(membership["joined_at"]),
    }


async def _usernames(user_ids: list[str]) -> dict[str, dict]:
    if not user_ids:
        return {}
    docs = await _db.db.users.find(
        {"_id": {"$in": [ObjectId(uid) for uid in user_ids]}},
        {"username": 1, "name": 1, "email": 1},
    ).to_list(length=len(user_ids))
    return {str(u["_id"]): u for u in docs}


# ---------- Lookups & authorization ----------


async def get_league_or_404(league_id: str) -> dict:
    league = await _db.db.leagues.find_one({"_id": ObjectId(league_id)})
    if not league:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "League not found.")
    return league


async def get_membership(league_id: str, user_id: str) -> dict | None:
    return await _db.db.league_memberships.find_one({"league_id": league_id, "user_id": user_id})


async def require_active_member(league_id: str, user_id: str) -> dict:
    membership = await get_membership(league_id, user_id)
    if not membership or membership.get("status") != "active" or not membership.get("is_active", True):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "You are not a member of this league.")
    return membership


async def require_league_admin(league_id: str, user_id: str) -> dict:
    """Return the caller's membership if they administer the league."""
    membership = await require_active_member(league_id, user_id)
    if not membership.get("is_admin"):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Only league administrators can do this.")
    return membership


# ---------- Leagues ----------


async def create_league(user: dict, body: LeagueCreate) -> dict:
    """Create a league; the creator becomes its first admin member."""
    now = utcnow()
    user_id = str(user["_id"])
    league_doc = {
        "name": body.name,
        "description": body.description,
        "sports_league": body.sports_league.upper(),
        "season": body.season,
        "logo": None,
        "is_public": body.is_public,
        "requires_approval": body.requires_approval,
        "is_active": True,
        "created_by": user_id,
        "member_count": 0,
        "current_pick_week": 0,
        "current_game_week": 0,
        "last_completed_week": 0,
        "created_at": now,
        "updated_at": now,
    }
    result = await _db.db.leagues.insert_one(league_doc)
    league_doc["_id"] = result.inserted_id
    league_id = str(result.inserted_id)

    await add_membership(league_id, user_id, body.team_name or user.get("username", "Admin"), is_admin=True)
    league_doc["member_count"] = 1
    logger.info("League created: %s (%s) by user %s", body.name, league_id, user_id)
    return league_doc


async def list_leagues() -> list[dict]:
    return await _db.db.leagues.find({"is_active": True}).sort("created_at", -1).to_list(length=200)


async def add_membership(league_id: str, user_id: str, team_name: str, is_admin: bool = False) -> dict:
    now = utcnow()
    doc = {
        "league_id": league_id,
        "user_id": user_id,
        "team_name": team_name,
        "points": 0,
        "strikes": 0,
        "loss_strikes": 0,
        "missing_pick_strikes": 0,
        "rank": 0,
        "is_active": True,
        "is_admin": is_admin,
        "is_paid": False,
        "status": "active",
        "joined_at": now,
    }
    try:
        result = await _db.db.league_memberships.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status.HTTP_409_CONFLICT, "You are already a member of this league.")
    doc["_id"] = result.inserted_id
    await _db.db.leagues.update_one(
        {"_id": ObjectId(league_id)},
        {"$inc": {"member_count": 1}, "$set": {"updated_at": now}},
    )
    return doc


async def get_user_memberships(user_id: str) -> list[dict]:
    """Memberships of a user, each with its league embedded."""
    memberships = await _db.db.league_memberships.find({"user_id": user_id}).to_list(length=100)
    if not memberships:
        return []
    leagues = await _db.db.leagues.find(
        {"_id": {"$in": [ObjectId(m["league_id"]) for m in memberships]}},
    ).to_list(length=len(memberships))
    by_id = {str(lg["_id"]): lg for lg in leagues}
    out = []
    for m in memberships:
        league = by_id.get(m["league_id"])
        if not league:
            continue
        row = membership_response(m)
        row["league"] = league_response(league)
        out.append(row)
    return out


# ---------- Joining ----------


async def join_league(league_id: str, user_id: str, team_name: str, message: Optional[str] = None) -> dict:
    """Join directly, or file a join request when the league requires approval."""
    league = await get_league_or_404(league_id)
    if not league.get("is_active", True):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "This league is no longer active.")

    if await get_membership(league_id, user_id):
        raise HTTPException(status.HTTP_409_CONFLICT, "You are already a member of this league.")

    if not league.get("requires_approval", True):
        membership = await add_membership(league_id, user_id, team_name)
        logger.info("User %s joined league %s", user_id, league_id)
        return {"status": "active", "membership_id": str(membership["_id"])}

    existing = await _db.db.join_requests.find_one({
        "league_id": league_id, "user_id": user_id, "status": "pending",
    })
    if existing:
        raise HTTPException(status.HTTP_409_CONFLICT, "You already have a pending request for this league.")

    doc = {
        "league_id": league_id,
        "user_id": user_id,
        "team_name": team_name,
        "message": message,
        "status": "pending",
        "requested_at": utcnow(),
        "reviewed_at": None,
        "reviewed_by": None,
    }
    result = await _db.db.join_requests.insert_one(doc)
    logger.info("Join request %s: user=%s league=%s", result.inserted_id, user_id, league_id)
    return {"status": "pending", "request_id": str(result.inserted_id)}


async def list_join_requests(league_id: str, admin_id: str) -> list[dict]:
    await require_league_admin(league_id, admin_id)
    requests = await _db.db.join_requests.find(
        {"league_id": league_id, "status": "pending"}
    ).sort("requested_at", 1).to_list(length=100)

    users = await _usernames([r["user_id"] for r in requests])
    return [
        {
            "id": str(r["_id"]),
            "league_id": r["league_id"],
            "user_id": r["user_id"],
            "username": users.get(r["user_id"], {}).get("username", "?"),
            "team_name": r["team_name"],
            "message": r.get("message"),
            "status": r["status"],
            "requested_at": as_utc(r["requested_at"]),
        }
        for r in requests
    ]


async def _pending_request(league_id: str, request_id: str) -> dict:
    jr = await _db.db.join_requests.find_one({"_id": ObjectId(request_id), "league_id": league_id})
    if not jr or jr["status"] != "pending":
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Request not found or already reviewed.")
    return jr


async def approve_join_request(league_id: str, request_id: str, admin_id: str) -> dict:
    await require_league_admin(league_id, admin_id)
    jr = await _pending_request(league_id, request_id)

    membership = await add_membership(league_id, jr["user_id"], jr["team_name"])
    await _db.db.join_requests.update_one(
        {"_id": jr["_id"]},
        {"$set": {"status": "approved", "reviewed_at": utcnow(), "reviewed_by": admin_id}},
    )
    logger.info("Join request %s approved by %s", request_id, admin_id)
    return {"status": "approved", "membership_id": str(membership["_id"])}


async def reject_join_request(league_id: str, request_id: str, admin_id: str) -> dict:
    await require_league_admin(league_id, admin_id)
    jr = await _pending_request(league_id, request_id)

    await _db.db.join_requests.update_one(
        {"_id": jr["_id"]},
        {"$set": {"status": "rejected", "reviewed_at": utcnow(), "reviewed_by": admin_id}},
    )
    logger.info("Join request %s rejected by %s", request_id, admin_id)
    return {"status": "rejected"}


# ---------- Members ----------


async def list_members(league_id: str) -> list[dict]:
    memberships = await _db.db.league_memberships.find(
        {"league_id": league_id}
    ).sort("joined_at", 1).to_list(length=500)
    users = await _usernames([m["user_id"] for m in memberships])
    return [
        membership_response(m, users.get(m["user_id"], {}).get("username"))
        for m in memberships
    ]


async def get_member_or_404(league_id: str, member_id: str) -> dict:
    member = await _db.db.league_memberships.find_one({"_id": ObjectId(member_id), "league_id": league_id})
    if not member:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Member not found.")
    return member


async def update_member(league_id: str, member_id: str, requester_id: str, body: MemberUpdate) -> dict:
    """Admin edits of a membership (paid flag, admin flag, team name).

    An admin may not drop their own admin flag, and the league creator's
    admin flag cannot be removed by anybody.
    """
    league = await get_league_or_404(league_id)
    requester = await require_league_admin(league_id, requester_id)
    member = await get_member_or_404(league_id, member_id)

    if body.is_admin is False:
        if requester["_id"] == member["_id"]:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "You cannot remove your own admin privileges.")
        if member["user_id"] == league["created_by"]:
            raise HTTPException(
                status.HTTP_403_FORBIDDEN, "Cannot remove admin privileges from the league creator.",
            )

    updates = body.model_dump(exclude_none=True)
    if updates:
        await _db.db.league_memberships.update_one({"_id": member["_id"]}, {"$set": updates})
        member.update(updates)

    if "is_admin" in updates:
        logger.info(
            "Admin flag of member %s in league %s set to %s by %s",
            member_id, league_id, updates["is_admin"], requester_id,
        )
    return member


async def remove_member(league_id: str, member_id: str, requester_id: str) -> None:
    league = await get_league_or_404(league_id)
    await require_league_admin(league_id, requester_id)
    member = await get_member_or_404(league_id, member_id)

    if member["user_id"] == league["created_by"]:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "The league creator cannot be removed.")
    if member["user_id"] == requester_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "You cannot remove yourself.")

    await _db.db.league_memberships.delete_one({"_id": member["_id"]})
    await _db.db.leagues.update_one(
        {"_id": league["_id"]},
        {"$inc": {"member_count": -1}, "$set": {"updated_at": utcnow()}},
    )
    logger.info("Member %s removed from league %s by %s", member_id, league_id, requester_id)


# ---------- Settings ----------


async def update_settings(league_id: str, admin_id: str, body: LeagueSettingsUpdate) -> dict:
    league = await get_league_or_404(league_id)
    await require_league_admin(league_id, admin_id)

    updates = body.model_dump(exclude_none=True)
    if not updates:
        return league
    updates["updated_at"] = utcnow()
    await _db.db.leagues.update_one({"_id": league["_id"]}, {"$set": updates})
    league.update(updates)
    logger.info("League %s settings updated by %s: %s", league_id, admin_id, sorted(updates))
    return league


# ---------- Scoreboard & results ----------


async def get_scoreboard(league_id: str) -> list[dict]:
    """Active members ranked by points (desc), then strikes (asc)."""
    await get_league_or_404(league_id)
    memberships = await _db.db.league_memberships.find(
        {"league_id": league_id, "status": "active"}
    ).to_list(length=500)
    users = await _usernames([m["user_id"] for m in memberships])

    rows = []
    for m in memberships:
        display = users.get(m["user_id"], {}).get("name")
        rows.append({
            "user_id": m["user_id"],
            "name": f"{m['team_name']} ({display})" if display else m["team_name"],
            "points": m.get("points", 0),
            "strikes": m.get("strikes", 0),
        })
    rows.sort(key=lambda r: (-r["points"], r["strikes"]))
    for idx, row in enumerate(rows, start=1):
        row["rank"] = idx
    return rows


async def get_results(league_id: str) -> dict:
    """Every active member's pick per completed week."""
    league = await get_league_or_404(league_id)
    last_week = league.get("last_completed_week") or 0
    memberships = await _db.db.league_memberships.find(
        {"league_id": league_id, "status": "active"}
    ).to_list(length=500)
    picks = await _db.db.picks.find(
        {"league_id": league_id, "week": {"$lte": last_week}}
    ).to_list(length=None)

    teams = {
        t["id"]: t["name"]
        for t in await _db.db.teams.find({}, {"id": 1, "name": 1}).to_list(length=None)
    }
    by_user: dict[str, dict[int, dict]] = {}
    for p in picks:
        by_user.setdefault(p["user_id"], {})[p["week"]] = {
            "team": teams.get(p["team_id"], str(p["team_id"])),
            "result": p.get("result"),
        }

    return {
        "last_completed_week": last_week,
        "weeks": list(range(1, last_week + 1)),
        "members": [
            {
                "user_id": m["user_id"],
                "team_name": m["team_name"],
                "picks": {str(w): by_user.get(m["user_id"], {}).get(w) for w in range(1, last_week + 1)},
            }
            for m in memberships
        ],
    }
