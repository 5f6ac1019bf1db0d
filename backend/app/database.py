"""
backend/app/database.py

Purpose:
    MongoDB connection bootstrap and index management for all collections.

Dependencies:
    - motor.motor_asyncio
    - pymongo
    - app.config
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from app.config import settings

client: AsyncIOMotorClient = None
db: AsyncIOMotorDatabase = None

logger = logging.getLogger("survivor.database")


async def connect_db() -> None:
    global client, db
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=10,
        serverSelectionTimeoutMS=5000,
        socketTimeoutMS=45000,
        connectTimeoutMS=10000,
    )
    db = client[settings.MONGO_DB]
    await _ensure_indexes()
    logger.info("Connected to MongoDB database %s", settings.MONGO_DB)


async def close_db() -> None:
    global client
    if client:
        client.close()


async def get_db() -> AsyncIOMotorDatabase:
    return db


async def _ensure_indexes() -> None:
    """Create indexes on startup. Idempotent, safe to run repeatedly."""

    # ---- Users ----
    await db.users.create_index("email", unique=True)
    await db.users.create_index("username")

    # ---- Leagues / memberships ----
    await db.leagues.create_index([("is_active", 1), ("created_at", -1)])
    await db.league_memberships.create_index(
        [("league_id", 1), ("user_id", 1)], unique=True,
    )
    await db.league_memberships.create_index([("user_id", 1), ("status", 1)])
    await db.league_memberships.create_index([("is_active", 1), ("status", 1)])
    await db.join_requests.create_index([("league_id", 1), ("status", 1)])
    await db.join_requests.create_index([("league_id", 1), ("user_id", 1), ("status", 1)])

    # ---- Teams / games ----
    await db.teams.create_index("id", unique=True)
    await db.teams.create_index("sports_league")
    await db.games.create_index("id", unique=True)
    await db.games.create_index([("sports_league", 1), ("season", 1), ("week", 1)])
    await db.games.create_index([("status", 1), ("start_time", 1)])

    # ---- Picks: one per member per league per week ----
    await db.picks.create_index(
        [("user_id", 1), ("league_id", 1), ("week", 1)], unique=True,
    )
    await db.picks.create_index("result")
    await db.picks.create_index([("league_id", 1), ("week", 1)])

    # ---- Invitations / password resets ----
    await db.league_invitations.create_index("token", unique=True)
    await db.league_invitations.create_index("league_id")
    await db.password_reset_tokens.create_index("token", unique=True)
    await db.password_reset_tokens.create_index([("user_id", 1), ("is_active", 1)])

    # ---- Auth: blocklisted access tokens expire with the token ----
    await db.access_blocklist.create_index("jti", unique=True)
    await db.access_blocklist.create_index("expires_at", expireAfterSeconds=0)
