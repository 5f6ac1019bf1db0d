import logging

import app.database as _db
from app.config import settings
from app.services.auth_service import hash_password
from app.utils import utcnow

logger = logging.getLogger("survivor.seed")

_EPL_BADGE_URL = "https://resources.premierleague.com/premierleague/badges/t{}.png"

# (name, abbreviation, badge id)
DEFAULT_EPL_TEAMS = [
    ("Arsenal", "ARS", 3),
    ("Aston Villa", "AVL", 7),
    ("Bournemouth", "BOU", 91),
    ("Brentford", "BRE", 94),
    ("Brighton", "BHA", 36),
    ("Chelsea", "CHE", 8),
    ("Crystal Palace", "CRY", 31),
    ("Everton", "EVE", 11),
    ("Fulham", "FUL", 54),
    ("Liverpool", "LIV", 14),
    ("Manchester City", "MCI", 43),
    ("Manchester United", "MUN", 1),
    ("Newcastle", "NEW", 4),
    ("Nottingham Forest", "NFO", 17),
    ("Southampton", "SOU", 20),
    ("Tottenham", "TOT", 6),
    ("West Ham", "WHU", 21),
    ("Wolves", "WOL", 39),
    ("Leicester City", "LEI", 13),
    ("Ipswich Town", "IPS", 133),
]


async def seed_initial_user() -> None:
    """Create the site admin user if configured via env and no users exist."""
    if not settings.SEED_ADMIN_EMAIL or not settings.SEED_ADMIN_PASSWORD:
        logger.debug("SEED_ADMIN_EMAIL not set, skipping seed")
        return
    existing_users = await _db.db.users.count_documents({})
    if existing_users > 0:
        logger.info("Seed admin skipped (existing users=%d)", existing_users)
        return

    now = utcnow()
    result = await _db.db.users.insert_one({
        "email": settings.SEED_ADMIN_EMAIL.lower(),
        "username": "admin",
        "name": None,
        "hashed_password": hash_password(settings.SEED_ADMIN_PASSWORD),
        "is_admin": True,
        "created_at": now,
        "updated_at": now,
    })
    logger.info("Seed user created (admin): %s", result.inserted_id)


async def seed_default_teams() -> int:
    """Insert the default EPL teams into an empty teams collection."""
    if not settings.SEED_DEFAULT_TEAMS:
        return 0
    if await _db.db.teams.count_documents({}) > 0:
        return 0

    docs = [
        {
            "id": idx,
            "name": name,
            "abbreviation": abbr,
            "logo": _EPL_BADGE_URL.format(badge),
            "sports_league": "EPL",
        }
        for idx, (name, abbr, badge) in enumerate(DEFAULT_EPL_TEAMS, start=1)
    ]
    await _db.db.teams.insert_many(docs)
    logger.info("Seeded %d default EPL teams", len(docs))
    return len(docs)
