"""
backend/app/config.py

Purpose:
    Central settings loading for backend services.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "survivor_league"
    JWT_SECRET: str = "change-me"
    JWT_SECRET_OLD: str = ""  # Set during rotation; cleared after token expiry
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"
    COOKIE_SECURE: bool = False  # Set True in production (HTTPS)

    # JWT settings
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Public base URL used in generated links (password reset, invitations)
    APP_BASE_URL: str = "http://localhost:3000"

    # Shared secret for the scoring trigger endpoint (X-API-Key header)
    SCORING_API_KEY: str = ""

    PASSWORD_RESET_EXPIRE_HOURS: int = 24

    # Window after kickoff during which a game still counts as in progress
    GAME_COMPLETION_BUFFER_MINUTES: int = 150

    # Seed admin user (leave empty to skip seeding)
    SEED_ADMIN_EMAIL: str = ""
    SEED_ADMIN_PASSWORD: str = ""
    SEED_DEFAULT_TEAMS: bool = True

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }


settings = Settings()
