"""Game (fixture) models and the shared game status vocabulary."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

GameStatus = Literal["not_started", "in_progress", "completed"]

NOT_STARTED: GameStatus = "not_started"
IN_PROGRESS: GameStatus = "in_progress"
COMPLETED: GameStatus = "completed"


class TeamRef(BaseModel):
    """Team as embedded in game and pick responses."""
    id: int
    name: str
    abbreviation: Optional[str] = None
    logo: Optional[str] = None


# ---------- MongoDB documents ----------

class GameInDB(BaseModel):
    """One scheduled match as stored in the games collection."""
    id: int
    week: int
    home_team_id: int
    away_team_id: int
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: GameStatus = NOT_STARTED
    date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    manual_status_override: Optional[GameStatus] = None
    sports_league: str  # e.g. EPL, NFL, NBA
    season: str  # e.g. 2025/2026


# ---------- Request bodies ----------

class GameStatusOverride(BaseModel):
    """Admin sets or clears (null) a manual status override."""
    manual_status_override: Optional[GameStatus] = None


class GameScoreUpdate(BaseModel):
    """Admin score correction. Both scores are required together."""
    home_score: Optional[int] = Field(default=None, ge=0)
    away_score: Optional[int] = Field(default=None, ge=0)
    status: Optional[GameStatus] = None

    @model_validator(mode="after")
    def scores_come_in_pairs(self) -> "GameScoreUpdate":
        if (self.home_score is None) != (self.away_score is None):
            raise ValueError("home_score and away_score must be set together.")
        return self


# ---------- Responses ----------

class UserPickSummary(BaseModel):
    id: str
    team: TeamRef
    result: Optional[Literal["win", "loss", "draw"]] = None
    week: int


class GameResponse(BaseModel):
    id: int
    week: int
    home_team: TeamRef
    away_team: TeamRef
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: GameStatus
    computed_status: GameStatus
    status_label: str
    can_pick: bool
    date: Optional[datetime] = None
    start_time: Optional[datetime] = None
    manual_status_override: Optional[GameStatus] = None
    sports_league: str
    season: str
    user_pick: Optional[UserPickSummary] = None
