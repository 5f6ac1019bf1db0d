"""Weekly pick models: one team per member per league per week."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.models.game import TeamRef

PickResult = Literal["win", "loss", "draw"]


class PickInDB(BaseModel):
    """One document per (user_id, league_id, week)."""
    user_id: str
    league_id: str
    game_id: int
    team_id: int
    week: int
    result: Optional[PickResult] = None  # None until the game is scored
    created_at: datetime
    updated_at: datetime


class PickCreate(BaseModel):
    """Request body for making or changing a pick."""
    league_id: str
    game_id: int = Field(gt=0)
    team_id: int = Field(gt=0)
    week: int = Field(gt=0)


class PickResponse(BaseModel):
    id: str
    league_id: str
    game_id: int
    team: TeamRef
    week: int
    result: Optional[PickResult] = None
    game_start: Optional[datetime] = None
    can_change: bool = False


class PickRemaining(BaseModel):
    team: TeamRef
    remaining: int


class WeekPickStatus(BaseModel):
    """Lock state of the caller's pick for the league's current pick week."""
    week: int
    gameweek_started: bool
    has_pick: bool
    picks_locked: bool
    can_make_first_pick: bool
    disable_pick_changes: bool
