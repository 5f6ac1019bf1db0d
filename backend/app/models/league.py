"""League, membership and join request models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

MembershipStatus = Literal["active", "pending", "rejected"]
JoinRequestStatus = Literal["pending", "approved", "rejected"]


# ---------- MongoDB documents ----------

class LeagueInDB(BaseModel):
    """Full league document as stored in MongoDB."""
    name: str
    description: str
    sports_league: str
    season: str
    logo: Optional[str] = None
    is_public: bool = False
    requires_approval: bool = True
    is_active: bool = True
    created_by: str  # User._id reference
    member_count: int = 0
    # Week pointers: 0 means "not configured yet"
    current_pick_week: int = 0
    current_game_week: int = 0
    last_completed_week: int = 0
    created_at: datetime
    updated_at: datetime


class LeagueMembershipInDB(BaseModel):
    league_id: str
    user_id: str
    team_name: str
    points: int = 0
    strikes: int = 0
    loss_strikes: int = 0
    missing_pick_strikes: int = 0
    rank: int = 0
    is_active: bool = True
    is_admin: bool = False
    is_paid: bool = False
    status: MembershipStatus = "active"
    joined_at: datetime


# ---------- Request bodies ----------

class LeagueCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    sports_league: str = Field(min_length=1)
    season: str = Field(min_length=1)
    is_public: bool = False
    requires_approval: bool = True
    team_name: Optional[str] = Field(default=None, max_length=100)


class LeagueJoin(BaseModel):
    team_name: str = Field(min_length=1, max_length=100)
    message: Optional[str] = Field(default=None, max_length=500)


class LeagueSettingsUpdate(BaseModel):
    """Admin-editable league settings. Omitted fields stay unchanged."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    is_public: Optional[bool] = None
    requires_approval: Optional[bool] = None
    current_pick_week: Optional[int] = Field(default=None, ge=0)
    current_game_week: Optional[int] = Field(default=None, ge=0)
    last_completed_week: Optional[int] = Field(default=None, ge=0)


class MemberUpdate(BaseModel):
    is_paid: Optional[bool] = None
    is_admin: Optional[bool] = None
    team_name: Optional[str] = None

    @field_validator("team_name")
    @classmethod
    def team_name_length(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Team name cannot be empty.")
        if len(v) > 100:
            raise ValueError("Team name must be 100 characters or less.")
        return v


# ---------- Responses ----------

class LeagueResponse(BaseModel):
    id: str
    name: str
    description: str
    sports_league: str
    season: str
    logo: Optional[str] = None
    is_public: bool
    requires_approval: bool
    is_active: bool
    created_by: str
    member_count: int
    current_pick_week: int
    current_game_week: int
    last_completed_week: int
    created_at: datetime


class MembershipResponse(BaseModel):
    id: str
    league_id: str
    user_id: str
    username: Optional[str] = None
    team_name: str
    points: int
    strikes: int
    rank: int
    is_active: bool
    is_admin: bool
    is_paid: bool
    status: MembershipStatus
    joined_at: datetime


class JoinRequestResponse(BaseModel):
    id: str
    league_id: str
    user_id: str
    username: str
    team_name: str
    message: Optional[str] = None
    status: JoinRequestStatus
    requested_at: datetime


class ScoreboardEntry(BaseModel):
    user_id: str
    name: str
    points: int
    strikes: int
    rank: int
