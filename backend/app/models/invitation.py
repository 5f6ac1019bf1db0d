"""League invitation link models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InvitationInDB(BaseModel):
    league_id: str
    token: str
    created_by: str
    max_uses: Optional[int] = None  # None = unlimited
    current_uses: int = 0
    expires_at: Optional[datetime] = None  # None = never
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class InvitationCreate(BaseModel):
    max_uses: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None


class InvitationAccept(BaseModel):
    team_name: str = Field(min_length=1, max_length=100)


class InvitationResponse(BaseModel):
    id: str
    league_id: str
    token: str
    invite_link: str
    created_by: str
    max_uses: Optional[int] = None
    current_uses: int
    expires_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime


class InvitationPreview(BaseModel):
    """Public info for the invite landing page."""
    token: str
    is_valid: bool
    is_expired: bool
    is_at_max_uses: bool
    league_id: str
    league_name: str
    league_description: str
    sports_league: str
    member_count: int
    creator_username: str
