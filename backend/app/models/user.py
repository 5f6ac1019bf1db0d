from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


def _password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long.")
    if not any(c.isdigit() for c in v):
        raise ValueError("Password must contain at least one digit.")
    return v


class UserInDB(BaseModel):
    """Full user document as stored in MongoDB."""
    email: EmailStr
    username: str
    name: Optional[str] = None
    hashed_password: str
    is_admin: bool = False  # site admin (game corrections)
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Request body for registration."""
    email: EmailStr
    username: str = Field(min_length=2, max_length=32)
    password: str
    confirm_password: str
    name: Optional[str] = Field(default=None, max_length=12)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match.")
        return self


class UserLogin(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    """Change password for a logged-in user."""
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords don't match.")
        if self.new_password == self.current_password:
            raise ValueError("New password must differ from the current password.")
        return self


class CompletePasswordReset(BaseModel):
    """Request body for finishing an admin-issued password reset."""
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "CompletePasswordReset":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords don't match.")
        return self


class UserProfileUpdate(BaseModel):
    """Profile edits. Omit ``name`` to keep it, send null or "" to clear it."""
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def display_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) > 12:
            raise ValueError("Name must be 12 characters or less.")
        return v or None


class AdminPasswordResetRequest(BaseModel):
    league_id: str


class UserResponse(BaseModel):
    """Public user data returned to the client."""
    id: str
    email: str
    username: str
    name: Optional[str] = None
    is_admin: bool = False
    created_at: datetime
