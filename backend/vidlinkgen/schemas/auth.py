"""
Authentication Pydantic schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class SignUpRequest(BaseModel):
    name: str
    email: str
    password: str


class SignInRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user_id: UUID
    email: str
    display_name: Optional[str] = None

    class Config:
        from_attributes = True


class SignUpResponse(BaseModel):
    user_id: UUID
    email: str
    display_name: Optional[str] = None
    session: Optional[SessionResponse] = None
    message: str


class UserProfile(BaseModel):
    """The caller's profile with effective premium state."""

    id: UUID
    email: str
    full_name: Optional[str] = None
    role: str
    is_admin: bool
    is_premium: bool
    premium_tier: Optional[str] = None
    premium_expires_at: Optional[datetime] = None
    has_joined_channels: bool
    upload_limit_bytes: Optional[int] = None
    upload_limit: Optional[str] = None
    created_at: datetime
