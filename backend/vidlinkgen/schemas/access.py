"""
Schemas for the public viewer endpoints (/v/{short_id}).
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class LinkPreview(BaseModel):
    """Public metadata shown before access is evaluated."""

    short_id: str
    custom_name: str
    description: Optional[str] = None
    requires_password: bool
    expiry_date: Optional[datetime] = None
    is_encrypted: bool = False


class AccessRequest(BaseModel):
    password: Optional[str] = None


class AccessGrantResponse(BaseModel):
    link_id: UUID
    short_id: str
    custom_name: str
    description: Optional[str] = None
    playback_url: str
    is_encrypted: bool = False
    clicks: int

    class Config:
        from_attributes = True
