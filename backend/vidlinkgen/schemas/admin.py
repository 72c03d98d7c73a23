"""
Admin-specific Pydantic schemas for API request/response validation.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from vidlinkgen.core.pricing import PlanKey


# User Management Schemas

class AdminUserSummary(BaseModel):
    """User row in the admin list, with its link count."""

    id: UUID
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool
    is_premium: bool
    premium_tier: Optional[str] = None
    premium_expires_at: Optional[datetime] = None
    has_joined_channels: bool = False
    created_at: datetime
    last_login_at: Optional[datetime] = None
    link_count: int = 0

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    """Paginated response for user list."""

    total: int
    page: int
    page_size: int
    users: List[AdminUserSummary]


class AssignPremiumRequest(BaseModel):
    plan_key: PlanKey


# System Schemas

class PlatformStats(BaseModel):
    total_users: int
    premium_users: int
    suspended_users: int
    total_links: int
    total_clicks: int
    open_tickets: int


class TicketStatusUpdate(BaseModel):
    status: str
