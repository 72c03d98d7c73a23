"""
Analytics Pydantic schemas.
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class DailyClicks(BaseModel):
    date: date
    clicks: int


class CountBucket(BaseModel):
    """A labelled count (country code, device class or time-of-day range)."""

    key: str
    clicks: int


class TopLink(BaseModel):
    id: UUID
    short_id: str
    url: str
    custom_name: str
    clicks: int
    created_at: datetime

    class Config:
        from_attributes = True


class AnalyticsSummary(BaseModel):
    """Rollups across all of the caller's links."""

    timezone: str
    total_links: int
    total_clicks: int
    active_links: int
    created_this_month: int
    clicks_today: int
    top_links: List[TopLink]
    clicks_by_country: List[CountBucket]
    clicks_by_device: List[CountBucket]
    clicks_by_time_of_day: List[CountBucket]


class LinkAnalytics(BaseModel):
    """Per-link detail with its trailing daily click series."""

    id: UUID
    short_id: str
    url: str
    custom_name: str
    description: Optional[str] = None
    is_password_protected: bool
    expiry_date: Optional[datetime] = None
    is_expired: bool
    created_at: datetime
    total_clicks: int
    timezone: str
    daily_clicks: List[DailyClicks]
