"""
Analytics endpoints for link owners.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vidlinkgen.core.auth import get_identity
from vidlinkgen.core.config import settings
from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import get_db
from vidlinkgen.schemas import AnalyticsSummary, CountBucket, DailyClicks, LinkAnalytics, TopLink
from vidlinkgen.services.analytics import AnalyticsService
from vidlinkgen.services.identity import IdentityContext

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    tz: Optional[str] = Query(None, description="IANA timezone for day boundaries"),
    identity: IdentityContext = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Rollups across the caller's links."""
    timezone = tz or settings.analytics_timezone
    summary = AnalyticsService(db).account_summary(identity, tz=timezone)
    return AnalyticsSummary(
        timezone=timezone,
        total_links=summary["total_links"],
        total_clicks=summary["total_clicks"],
        active_links=summary["active_links"],
        created_this_month=summary["created_this_month"],
        clicks_today=summary["clicks_today"],
        top_links=[TopLink.model_validate(link) for link in summary["top_links"]],
        clicks_by_country=[CountBucket(key=k, clicks=v) for k, v in summary["clicks_by_country"]],
        clicks_by_device=[CountBucket(key=k, clicks=v) for k, v in summary["clicks_by_device"]],
        clicks_by_time_of_day=[CountBucket(key=k, clicks=v) for k, v in summary["clicks_by_time_of_day"]],
    )


@router.get("/{link_id}", response_model=LinkAnalytics)
async def get_link_analytics(
    link_id: UUID,
    tz: Optional[str] = Query(None, description="IANA timezone for day boundaries"),
    identity: IdentityContext = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """Click total and the trailing daily series for one of the caller's links."""
    timezone = tz or settings.analytics_timezone
    link, series = AnalyticsService(db).link_detail(identity, link_id, tz=timezone)
    return LinkAnalytics(
        id=link.id,
        short_id=link.short_id,
        url=link.url,
        custom_name=link.custom_name,
        description=link.description,
        is_password_protected=link.is_password_protected,
        expiry_date=link.expiry_date,
        is_expired=link.is_expired(utcnow()),
        created_at=link.created_at,
        total_clicks=link.clicks,
        timezone=timezone,
        daily_clicks=[DailyClicks(date=day, clicks=count) for day, count in series],
    )
