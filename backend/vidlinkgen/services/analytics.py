"""
Analytics aggregation over links and click events.

Read-only rollups recomputed on every dashboard load. VideoLink.clicks is the
authoritative total; click events are only used for time, country and device
breakdowns.
"""
import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import LinkNotFound, NotAuthorized, NotLinkOwner
from vidlinkgen.core.timeutils import get_zone, local_date, utcnow
from vidlinkgen.models import ClickEvent, SupportTicket, User, VideoLink
from vidlinkgen.services.identity import IdentityContext

logger = logging.getLogger(__name__)

TIME_OF_DAY_BUCKETS = ("00-04", "04-08", "08-12", "12-16", "16-20", "20-24")


def _local_midnight_utc(day, zone) -> datetime:
    """Naive UTC instant of local midnight at the start of ``day``."""
    local = datetime(day.year, day.month, day.day, tzinfo=zone)
    return local.astimezone(timezone.utc).replace(tzinfo=None)


class AnalyticsService:
    """Dashboard rollups for link owners and admins."""

    def __init__(self, db: Session):
        self.db = db

    def _owned_link(self, owner: IdentityContext, link_id: uuid.UUID) -> VideoLink:
        link = self.db.query(VideoLink).filter(VideoLink.id == link_id).first()
        if link is None:
            raise LinkNotFound()
        if link.user_id != owner.user_id:
            raise NotLinkOwner()
        return link

    def daily_click_series(
        self,
        link_id: uuid.UUID,
        days: Optional[int] = None,
        tz: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Tuple[Any, int]]:
        """
        Clicks per local calendar day over a trailing window ending today.

        Args:
            link_id: Link to aggregate
            days: Window length (default ANALYTICS_WINDOW_DAYS)
            tz: IANA timezone for day boundaries (default ANALYTICS_TIMEZONE)
            now: Reference time as naive UTC

        Returns:
            [(date, clicks), ...] oldest to newest, zero-filled
        """
        days = days or settings.analytics_window_days
        zone = get_zone(tz or settings.analytics_timezone)
        today = local_date(now or utcnow(), zone)
        window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
        start = _local_midnight_utc(window[0], zone)

        rows = (
            self.db.query(ClickEvent.clicked_at)
            .filter(ClickEvent.link_id == link_id, ClickEvent.clicked_at >= start)
            .all()
        )
        counts = Counter(local_date(row.clicked_at, zone) for row in rows)
        return [(day, counts.get(day, 0)) for day in window]

    def link_detail(
        self,
        owner: IdentityContext,
        link_id: uuid.UUID,
        tz: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[VideoLink, List[Tuple[Any, int]]]:
        """Owner-only link record with its trailing daily series."""
        link = self._owned_link(owner, link_id)
        return link, self.daily_click_series(link.id, tz=tz, now=now)

    def account_summary(
        self,
        owner: IdentityContext,
        tz: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Rollups across all of an owner's links.
        """
        zone = get_zone(tz or settings.analytics_timezone)
        now = now or utcnow()
        today = local_date(now, zone)

        links = (
            self.db.query(VideoLink)
            .filter(VideoLink.user_id == owner.user_id)
            .order_by(VideoLink.created_at.desc())
            .all()
        )
        month_start = _local_midnight_utc(today.replace(day=1), zone)
        day_start = _local_midnight_utc(today, zone)

        total_clicks = sum(link.clicks or 0 for link in links)
        active_links = sum(1 for link in links if not link.is_expired(now))
        created_this_month = sum(1 for link in links if link.created_at >= month_start)
        top_links = sorted(links, key=lambda link: link.clicks or 0, reverse=True)[: settings.top_links_limit]

        events = (
            self.db.query(ClickEvent.clicked_at, ClickEvent.country, ClickEvent.device)
            .join(VideoLink, ClickEvent.link_id == VideoLink.id)
            .filter(VideoLink.user_id == owner.user_id)
            .all()
        )

        by_country = Counter(event.country or "Unknown" for event in events)
        by_device = Counter(event.device or "desktop" for event in events)
        by_time = Counter()
        clicks_today = 0
        for event in events:
            local = event.clicked_at.replace(tzinfo=timezone.utc).astimezone(zone)
            by_time[TIME_OF_DAY_BUCKETS[local.hour // 4]] += 1
            if event.clicked_at >= day_start:
                clicks_today += 1

        return {
            "total_links": len(links),
            "total_clicks": total_clicks,
            "active_links": active_links,
            "created_this_month": created_this_month,
            "clicks_today": clicks_today,
            "top_links": top_links,
            "clicks_by_country": by_country.most_common(),
            "clicks_by_device": by_device.most_common(),
            "clicks_by_time_of_day": [(bucket, by_time.get(bucket, 0)) for bucket in TIME_OF_DAY_BUCKETS],
        }

    def platform_stats(self, actor: IdentityContext, now: Optional[datetime] = None) -> Dict[str, int]:
        """Admin-only platform totals."""
        if actor is None or not actor.is_admin:
            raise NotAuthorized("Admin access required.")
        now = now or utcnow()

        total_users = self.db.query(func.count(User.id)).scalar() or 0
        premium_users = (
            self.db.query(func.count(User.id))
            .filter(
                User.is_premium == True,  # noqa: E712
                User.premium_tier.isnot(None),
                or_(User.premium_expires_at.is_(None), User.premium_expires_at > now),
            )
            .scalar()
            or 0
        )
        suspended_users = (
            self.db.query(func.count(User.id)).filter(User.is_active == False).scalar() or 0  # noqa: E712
        )
        total_links = self.db.query(func.count(VideoLink.id)).scalar() or 0
        total_clicks = self.db.query(func.coalesce(func.sum(VideoLink.clicks), 0)).scalar() or 0
        open_tickets = (
            self.db.query(func.count(SupportTicket.id))
            .filter(SupportTicket.status == "open")
            .scalar()
            or 0
        )

        return {
            "total_users": int(total_users),
            "premium_users": int(premium_users),
            "suspended_users": int(suspended_users),
            "total_links": int(total_links),
            "total_clicks": int(total_clicks),
            "open_tickets": int(open_tickets),
        }
