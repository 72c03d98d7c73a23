"""
Unit tests for analytics aggregation.
"""
from datetime import date, datetime

import pytest

from vidlinkgen.core.exceptions import NotAuthorized, NotLinkOwner
from vidlinkgen.models import ClickEvent, SupportTicket
from vidlinkgen.services.analytics import AnalyticsService

NOW = datetime(2025, 3, 10, 12, 0)


def _click(db, link, at, country="US", device="desktop"):
    db.add(ClickEvent(link_id=link.id, clicked_at=at, country=country, device=device))
    db.commit()


class TestDailySeries:
    def test_zero_filled_oldest_first(self, db, free_user, make_link):
        link = make_link(free_user)
        _click(db, link, datetime(2025, 3, 10, 1, 0))
        _click(db, link, datetime(2025, 3, 10, 11, 0))
        _click(db, link, datetime(2025, 3, 8, 23, 59))
        _click(db, link, datetime(2025, 3, 3, 0, 0))  # outside the window

        series = AnalyticsService(db).daily_click_series(link.id, days=7, tz="UTC", now=NOW)

        assert series == [
            (date(2025, 3, 4), 0),
            (date(2025, 3, 5), 0),
            (date(2025, 3, 6), 0),
            (date(2025, 3, 7), 0),
            (date(2025, 3, 8), 1),
            (date(2025, 3, 9), 0),
            (date(2025, 3, 10), 2),
        ]

    def test_buckets_by_local_calendar_day(self, db, free_user, make_link):
        link = make_link(free_user)
        # 23:00 on the 9th in New York
        _click(db, link, datetime(2025, 3, 10, 3, 0))

        series = dict(
            AnalyticsService(db).daily_click_series(link.id, days=7, tz="America/New_York", now=NOW)
        )

        assert series[date(2025, 3, 9)] == 1
        assert series[date(2025, 3, 10)] == 0

    def test_other_links_ignored(self, db, free_user, make_link):
        link = make_link(free_user)
        other = make_link(free_user)
        _click(db, other, datetime(2025, 3, 10, 9, 0))

        series = AnalyticsService(db).daily_click_series(link.id, tz="UTC", now=NOW)
        assert sum(count for _, count in series) == 0
        assert len(series) == 7

    def test_unknown_timezone(self, db, free_user, make_link):
        link = make_link(free_user)
        with pytest.raises(ValueError, match="Unknown timezone"):
            AnalyticsService(db).daily_click_series(link.id, tz="Mars/Olympus_Mons", now=NOW)

    def test_link_detail_owner_only(self, db, free_user, team_user, make_link, identity_for):
        link = make_link(free_user)
        with pytest.raises(NotLinkOwner):
            AnalyticsService(db).link_detail(identity_for(team_user), link.id, tz="UTC", now=NOW)

        found, series = AnalyticsService(db).link_detail(identity_for(free_user), link.id, tz="UTC", now=NOW)
        assert found.id == link.id
        assert series[-1] == (date(2025, 3, 10), 0)


class TestAccountSummary:
    def test_rollups(self, db, free_user, team_user, make_link, identity_for):
        popular = make_link(free_user, clicks=7, created_at=datetime(2025, 3, 2))
        expired = make_link(
            free_user, clicks=3, created_at=datetime(2025, 2, 20), expiry_date=datetime(2025, 3, 1)
        )
        make_link(free_user, clicks=0, created_at=datetime(2025, 3, 9))
        make_link(team_user, clicks=50, created_at=datetime(2025, 3, 9))

        _click(db, popular, datetime(2025, 3, 10, 9, 30), country="GH", device="mobile")
        _click(db, popular, datetime(2025, 3, 10, 10, 0), country="GH", device="mobile")
        _click(db, expired, datetime(2025, 2, 25, 21, 0), country="Unknown", device="desktop")

        summary = AnalyticsService(db).account_summary(identity_for(free_user), tz="UTC", now=NOW)

        assert summary["total_links"] == 3
        assert summary["total_clicks"] == 10
        assert summary["active_links"] == 2
        assert summary["created_this_month"] == 2
        assert summary["clicks_today"] == 2
        assert [link.clicks for link in summary["top_links"]] == [7, 3, 0]
        assert summary["clicks_by_country"] == [("GH", 2), ("Unknown", 1)]
        assert summary["clicks_by_device"] == [("mobile", 2), ("desktop", 1)]
        assert dict(summary["clicks_by_time_of_day"]) == {
            "00-04": 0,
            "04-08": 0,
            "08-12": 2,
            "12-16": 0,
            "16-20": 0,
            "20-24": 1,
        }

    def test_top_links_limited_to_five(self, db, free_user, make_link, identity_for):
        for clicks in range(8):
            make_link(free_user, clicks=clicks)

        summary = AnalyticsService(db).account_summary(identity_for(free_user), tz="UTC", now=NOW)
        assert [link.clicks for link in summary["top_links"]] == [7, 6, 5, 4, 3]

    def test_empty_account(self, db, free_user, identity_for):
        summary = AnalyticsService(db).account_summary(identity_for(free_user), tz="UTC", now=NOW)
        assert summary["total_links"] == 0
        assert summary["total_clicks"] == 0
        assert summary["top_links"] == []
        assert len(summary["clicks_by_time_of_day"]) == 6


class TestPlatformStats:
    def test_stats(self, db, admin_user, free_user, individual_user, make_link, identity_for):
        make_link(free_user, clicks=4)
        make_link(individual_user, clicks=6)
        free_user.is_active = False
        db.add(SupportTicket(user_id=free_user.id, user_email=free_user.email, subject="s", message="m"))
        db.commit()

        stats = AnalyticsService(db).platform_stats(identity_for(admin_user))

        assert stats == {
            "total_users": 3,
            "premium_users": 1,
            "suspended_users": 1,
            "total_links": 2,
            "total_clicks": 10,
            "open_tickets": 1,
        }

    def test_stats_admin_only(self, db, free_user, identity_for):
        with pytest.raises(NotAuthorized):
            AnalyticsService(db).platform_stats(identity_for(free_user))
