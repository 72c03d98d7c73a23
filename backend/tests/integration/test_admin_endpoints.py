"""
Integration tests for admin API endpoints.

Tests the full request/response cycle for admin routes.
"""
import uuid
from datetime import datetime, timedelta

import pytest

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.models import AdminAuditLog, SupportTicket, User

BASE = "/api/v1/admin"


@pytest.fixture
def members(db):
    """Several members, two of them premium."""
    users = []
    for i, tier in enumerate([None, "individual", None, "team"]):
        user = User(
            email=f"user{i}@test.com",
            full_name=f"Test User {i}",
            role="member",
            is_active=True,
            is_premium=tier is not None,
            premium_tier=tier,
            premium_expires_at=datetime(2099, 1, 1) if tier else None,
        )
        db.add(user)
        users.append(user)
    db.commit()
    for user in users:
        db.refresh(user)
    return users


class TestAdminAccess:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/stats"),
            ("get", "/users"),
            ("get", "/tickets"),
        ],
    )
    def test_member_forbidden(self, client_for, free_user, method, path):
        response = getattr(client_for(free_user), method)(f"{BASE}{path}")

        assert response.status_code == 403
        assert "Admin access required" in response.json()["detail"]

    def test_anonymous_unauthorized(self, client_for):
        response = client_for(None).get(f"{BASE}/stats")

        assert response.status_code == 401


class TestUserManagement:
    def test_list_users_paginated(self, client_for, admin_user, members):
        response = client_for(admin_user).get(f"{BASE}/users", params={"page": 1, "page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["page_size"] == 2
        assert len(data["users"]) == 2

    def test_list_users_premium_filter(self, client_for, admin_user, members, make_link):
        make_link(members[1])
        make_link(members[1])

        response = client_for(admin_user).get(f"{BASE}/users", params={"premium": True})

        data = response.json()
        assert data["total"] == 2
        counts = {user["email"]: user["link_count"] for user in data["users"]}
        assert counts == {"user1@test.com": 2, "user3@test.com": 0}

    def test_search(self, client_for, admin_user, members):
        response = client_for(admin_user).get(f"{BASE}/users", params={"search": "User 2"})

        assert [user["email"] for user in response.json()["users"]] == ["user2@test.com"]

    def test_assign_premium(self, client_for, admin_user, members, db):
        target = members[0]

        response = client_for(admin_user).post(
            f"{BASE}/users/{target.id}/premium", json={"plan_key": "team_yearly"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_premium"] is True
        assert data["premium_tier"] == "team"
        expires = datetime.fromisoformat(data["premium_expires_at"])
        assert expires - utcnow() > timedelta(days=360)
        log = db.query(AdminAuditLog).one()
        assert log.event_type == "premium_assigned"
        assert log.details["plan"] == "team_yearly"

    def test_assign_unknown_plan(self, client_for, admin_user, members):
        response = client_for(admin_user).post(
            f"{BASE}/users/{members[0].id}/premium", json={"plan_key": "platinum"}
        )

        assert response.status_code == 422

    def test_extend_premium(self, client_for, admin_user, members):
        target = members[1]

        response = client_for(admin_user).post(f"{BASE}/users/{target.id}/premium/extend")

        assert response.status_code == 200
        assert response.json()["premium_expires_at"].startswith("2099-02-01")

    def test_extend_without_plan_conflicts(self, client_for, admin_user, members):
        response = client_for(admin_user).post(f"{BASE}/users/{members[0].id}/premium/extend")

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "invalid_premium_state"

    def test_revoke_premium(self, client_for, admin_user, members):
        response = client_for(admin_user).delete(f"{BASE}/users/{members[3].id}/premium")

        assert response.status_code == 200
        data = response.json()
        assert data["is_premium"] is False
        assert data["premium_tier"] is None
        assert data["premium_expires_at"] is None

    def test_suspend_and_unsuspend(self, client_for, admin_user, members, db):
        client = client_for(admin_user)
        target = members[2]

        suspended = client.post(f"{BASE}/users/{target.id}/suspend")
        assert suspended.status_code == 200
        assert suspended.json()["is_active"] is False

        restored = client.post(f"{BASE}/users/{target.id}/unsuspend")
        assert restored.json()["is_active"] is True

        events = [log.event_type for log in db.query(AdminAuditLog).order_by(AdminAuditLog.created_at)]
        assert events == ["user_suspended", "user_unsuspended"]

    def test_unknown_user(self, client_for, admin_user):
        response = client_for(admin_user).post(f"{BASE}/users/{uuid.uuid4()}/suspend")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "user_not_found"


class TestStatsAndTickets:
    def test_stats(self, client_for, admin_user, members, make_link):
        make_link(members[0], clicks=3)

        response = client_for(admin_user).get(f"{BASE}/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["total_users"] == 5
        assert data["premium_users"] == 2
        assert data["total_links"] == 1
        assert data["total_clicks"] == 3

    def test_ticket_status_update(self, client_for, admin_user, free_user, db):
        ticket = SupportTicket(
            user_id=free_user.id, user_email=free_user.email, subject="Help", message="Please"
        )
        db.add(ticket)
        db.commit()
        client = client_for(admin_user)

        listed = client.get(f"{BASE}/tickets", params={"status": "open"})
        assert listed.json()["total"] == 1

        updated = client.patch(f"{BASE}/tickets/{ticket.id}", json={"status": "in progress"})
        assert updated.status_code == 200
        assert updated.json()["status"] == "in progress"

        invalid = client.patch(f"{BASE}/tickets/{ticket.id}", json={"status": "archived"})
        assert invalid.status_code == 400
