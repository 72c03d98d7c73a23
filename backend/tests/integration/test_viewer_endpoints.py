"""
Integration tests for the public viewer endpoints.
"""
import time
import uuid
from datetime import timedelta

import pytest
from jose import jwt

from vidlinkgen.core.auth import get_optional_user
from vidlinkgen.core.config import settings
from vidlinkgen.core.rate_limit import limiter
from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.models import ClickEvent, VideoLink


def _clicks(db, link):
    db.expire_all()
    return db.query(VideoLink).filter(VideoLink.id == link.id).one().clicks


class TestPreview:
    def test_preview_does_not_count(self, client_for, free_user, make_link, db):
        link = make_link(free_user, password="pw", short_id="prev001")

        response = client_for(None).get("/v/prev001")

        assert response.status_code == 200
        assert response.json()["requires_password"] is True
        assert "password" not in response.json()
        assert _clicks(db, link) == 0

    def test_unknown_short_id(self, client_for):
        response = client_for(None).get("/v/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == {
            "error": "not_found",
            "message": "This video link was not found.",
        }


class TestAccess:
    def test_public_link_granted(self, client_for, free_user, make_link, db):
        link = make_link(free_user, source="https://www.youtube.com/watch?v=abc123", short_id="pub0001")

        response = client_for(None).post(
            "/v/pub0001/access",
            headers={"User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0)", "CF-IPCountry": "gh"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["playback_url"] == "https://www.youtube.com/embed/abc123"
        assert data["clicks"] == 1
        event = db.query(ClickEvent).one()
        assert (event.country, event.device) == ("GH", "mobile")
        assert _clicks(db, link) == 1

    def test_password_flow(self, client_for, individual_user, make_link, db):
        link = make_link(individual_user, password="s3cret", short_id="pwd0001")
        client = client_for(None)

        missing = client.post("/v/pwd0001/access")
        wrong = client.post("/v/pwd0001/access", json={"password": "nope"})
        right = client.post("/v/pwd0001/access", json={"password": "s3cret"})

        assert missing.status_code == 401
        assert missing.json()["detail"]["error"] == "password_required"
        assert wrong.status_code == 401
        assert wrong.json()["detail"]["error"] == "incorrect_password"
        assert right.status_code == 200
        assert _clicks(db, link) == 1

    def test_expired_link(self, client_for, free_user, make_link, db):
        link = make_link(free_user, expiry_date=utcnow() - timedelta(minutes=1), short_id="old0001")

        response = client_for(None).post("/v/old0001/access")

        assert response.status_code == 410
        assert response.json()["detail"]["error"] == "expired"
        assert _clicks(db, link) == 0

    def test_allowlist_requires_signed_in_listed_email(
        self, client_for, team_user, viewer_user, make_link, db
    ):
        link = make_link(team_user, allowed_emails=["viewer@test.com"], short_id="acl0001")

        anonymous = client_for(None).post("/v/acl0001/access")
        assert anonymous.status_code == 403
        assert anonymous.json()["detail"]["error"] == "access_denied"

        listed = client_for(viewer_user).post("/v/acl0001/access")
        assert listed.status_code == 200
        assert _clicks(db, link) == 1

    def test_allowlist_rejects_unlisted_user(self, client_for, team_user, free_user, make_link):
        make_link(team_user, allowed_emails=["viewer@test.com"], short_id="acl0002")

        response = client_for(free_user).post("/v/acl0002/access")

        assert response.status_code == 403

    def test_link_without_source(self, client_for, free_user, make_link, db):
        link = make_link(free_user, source=None, short_id="empty01")

        response = client_for(None).post("/v/empty01/access")

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "source_missing"
        assert _clicks(db, link) == 0

    def test_expired_bearer_token_on_public_link(self, client_for, free_user, make_link, db):
        from vidlinkgen.main import app

        link = make_link(free_user, short_id="pubtok1")
        client = client_for(None)
        app.dependency_overrides.pop(get_optional_user)
        expired = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "email": "stale@test.com",
                "aud": settings.auth_jwt_audience,
                "exp": int(time.time()) - 60,
            },
            settings.auth_jwt_secret,
            algorithm="HS256",
        )

        response = client.post("/v/pubtok1/access", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 200
        assert _clicks(db, link) == 1


class TestPasswordAttemptLimit:
    @pytest.fixture(autouse=True)
    def limiter_enabled(self, monkeypatch):
        monkeypatch.setattr(limiter, "enabled", True)
        monkeypatch.setattr(settings, "password_attempt_limit", "3/minute")
        limiter.reset()
        yield
        limiter.reset()

    def test_public_link_views_are_never_limited(self, client_for, free_user, make_link, db):
        link = make_link(free_user, short_id="pubrate")
        client = client_for(None)

        codes = [client.post("/v/pubrate/access").status_code for _ in range(25)]

        assert codes == [200] * 25
        assert _clicks(db, link) == 25

    def test_correct_password_does_not_spend_attempts(self, client_for, individual_user, make_link, db):
        link = make_link(individual_user, password="s3cret", short_id="pwdrat1")
        client = client_for(None)

        codes = [
            client.post("/v/pwdrat1/access", json={"password": "s3cret"}).status_code
            for _ in range(5)
        ]

        assert codes == [200] * 5
        assert _clicks(db, link) == 5

    def test_wrong_passwords_lock_out_the_address(self, client_for, individual_user, make_link, db):
        link = make_link(individual_user, password="s3cret", short_id="pwdrat2")
        client = client_for(None)

        wrong = [
            client.post("/v/pwdrat2/access", json={"password": "nope"}).status_code
            for _ in range(3)
        ]
        locked = client.post("/v/pwdrat2/access", json={"password": "s3cret"})

        assert wrong == [401] * 3
        assert locked.status_code == 429
        assert locked.json()["detail"] == {
            "error": "too_many_attempts",
            "message": "Too many incorrect password attempts. Please wait a minute and try again.",
        }
        assert _clicks(db, link) == 0

    def test_lockout_is_per_link(self, client_for, individual_user, make_link, db):
        make_link(individual_user, password="s3cret", short_id="pwdrat3")
        other = make_link(individual_user, password="other", short_id="pwdrat4")
        client = client_for(None)

        for _ in range(3):
            client.post("/v/pwdrat3/access", json={"password": "nope"})

        response = client.post("/v/pwdrat4/access", json={"password": "other"})

        assert response.status_code == 200
        assert _clicks(db, other) == 1
