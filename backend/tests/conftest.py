"""
Pytest configuration and shared fixtures for VidLinkGen.
"""
import io
import os
import sys
import tempfile
from datetime import timedelta
from pathlib import Path

# Test settings must be in place before vidlinkgen.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("AUTH_URL", "https://auth.test/auth/v1")
os.environ.setdefault("ADMIN_EMAILS", "root@vidlinkgen.test")
os.environ.setdefault("PUBLIC_BASE_URL", "https://vid.test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("LOCAL_STORAGE_PATH", tempfile.mkdtemp(prefix="vidlinkgen-tests-"))

# Ensure backend package is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.services.storage import StorageService


class FakeStorage(StorageService):
    """In-memory object storage that records every call."""

    def __init__(self):
        super().__init__(bucket="videos")
        self.objects = {}
        self.put_calls = []
        self.deleted = []
        self.fail_deletes = False

    def put_object(self, key, file_stream, on_progress=None):
        self.put_calls.append(key)
        self.objects[key] = file_stream.read()
        if on_progress:
            on_progress(100)
        return key

    def get_public_url(self, key):
        return f"https://cdn.test/videos/{key}"

    def delete_object(self, key):
        if self.fail_deletes:
            from vidlinkgen.core.exceptions import StorageError

            raise StorageError("storage unavailable")
        self.deleted.append(key)
        return self.objects.pop(key, None) is not None

    def object_exists(self, key):
        return key in self.objects


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.

    Uses an in-memory SQLite database for fast, isolated testing.
    """
    from vidlinkgen.db.base import Base
    import vidlinkgen.models  # noqa: F401

    # Create in-memory SQLite database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def _create_user(db, email, full_name, role="member", tier=None, expires_in_days=30):
    from vidlinkgen.models import User

    user = User(
        email=email,
        full_name=full_name,
        role=role,
        is_active=True,
        is_premium=tier is not None,
        premium_tier=tier,
        premium_expires_at=utcnow() + timedelta(days=expires_in_days) if tier else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def free_user(db):
    """A member without premium."""
    return _create_user(db, "free@test.com", "Free User")


@pytest.fixture
def individual_user(db):
    """A member on the individual tier."""
    return _create_user(db, "individual@test.com", "Individual User", tier="individual")


@pytest.fixture
def team_user(db):
    """A member on the team tier."""
    return _create_user(db, "team@test.com", "Team User", tier="team")


@pytest.fixture
def admin_user(db):
    """An admin without premium fields set."""
    return _create_user(db, "admin@test.com", "Admin User", role="admin")


@pytest.fixture
def viewer_user(db):
    """A signed-in visitor who owns nothing."""
    return _create_user(db, "viewer@test.com", "Viewer User")


@pytest.fixture
def identity_for():
    """Build the IdentityContext services receive for a user row."""
    from vidlinkgen.services.identity import IdentityContext

    return IdentityContext.from_user


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def make_link(db):
    """Factory inserting a VideoLink (and optional allowlist) directly."""
    from vidlinkgen.models import LinkPermission, VideoLink

    counter = {"n": 0}

    def _make(owner, source="https://example.com/video.mp4", allowed_emails=(), **fields):
        counter["n"] += 1
        short_id = fields.pop("short_id", f"tst{counter['n']:04d}")
        link = VideoLink(
            user_id=owner.id,
            short_id=short_id,
            url=f"https://vid.test/v/{short_id}",
            source=source,
            custom_name=fields.pop("custom_name", f"Test Video {counter['n']}"),
            **fields,
        )
        db.add(link)
        db.flush()
        for email in allowed_emails:
            db.add(LinkPermission(link_id=link.id, user_email=email))
        db.commit()
        db.refresh(link)
        return link

    return _make


@pytest.fixture
def video_file():
    """Factory for small in-memory upload payloads."""

    def _make(size=1024):
        return io.BytesIO(b"\0" * size)

    return _make


@pytest.fixture
def client_for(db, storage):
    """
    Factory for a TestClient authenticated as ``user`` (or anonymous when None).
    """
    from fastapi.testclient import TestClient

    from vidlinkgen.core.auth import get_current_user, get_optional_user
    from vidlinkgen.db.base import get_db
    from vidlinkgen.main import app
    from vidlinkgen.services.storage import get_storage

    def _make(user=None):
        def override_get_db():
            yield db

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_storage] = lambda: storage
        app.dependency_overrides[get_optional_user] = lambda: user
        if user is not None:
            app.dependency_overrides[get_current_user] = lambda: user
        else:
            app.dependency_overrides.pop(get_current_user, None)
        return TestClient(app)

    yield _make

    # Clean up
    app.dependency_overrides.clear()
