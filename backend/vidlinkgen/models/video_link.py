"""
Shareable video link and its per-email access permissions.
"""
import uuid
from sqlalchemy import Column, String, DateTime, Integer, Boolean, Text, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import Base


class VideoLink(Base):
    """A short public link pointing at an uploaded object or an external video URL."""

    __tablename__ = "video_links"
    __table_args__ = (
        CheckConstraint("clicks >= 0", name="ck_video_links_clicks_non_negative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Public addressing: {public_base_url}/v/{short_id}
    short_id = Column(String(32), unique=True, nullable=False, index=True)
    url = Column(String(500), nullable=False)

    # Source: either an uploaded object (storage_key + its public URL) or an external URL
    source = Column(String(2000), nullable=True)
    storage_key = Column(String(1000), nullable=True)

    custom_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    # Stored and compared as plaintext
    password = Column(String(255), nullable=True)
    expiry_date = Column(DateTime, nullable=True)
    is_encrypted = Column(Boolean, default=False, nullable=False)

    # Only ever incremented by the access gate, atomically in SQL
    clicks = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="video_links")
    permissions = relationship(
        "LinkPermission", back_populates="link", cascade="all, delete-orphan"
    )
    click_events = relationship(
        "ClickEvent", back_populates="link", cascade="all, delete-orphan"
    )

    @property
    def is_password_protected(self) -> bool:
        return bool(self.password)

    @property
    def allowed_emails(self):
        return sorted(p.user_email for p in self.permissions)

    def is_expired(self, now=None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date < (now or utcnow())

    def __repr__(self):
        return f"<VideoLink(id={self.id}, short_id={self.short_id}, clicks={self.clicks})>"


class LinkPermission(Base):
    """An email allowed to view a link; no rows means the link is public."""

    __tablename__ = "video_link_permissions"
    __table_args__ = (
        UniqueConstraint("link_id", "user_email", name="uq_link_permission_email"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    link_id = Column(Uuid(as_uuid=True), ForeignKey("video_links.id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    permission_type = Column(String(20), default="view", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    link = relationship("VideoLink", back_populates="permissions")

    def __repr__(self):
        return f"<LinkPermission(link_id={self.link_id}, user_email={self.user_email})>"
