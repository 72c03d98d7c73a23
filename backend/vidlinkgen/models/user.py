"""
User profile model mirroring the identity provider's users.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean, Uuid
from sqlalchemy.orm import relationship

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import Base


class User(Base):
    """Profile row keyed by the identity provider's user id."""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="member", nullable=False)  # member, admin
    is_active = Column(Boolean, default=True, nullable=False)

    # Premium entitlement (assigned manually by an admin)
    is_premium = Column(Boolean, default=False, nullable=False)
    premium_tier = Column(String(20), nullable=True)  # individual, team
    premium_expires_at = Column(DateTime, nullable=True)

    has_joined_channels = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    video_links = relationship("VideoLink", back_populates="user", cascade="all, delete-orphan")
    support_tickets = relationship("SupportTicket", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def has_active_premium(self, now: datetime = None) -> bool:
        """Premium only counts while a tier is set and the expiry is null or in the future."""
        if not self.is_premium or not self.premium_tier:
            return False
        if self.premium_expires_at is None:
            return True
        return self.premium_expires_at > (now or utcnow())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
