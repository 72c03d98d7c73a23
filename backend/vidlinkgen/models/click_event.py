"""
Append-only click log used for time-bucketed analytics.
"""
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import Base


class ClickEvent(Base):
    """One row per access grant; VideoLink.clicks stays the authoritative total."""

    __tablename__ = "click_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    link_id = Column(Uuid(as_uuid=True), ForeignKey("video_links.id", ondelete="CASCADE"), nullable=False, index=True)
    clicked_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    user_agent = Column(String(255), nullable=True)
    country = Column(String(8), nullable=False, default="Unknown")
    device = Column(String(20), nullable=False, default="desktop")  # mobile, tablet, desktop

    link = relationship("VideoLink", back_populates="click_events")

    def __repr__(self):
        return f"<ClickEvent(link_id={self.link_id}, clicked_at={self.clicked_at})>"
