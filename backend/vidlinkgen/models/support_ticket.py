"""
Support ticket model.
"""
import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import Base

TICKET_STATUSES = ("open", "in progress", "resolved", "closed")
TICKET_PRIORITIES = ("high", "normal")


class SupportTicket(Base):
    """Ticket opened by a user; status is set by admins in any order."""

    __tablename__ = "support_tickets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String(20), default="normal", nullable=False)
    status = Column(String(20), default="open", nullable=False, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="support_tickets")

    def __repr__(self):
        return f"<SupportTicket(id={self.id}, status={self.status}, priority={self.priority})>"
