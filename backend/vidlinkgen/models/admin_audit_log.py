"""
Admin audit log for back-office actions.
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, JSON, Uuid
from sqlalchemy.orm import relationship

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import Base


class AdminAuditLog(Base):
    """
    Append-only record of admin mutations (premium changes, suspensions, ticket updates).
    """

    __tablename__ = "admin_audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_type = Column(String(50), nullable=False, index=True)
    admin_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    target_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    target_id = Column(String(64), nullable=True)
    details = Column(JSON, nullable=True)
    ip_hash = Column(String(128), nullable=True)
    user_agent = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    admin = relationship("User", foreign_keys=[admin_id])
    target_user = relationship("User", foreign_keys=[target_user_id])

    def __repr__(self):
        return (
            f"<AdminAuditLog(id={self.id}, event_type={self.event_type}, "
            f"admin_id={self.admin_id}, target_user_id={self.target_user_id})>"
        )
