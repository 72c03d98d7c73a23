"""
Database models package.

All SQLAlchemy models are exported from this module for easy imports.
"""
from vidlinkgen.models.user import User
from vidlinkgen.models.video_link import VideoLink, LinkPermission
from vidlinkgen.models.click_event import ClickEvent
from vidlinkgen.models.support_ticket import SupportTicket, TICKET_STATUSES, TICKET_PRIORITIES
from vidlinkgen.models.admin_audit_log import AdminAuditLog

__all__ = [
    "User",
    "VideoLink",
    "LinkPermission",
    "ClickEvent",
    "SupportTicket",
    "TICKET_STATUSES",
    "TICKET_PRIORITIES",
    "AdminAuditLog",
]
