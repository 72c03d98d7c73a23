"""
Support ticket service.
"""
import logging
import uuid
from typing import List, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from vidlinkgen.core.exceptions import NotAuthenticated, NotAuthorized, TicketNotFound, ValidationFailed
from vidlinkgen.models import TICKET_STATUSES, SupportTicket
from vidlinkgen.services.audit_logger import log_admin_action
from vidlinkgen.services.identity import IdentityContext

logger = logging.getLogger(__name__)


class SupportService:
    def __init__(self, db: Session):
        self.db = db

    def create_ticket(self, user: IdentityContext, subject: str, message: str) -> SupportTicket:
        """
        Open a ticket. Premium users get high priority.

        Raises:
            ValidationFailed: Subject or message is blank
        """
        if user is None:
            raise NotAuthenticated()
        subject = (subject or "").strip()
        message = (message or "").strip()
        if not subject or not message:
            raise ValidationFailed("Please fill in both subject and message.")

        ticket = SupportTicket(
            user_id=user.user_id,
            user_email=user.email,
            subject=subject[:255],
            message=message,
            priority="high" if user.is_premium else "normal",
            status="open",
        )
        self.db.add(ticket)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(ticket)

        logger.info(f"User {user.user_id} opened support ticket {ticket.id} ({ticket.priority})")
        return ticket

    def list_own(self, user: IdentityContext) -> List[SupportTicket]:
        return (
            self.db.query(SupportTicket)
            .filter(SupportTicket.user_id == user.user_id)
            .order_by(SupportTicket.created_at.desc())
            .all()
        )

    def list_all(self, actor: IdentityContext, status: Optional[str] = None) -> List[SupportTicket]:
        if actor is None or not actor.is_admin:
            raise NotAuthorized("Admin access required.")
        query = self.db.query(SupportTicket)
        if status:
            query = query.filter(SupportTicket.status == status)
        return query.order_by(SupportTicket.created_at.desc()).all()

    def update_status(
        self,
        actor: IdentityContext,
        ticket_id: uuid.UUID,
        status: str,
        request: Optional[Request] = None,
    ) -> SupportTicket:
        """Set any status; transitions are not forced forward-only."""
        if actor is None or not actor.is_admin:
            raise NotAuthorized("Admin access required.")
        status = (status or "").strip().lower()
        if status not in TICKET_STATUSES:
            raise ValidationFailed(f"Invalid status: {status}. Must be one of: {list(TICKET_STATUSES)}")

        ticket = self.db.query(SupportTicket).filter(SupportTicket.id == ticket_id).first()
        if not ticket:
            raise TicketNotFound()

        previous = ticket.status
        ticket.status = status
        log_admin_action(
            self.db,
            event_type="ticket_status_changed",
            admin_id=actor.user_id,
            target_user_id=ticket.user_id,
            target_id=str(ticket.id),
            details={"from": previous, "to": status},
            request=request,
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(ticket)

        logger.info(f"Admin {actor.user_id} moved ticket {ticket.id} from {previous} to {status}")
        return ticket
