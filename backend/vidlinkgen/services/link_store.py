"""
Link record store.

CRUD-with-filter access to video links and their satellite tables
(permissions, click events), plus the atomic click increment. Methods that
only stage changes leave committing to the caller so that multi-step writes
stay in one transaction.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.models import ClickEvent, LinkPermission, VideoLink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisitorInfo:
    """Request metadata stored with each click event."""

    user_agent: Optional[str] = None
    country: str = "Unknown"
    device: str = "desktop"


class LinkStore:
    """Queries and writes for VideoLink and its satellite rows."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_short_id(self, short_id: str) -> Optional[VideoLink]:
        return self.db.query(VideoLink).filter(VideoLink.short_id == short_id).first()

    def get_by_id(self, link_id: uuid.UUID) -> Optional[VideoLink]:
        return self.db.query(VideoLink).filter(VideoLink.id == link_id).first()

    def short_id_exists(self, short_id: str) -> bool:
        return (
            self.db.query(VideoLink.id).filter(VideoLink.short_id == short_id).first()
            is not None
        )

    def list_for_owner(self, user_id: uuid.UUID) -> List[VideoLink]:
        return (
            self.db.query(VideoLink)
            .filter(VideoLink.user_id == user_id)
            .order_by(VideoLink.created_at.desc())
            .all()
        )

    def insert(self, link: VideoLink) -> VideoLink:
        self.db.add(link)
        self.db.flush()
        return link

    def update(self, link: VideoLink, patch: dict) -> VideoLink:
        for field, value in patch.items():
            setattr(link, field, value)
        link.updated_at = utcnow()
        self.db.flush()
        return link

    def delete(self, link: VideoLink) -> None:
        self.db.delete(link)
        self.db.flush()

    # Permissions

    def permission_emails(self, link_id: uuid.UUID) -> Set[str]:
        rows = (
            self.db.query(LinkPermission.user_email)
            .filter(LinkPermission.link_id == link_id)
            .all()
        )
        return {row.user_email for row in rows}

    def add_permissions(self, link_id: uuid.UUID, emails: Iterable[str]) -> int:
        count = 0
        for email in emails:
            self.db.add(LinkPermission(link_id=link_id, user_email=email, permission_type="view"))
            count += 1
        if count:
            self.db.flush()
        return count

    def remove_permissions(self, link_id: uuid.UUID, emails: Iterable[str]) -> int:
        emails = list(emails)
        if not emails:
            return 0
        deleted = (
            self.db.query(LinkPermission)
            .filter(LinkPermission.link_id == link_id, LinkPermission.user_email.in_(emails))
            .delete(synchronize_session="fetch")
        )
        return deleted

    # Clicks

    def record_click(self, link_id: uuid.UUID, visitor: Optional[VisitorInfo] = None) -> int:
        """
        Append a click event and increment the link's counter in one transaction.

        The counter is bumped with a single UPDATE ... SET clicks = clicks + 1
        so concurrent grants never lose increments.

        Returns:
            The counter value after this click
        """
        visitor = visitor or VisitorInfo()
        try:
            self.db.query(VideoLink).filter(VideoLink.id == link_id).update(
                {VideoLink.clicks: VideoLink.clicks + 1}, synchronize_session=False
            )
            self.db.add(
                ClickEvent(
                    link_id=link_id,
                    clicked_at=utcnow(),
                    user_agent=visitor.user_agent[:255] if visitor.user_agent else None,
                    country=visitor.country,
                    device=visitor.device,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        clicks = self.db.query(VideoLink.clicks).filter(VideoLink.id == link_id).scalar()
        return clicks or 0
