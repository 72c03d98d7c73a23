"""
Access gate for shared video links.

Decides whether a visitor may watch a link and records exactly one click per
grant. Checks run in a fixed order and each one short-circuits:

1. resolve the short id            -> LinkNotFound
2. expiry in the past              -> LinkExpired
3. password set                    -> PasswordRequired / IncorrectPassword,
                                      a correct password skips step 4
4. allowlist rows exist            -> AccessDenied unless the visitor's email is listed
5. grant: click event + atomic counter increment

A correct password bypasses the email allowlist, and passwords are compared
as plaintext. Both are kept as product behaviour.
"""
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import (
    AccessDenied,
    IncorrectPassword,
    LinkExpired,
    LinkNotFound,
    PasswordRequired,
    SourceMissing,
)
from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.models import VideoLink
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.link_store import LinkStore, VisitorInfo
from vidlinkgen.services.storage import StorageService

logger = logging.getLogger(__name__)

_TABLET_PATTERN = re.compile(r"ipad|tablet|kindle|silk|playbook", re.IGNORECASE)
_MOBILE_PATTERN = re.compile(r"mobi|iphone|ipod|android|blackberry|opera mini|iemobile", re.IGNORECASE)


def classify_device(user_agent: Optional[str]) -> str:
    """Rough device class from a user agent string."""
    if not user_agent:
        return "desktop"
    if _TABLET_PATTERN.search(user_agent):
        return "tablet"
    # Android tablets omit "Mobile" from their user agent
    if "android" in user_agent.lower() and "mobile" not in user_agent.lower():
        return "tablet"
    if _MOBILE_PATTERN.search(user_agent):
        return "mobile"
    return "desktop"


def visitor_from_request(request: Request, country_header: Optional[str] = None) -> VisitorInfo:
    """Build click metadata from the incoming request."""
    user_agent = request.headers.get("user-agent")
    country = (request.headers.get(country_header or settings.country_header) or "").strip().upper()
    if not country or country == "XX":
        country = "Unknown"
    return VisitorInfo(
        user_agent=user_agent,
        country=country[:8],
        device=classify_device(user_agent),
    )


def embed_url(source: str) -> str:
    """
    Convert YouTube and Vimeo page URLs into embeddable player URLs.

    Other URLs are returned unchanged.
    """
    if "youtube.com/watch?v=" in source:
        video_id = source.split("v=", 1)[1].split("&")[0]
        return f"https://www.youtube.com/embed/{video_id}"
    if "youtu.be/" in source:
        video_id = source.split("youtu.be/", 1)[1].split("?")[0]
        return f"https://www.youtube.com/embed/{video_id}"
    if "vimeo.com/" in source and "player.vimeo.com" not in source:
        video_id = source.split("vimeo.com/", 1)[1].split("?")[0]
        return f"https://player.vimeo.com/video/{video_id}"
    return source


@dataclass(frozen=True)
class AccessGrant:
    """Successful gate evaluation."""

    link_id: uuid.UUID
    short_id: str
    custom_name: str
    description: Optional[str]
    playback_url: str
    is_encrypted: bool
    clicks: int


class AccessGate:
    """Evaluates visitor access to links resolved by short id."""

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.store = LinkStore(db)
        self.storage = storage

    def _resolve(self, short_id: str) -> VideoLink:
        link = self.store.get_by_short_id(short_id)
        if link is None:
            raise LinkNotFound()
        if link.is_expired(utcnow()):
            logger.info(f"Access to expired link {short_id} refused")
            raise LinkExpired()
        return link

    def preview(self, short_id: str) -> VideoLink:
        """
        Public metadata lookup: resolves the link and checks expiry only.

        Never records a click.
        """
        return self._resolve(short_id)

    def playback_url(self, link: VideoLink) -> str:
        if link.storage_key and self.storage is not None:
            return self.storage.get_public_url(link.storage_key)
        if not link.source:
            raise SourceMissing()
        return embed_url(link.source)

    def evaluate(
        self,
        short_id: str,
        visitor: Optional[IdentityContext] = None,
        password: Optional[str] = None,
        visitor_info: Optional[VisitorInfo] = None,
    ) -> AccessGrant:
        """
        Run the gate for one visit.

        Args:
            short_id: Public short id from /v/{short_id}
            visitor: Signed-in visitor, or None for anonymous visits
            password: Submitted password, if any
            visitor_info: Click metadata (user agent, country, device)

        Returns:
            AccessGrant with the playback URL and the updated click count

        Raises:
            LinkNotFound, LinkExpired, PasswordRequired, IncorrectPassword,
            AccessDenied, SourceMissing
        """
        link = self._resolve(short_id)

        if link.password:
            if not password:
                raise PasswordRequired()
            if password != link.password:
                logger.info(f"Incorrect password submitted for link {short_id}")
                raise IncorrectPassword()
        else:
            allowed = self.store.permission_emails(link.id)
            if allowed:
                email = visitor.email.strip().lower() if visitor and visitor.email else None
                if email is None or email not in allowed:
                    logger.info(f"Visitor {email or 'anonymous'} denied access to link {short_id}")
                    raise AccessDenied()

        playback_url = self.playback_url(link)

        link_id = link.id
        clicks = self.store.record_click(link_id, visitor_info)
        logger.info(f"Access granted to link {short_id} (clicks={clicks})")

        return AccessGrant(
            link_id=link_id,
            short_id=link.short_id,
            custom_name=link.custom_name,
            description=link.description,
            playback_url=playback_url,
            is_encrypted=bool(link.is_encrypted),
            clicks=clicks,
        )
