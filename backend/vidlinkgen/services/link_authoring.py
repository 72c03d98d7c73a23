"""
Link authoring service.

Turns user-entered link settings into premium-gated VideoLink writes and keeps
each link's email allowlist in sync by set reconciliation.
"""
import logging
import re
import secrets
import string
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, BinaryIO, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import (
    LinkNotFound,
    NotAuthenticated,
    NotLinkOwner,
    PremiumRequired,
    StorageError,
    ValidationFailed,
)
from vidlinkgen.core.quota import check_upload_size
from vidlinkgen.core.timeutils import as_naive_utc, utcnow
from vidlinkgen.models import VideoLink
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.link_store import LinkStore
from vidlinkgen.services.storage import ProgressCallback, StorageService, build_object_key

logger = logging.getLogger(__name__)

SHORT_ID_ALPHABET = string.ascii_letters + string.digits
SHORT_ID_LENGTH = 7
MAX_SHORT_ID_ATTEMPTS = 10
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500

FEATURE_PASSWORD = "Password Protection"
FEATURE_ENCRYPTION = "File Encryption"
FEATURE_ACCESS_CONTROL = "Advanced Access Control"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def generate_short_id(length: int = SHORT_ID_LENGTH) -> str:
    return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(length))


def default_link_name(now: Optional[datetime] = None) -> str:
    return f"Video from {(now or utcnow()).strftime('%Y-%m-%d')}"


def normalize_emails(emails: Optional[Iterable[str]]) -> List[str]:
    """
    Trim, lower-case and de-duplicate allowlist emails.

    Raises:
        ValidationFailed: If an entry is not an email address
    """
    normalized = set()
    for raw in emails or []:
        email = (raw or "").strip().lower()
        if not email:
            continue
        if not _EMAIL_PATTERN.match(email):
            raise ValidationFailed(f"Invalid email address: {raw}")
        normalized.add(email)
    return sorted(normalized)


@dataclass
class LinkSettings:
    """User-entered settings for a new link."""

    custom_name: Optional[str] = None
    description: Optional[str] = None
    password: Optional[str] = None
    expiry_date: Optional[datetime] = None
    is_encrypted: bool = False
    allowed_emails: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UploadResult:
    storage_key: str
    public_url: str
    size_bytes: int


class LinkAuthoringService:
    """Create, edit and delete links on behalf of their owner."""

    def __init__(self, db: Session, storage: Optional[StorageService] = None):
        self.db = db
        self.store = LinkStore(db)
        self.storage = storage

    # Validation helpers

    @staticmethod
    def _require_owner(owner: Optional[IdentityContext]) -> IdentityContext:
        if owner is None:
            raise NotAuthenticated()
        return owner

    @staticmethod
    def _check_premium(
        owner: IdentityContext,
        password: Optional[str] = None,
        is_encrypted: Optional[bool] = None,
        allowed_emails: Optional[List[str]] = None,
    ) -> None:
        if owner.has_premium_access:
            return
        if password:
            raise PremiumRequired(FEATURE_PASSWORD)
        if is_encrypted:
            raise PremiumRequired(FEATURE_ENCRYPTION)
        if allowed_emails:
            raise PremiumRequired(FEATURE_ACCESS_CONTROL)

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            return default_link_name()
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationFailed(f"Name must be at most {MAX_NAME_LENGTH} characters.")
        return name

    @staticmethod
    def _clean_description(description: Optional[str]) -> Optional[str]:
        description = (description or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationFailed(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters."
            )
        return description or None

    def _resolve_source(
        self, owner: IdentityContext, source_url: Optional[str], storage_key: Optional[str]
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Returns (source, storage_key) for a submitted source, or (None, None) if none was given.
        """
        if storage_key:
            if not storage_key.startswith(f"{owner.user_id}/"):
                raise ValidationFailed("Uploaded file does not belong to you.")
            if self.storage is None:
                raise StorageError("Storage is not configured.")
            return self.storage.get_public_url(storage_key), storage_key

        url = (source_url or "").strip()
        if url:
            return url, None
        return None, None

    def _unique_short_id(self) -> str:
        for _ in range(MAX_SHORT_ID_ATTEMPTS):
            short_id = generate_short_id()
            if not self.store.short_id_exists(short_id):
                return short_id
        raise RuntimeError("Could not generate a unique short id")

    def _owned_link(self, owner: IdentityContext, link_id: uuid.UUID) -> VideoLink:
        link = self.store.get_by_id(link_id)
        if link is None:
            raise LinkNotFound()
        if link.user_id != owner.user_id:
            raise NotLinkOwner()
        return link

    # Queries

    def list_links(self, owner: IdentityContext) -> List[VideoLink]:
        owner = self._require_owner(owner)
        return self.store.list_for_owner(owner.user_id)

    def get_link(self, owner: IdentityContext, link_id: uuid.UUID) -> VideoLink:
        owner = self._require_owner(owner)
        return self._owned_link(owner, link_id)

    # Writes

    def create_link(
        self,
        owner: IdentityContext,
        link_settings: LinkSettings,
        source_url: Optional[str] = None,
        storage_key: Optional[str] = None,
    ) -> VideoLink:
        """
        Create a link and its allowlist in one transaction.

        Raises:
            NotAuthenticated: No owner
            ValidationFailed: Missing source or invalid fields
            PremiumRequired: A premium-only setting was used by a free user
        """
        owner = self._require_owner(owner)
        emails = normalize_emails(link_settings.allowed_emails)
        self._check_premium(owner, link_settings.password, link_settings.is_encrypted, emails)

        name = self._clean_name(link_settings.custom_name)
        description = self._clean_description(link_settings.description)

        source, storage_key = self._resolve_source(owner, source_url, storage_key)
        if not source:
            raise ValidationFailed("Please enter a video URL or upload a file to generate a link.")

        short_id = self._unique_short_id()
        link = VideoLink(
            user_id=owner.user_id,
            short_id=short_id,
            url=f"{settings.public_base_url.rstrip('/')}/v/{short_id}",
            source=source,
            storage_key=storage_key,
            custom_name=name,
            description=description,
            password=link_settings.password or None,
            expiry_date=as_naive_utc(link_settings.expiry_date),
            is_encrypted=bool(link_settings.is_encrypted),
            clicks=0,
        )

        try:
            self.store.insert(link)
            self.store.add_permissions(link.id, emails)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(link)
        logger.info(f"User {owner.user_id} created link {short_id} with {len(emails)} allowed emails")
        return link

    def update_link(
        self,
        owner: IdentityContext,
        link_id: uuid.UUID,
        changes: Dict[str, Any],
        allowed_emails: Optional[List[str]] = None,
        source_url: Optional[str] = None,
        storage_key: Optional[str] = None,
    ) -> VideoLink:
        """
        Apply an edit to a link the caller owns.

        Only keys present in ``changes`` are touched (custom_name, description,
        password, expiry_date, is_encrypted). A blank source URL keeps the
        current source. The short id and public URL never change. When
        ``allowed_emails`` is given the allowlist is reconciled in the same
        transaction.
        """
        owner = self._require_owner(owner)
        link = self._owned_link(owner, link_id)

        emails = normalize_emails(allowed_emails) if allowed_emails is not None else None
        self._check_premium(
            owner,
            changes.get("password"),
            changes.get("is_encrypted"),
            emails,
        )

        patch: Dict[str, Any] = {}
        if "custom_name" in changes:
            patch["custom_name"] = self._clean_name(changes["custom_name"])
        if "description" in changes:
            patch["description"] = self._clean_description(changes["description"])
        if "password" in changes:
            patch["password"] = changes["password"] or None
        if "expiry_date" in changes:
            patch["expiry_date"] = as_naive_utc(changes["expiry_date"])
        if "is_encrypted" in changes:
            patch["is_encrypted"] = bool(changes["is_encrypted"])

        source, new_key = self._resolve_source(owner, source_url, storage_key)
        old_key = link.storage_key
        if source and source != link.source:
            patch["source"] = source
            patch["storage_key"] = new_key

        try:
            self.store.update(link, patch)
            if emails is not None:
                self._reconcile(link.id, emails)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if old_key and patch.get("source") and patch.get("storage_key") != old_key:
            self._delete_object(old_key)

        self.db.refresh(link)
        logger.info(f"User {owner.user_id} updated link {link.short_id}: {sorted(patch)}")
        return link

    def _reconcile(self, link_id: uuid.UUID, emails: List[str]) -> Tuple[List[str], List[str]]:
        current = self.store.permission_emails(link_id)
        target = set(emails)
        to_add = sorted(target - current)
        to_remove = sorted(current - target)
        # Inserts go first so the link is never briefly public mid-edit
        self.store.add_permissions(link_id, to_add)
        self.store.remove_permissions(link_id, to_remove)
        return to_add, to_remove

    def reconcile_permissions(
        self, owner: IdentityContext, link_id: uuid.UUID, emails: Iterable[str]
    ) -> Tuple[List[str], List[str]]:
        """
        Make the link's allowlist equal to ``emails``.

        Inserts only missing emails and deletes only extras, so repeating the
        call with the same set writes nothing.

        Returns:
            (added, removed) email lists
        """
        owner = self._require_owner(owner)
        link = self._owned_link(owner, link_id)
        target = normalize_emails(emails)
        self._check_premium(owner, allowed_emails=target)

        try:
            added, removed = self._reconcile(link.id, target)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if added or removed:
            logger.info(
                f"Link {link.short_id} allowlist: +{len(added)} -{len(removed)}"
            )
        return added, removed

    def delete_link(self, owner: IdentityContext, link_id: uuid.UUID) -> None:
        """Delete a link with its permissions, click events and uploaded file."""
        owner = self._require_owner(owner)
        link = self._owned_link(owner, link_id)
        storage_key = link.storage_key
        short_id = link.short_id

        try:
            self.store.delete(link)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if storage_key:
            self._delete_object(storage_key)
        logger.info(f"User {owner.user_id} deleted link {short_id}")

    def _delete_object(self, storage_key: str) -> None:
        if self.storage is None:
            return
        try:
            self.storage.delete_object(storage_key)
        except (StorageError, OSError) as exc:
            logger.warning(f"Could not delete stored object {storage_key}: {exc}")

    # Uploads

    def upload_video(
        self,
        owner: IdentityContext,
        filename: str,
        file_stream: BinaryIO,
        size_bytes: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        """
        Store an uploaded video after checking the owner's upload ceiling.

        Raises:
            UploadLimitExceeded: Before any bytes reach storage
        """
        owner = self._require_owner(owner)
        check_upload_size(owner, size_bytes)
        if self.storage is None:
            raise StorageError("Storage is not configured.")

        key = build_object_key(owner.user_id, filename)
        self.storage.put_object(key, file_stream, on_progress=on_progress)
        logger.info(f"User {owner.user_id} uploaded {size_bytes} bytes to {key}")
        return UploadResult(
            storage_key=key,
            public_url=self.storage.get_public_url(key),
            size_bytes=size_bytes,
        )
