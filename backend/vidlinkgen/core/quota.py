"""
Upload quota enforcement.

Checks an object's size against the acting user's tier ceiling before any
bytes are sent to storage.
"""
import logging
from typing import Optional

from vidlinkgen.core.exceptions import UploadLimitExceeded
from vidlinkgen.core.pricing import FREE_UPLOAD_LIMIT, format_size_limit, get_upload_limit
from vidlinkgen.services.identity import IdentityContext

logger = logging.getLogger(__name__)


def get_upload_limit_for(identity: IdentityContext) -> Optional[int]:
    """
    Upload ceiling in bytes for a user.

    Returns:
        Byte limit, or None for admins (no ceiling)
    """
    if identity.is_admin:
        return None
    if identity.is_premium:
        return get_upload_limit(identity.premium_tier)
    return FREE_UPLOAD_LIMIT


def check_upload_size(identity: IdentityContext, size_bytes: int) -> None:
    """
    Check that an upload fits the user's tier.

    Args:
        identity: Acting user
        size_bytes: Size of the object to store

    Raises:
        UploadLimitExceeded: If the object is larger than the tier allows
    """
    limit = get_upload_limit_for(identity)
    if limit is None:
        logger.info(f"Admin user {identity.user_id} bypassing upload size check")
        return

    if size_bytes <= limit:
        return

    limit_text = format_size_limit(limit)
    logger.warning(
        f"Upload rejected for user {identity.user_id}: {size_bytes} bytes exceeds {limit_text}"
    )
    if identity.is_premium:
        message = f"File too large. Your current plan limit is {limit_text}."
    else:
        message = (
            f"File exceeds the free upload limit of {limit_text}. "
            "Upgrade to premium to upload larger files."
        )
    raise UploadLimitExceeded(limit_bytes=limit, limit_text=limit_text, message=message)
