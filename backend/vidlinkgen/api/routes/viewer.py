"""
Public viewer endpoints for /v/{short_id}.

Anonymous visitors are allowed; a bearer token, when present, supplies the
email used for allowlisted links.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from vidlinkgen.core.auth import get_optional_identity
from vidlinkgen.core.exceptions import IncorrectPassword
from vidlinkgen.core.rate_limit import ensure_password_attempts_left, record_failed_password
from vidlinkgen.db.base import get_db
from vidlinkgen.schemas import AccessGrantResponse, AccessRequest, LinkPreview
from vidlinkgen.services.access_gate import AccessGate, visitor_from_request
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.storage import StorageService, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def get_access_gate(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> AccessGate:
    return AccessGate(db, storage)


@router.get("/{short_id}", response_model=LinkPreview)
async def preview_link(short_id: str, gate: AccessGate = Depends(get_access_gate)):
    """Public link metadata. Does not count as a view."""
    link = gate.preview(short_id)
    return LinkPreview(
        short_id=link.short_id,
        custom_name=link.custom_name,
        description=link.description,
        requires_password=link.is_password_protected,
        expiry_date=link.expiry_date,
        is_encrypted=link.is_encrypted,
    )


@router.post("/{short_id}/access", response_model=AccessGrantResponse)
async def access_link(
    request: Request,
    short_id: str,
    payload: Optional[AccessRequest] = None,
    identity: Optional[IdentityContext] = Depends(get_optional_identity),
    gate: AccessGate = Depends(get_access_gate),
):
    """
    Evaluate access and, when granted, record one click and return the playback URL.

    Only wrong password submissions count against the caller's attempt budget.
    """
    password = payload.password if payload else None
    if password:
        ensure_password_attempts_left(request, short_id)

    try:
        grant = gate.evaluate(
            short_id,
            visitor=identity,
            password=password,
            visitor_info=visitor_from_request(request),
        )
    except IncorrectPassword:
        record_failed_password(request, short_id)
        logger.info(f"Wrong password for link {short_id}")
        raise
    return AccessGrantResponse.model_validate(grant)
