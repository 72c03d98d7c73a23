"""
Link management endpoints for authenticated owners.
"""
import logging
import os
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from vidlinkgen.core.auth import get_identity
from vidlinkgen.core.pricing import format_size_limit
from vidlinkgen.core.quota import get_upload_limit_for
from vidlinkgen.db.base import get_db
from vidlinkgen.schemas import (
    LinkCreateRequest,
    LinkDetail,
    LinkList,
    LinkPermissionsRequest,
    LinkPermissionsResponse,
    LinkUpdateRequest,
    UploadResponse,
)
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.link_authoring import LinkAuthoringService, LinkSettings
from vidlinkgen.services.storage import StorageService, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()


def get_authoring_service(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> LinkAuthoringService:
    return LinkAuthoringService(db, storage)


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


@router.get("", response_model=LinkList)
async def list_links(
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """List the caller's links, newest first."""
    links = service.list_links(identity)
    return LinkList(total=len(links), links=[LinkDetail.model_validate(link) for link in links])


@router.post("", response_model=LinkDetail, status_code=status.HTTP_201_CREATED)
async def create_link(
    payload: LinkCreateRequest,
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """
    Create a shareable link.

    The source is either an external URL or the storage_key of a file uploaded
    through POST /upload. Password, encryption and an email allowlist require
    a premium plan.
    """
    link = service.create_link(
        identity,
        LinkSettings(
            custom_name=payload.custom_name,
            description=payload.description,
            password=payload.password,
            expiry_date=payload.expiry_date,
            is_encrypted=payload.is_encrypted,
            allowed_emails=payload.allowed_emails,
        ),
        source_url=payload.source_url,
        storage_key=payload.storage_key,
    )
    return LinkDetail.model_validate(link)


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    file: UploadFile = File(...),
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """
    Upload a video file. The size is checked against the caller's plan before
    anything is written to storage.
    """
    size = _upload_size(file)
    result = service.upload_video(identity, file.filename or "video", file.file, size)
    limit = get_upload_limit_for(identity)
    return UploadResponse(
        storage_key=result.storage_key,
        public_url=result.public_url,
        size_bytes=result.size_bytes,
        upload_limit=format_size_limit(limit) if limit is not None else None,
    )


@router.get("/{link_id}", response_model=LinkDetail)
async def get_link(
    link_id: UUID,
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    return LinkDetail.model_validate(service.get_link(identity, link_id))


@router.patch("/{link_id}", response_model=LinkDetail)
async def update_link(
    link_id: UUID,
    payload: LinkUpdateRequest,
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """
    Edit a link. Only submitted fields change; the short URL is never regenerated.
    """
    changes = payload.model_dump(exclude_unset=True)
    source_url = changes.pop("source_url", None)
    storage_key = changes.pop("storage_key", None)
    allowed_emails = changes.pop("allowed_emails", None)

    link = service.update_link(
        identity,
        link_id,
        changes,
        allowed_emails=allowed_emails,
        source_url=source_url,
        storage_key=storage_key,
    )
    return LinkDetail.model_validate(link)


@router.put("/{link_id}/permissions", response_model=LinkPermissionsResponse)
async def set_link_permissions(
    link_id: UUID,
    payload: LinkPermissionsRequest,
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """Replace the link's email allowlist, writing only the differences."""
    added, removed = service.reconcile_permissions(identity, link_id, payload.allowed_emails)
    link = service.get_link(identity, link_id)
    return LinkPermissionsResponse(
        link_id=link.id,
        allowed_emails=link.allowed_emails,
        added=added,
        removed=removed,
    )


@router.delete("/{link_id}")
async def delete_link(
    link_id: UUID,
    identity: IdentityContext = Depends(get_identity),
    service: LinkAuthoringService = Depends(get_authoring_service),
):
    """Delete a link with its permissions, click history and uploaded file."""
    service.delete_link(identity, link_id)
    return {"message": "Link deleted", "id": str(link_id)}
