"""
Link-related Pydantic schemas for API request/response validation.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LinkCreateRequest(BaseModel):
    """Request to create a link from an external URL or a previously uploaded file."""

    source_url: Optional[str] = Field(None, description="External video URL (YouTube, Vimeo, direct file)")
    storage_key: Optional[str] = Field(None, description="Object key returned by POST /links/upload")
    custom_name: Optional[str] = None
    description: Optional[str] = None
    password: Optional[str] = None
    expiry_date: Optional[datetime] = None
    is_encrypted: bool = False
    allowed_emails: List[str] = Field(default_factory=list)


class LinkUpdateRequest(BaseModel):
    """
    Partial link update. Omitted fields are left unchanged; a blank source_url
    keeps the current source.
    """

    source_url: Optional[str] = None
    storage_key: Optional[str] = None
    custom_name: Optional[str] = None
    description: Optional[str] = None
    password: Optional[str] = None
    expiry_date: Optional[datetime] = None
    is_encrypted: Optional[bool] = None
    allowed_emails: Optional[List[str]] = None


class LinkPermissionsRequest(BaseModel):
    allowed_emails: List[str] = Field(default_factory=list)


class LinkPermissionsResponse(BaseModel):
    link_id: UUID
    allowed_emails: List[str]
    added: List[str]
    removed: List[str]


class LinkDetail(BaseModel):
    """A link as seen by its owner."""

    id: UUID
    short_id: str
    url: str
    source: Optional[str] = None
    storage_key: Optional[str] = None
    custom_name: str
    description: Optional[str] = None
    password: Optional[str] = None
    is_password_protected: bool = False
    expiry_date: Optional[datetime] = None
    is_encrypted: bool = False
    clicks: int = 0
    allowed_emails: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LinkList(BaseModel):
    total: int
    links: List[LinkDetail]


class UploadResponse(BaseModel):
    """Result of a stored upload; pass storage_key to link creation."""

    storage_key: str
    public_url: str
    size_bytes: int
    upload_limit: Optional[str] = None
