"""
Helpers for emitting admin audit events.
"""
import hashlib
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from vidlinkgen.models import AdminAuditLog


def _hash_ip(ip: Optional[str]) -> Optional[str]:
    if not ip:
        return None
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()


def log_admin_action(
    db: Session,
    *,
    event_type: str,
    admin_id: Optional[UUID],
    target_user_id: Optional[UUID] = None,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AdminAuditLog:
    """
    Add an admin action to the audit log.

    The entry joins the caller's transaction; nothing is committed here.
    """
    ip_hash = _hash_ip(request.client.host if request and request.client else None)
    user_agent = request.headers.get("user-agent") if request else None

    log_entry = AdminAuditLog(
        event_type=event_type,
        admin_id=admin_id,
        target_user_id=target_user_id,
        target_id=target_id,
        details=details or None,
        ip_hash=ip_hash,
        user_agent=user_agent[:255] if user_agent else None,
    )
    db.add(log_entry)
    return log_entry
