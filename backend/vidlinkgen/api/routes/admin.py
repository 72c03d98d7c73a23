"""
Admin API endpoints for premium management, account status and support.

All routes require an admin account.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from vidlinkgen.core.admin_auth import get_admin_identity
from vidlinkgen.db.base import get_db
from vidlinkgen.models import User
from vidlinkgen.schemas import (
    AdminUserSummary,
    AssignPremiumRequest,
    PlatformStats,
    TicketList,
    TicketResponse,
    TicketStatusUpdate,
    UserListResponse,
)
from vidlinkgen.services.analytics import AnalyticsService
from vidlinkgen.services.entitlement import EntitlementService
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.support import SupportService

router = APIRouter()


def _summary(user: User, link_count: int) -> AdminUserSummary:
    return AdminUserSummary.model_validate(user).model_copy(update={"link_count": link_count})


def _refreshed(service: EntitlementService, user: User) -> AdminUserSummary:
    """Updated row plus its link count, so the admin table stays consistent."""
    return _summary(user, service.link_count(user.id))


@router.get("/stats", response_model=PlatformStats)
async def get_stats(
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    return PlatformStats(**AnalyticsService(db).platform_stats(admin))


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by email or name"),
    premium: Optional[bool] = Query(None, description="Filter by stored premium flag"),
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    """
    List users with their link counts.

    Supports pagination, search, and filtering.
    """
    total, rows = EntitlementService(db).list_users(
        admin,
        search=search,
        premium=premium,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    return UserListResponse(
        total=total,
        page=page,
        page_size=page_size,
        users=[_summary(user, count) for user, count in rows],
    )


@router.post("/users/{user_id}/premium", response_model=AdminUserSummary)
async def assign_premium(
    user_id: UUID,
    payload: AssignPremiumRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    """Assign a plan; the expiry is now plus the plan duration."""
    service = EntitlementService(db)
    user = service.assign_premium(admin, user_id, payload.plan_key, request=request)
    return _refreshed(service, user)


@router.post("/users/{user_id}/premium/extend", response_model=AdminUserSummary)
async def extend_premium(
    user_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    """Extend the current plan from its stored expiry."""
    service = EntitlementService(db)
    user = service.extend_premium(admin, user_id, request=request)
    return _refreshed(service, user)


@router.delete("/users/{user_id}/premium", response_model=AdminUserSummary)
async def revoke_premium(
    user_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    service = EntitlementService(db)
    user = service.revoke_premium(admin, user_id, request=request)
    return _refreshed(service, user)


@router.post("/users/{user_id}/suspend", response_model=AdminUserSummary)
async def suspend_user(
    user_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    service = EntitlementService(db)
    user = service.set_active(admin, user_id, active=False, request=request)
    return _refreshed(service, user)


@router.post("/users/{user_id}/unsuspend", response_model=AdminUserSummary)
async def unsuspend_user(
    user_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    service = EntitlementService(db)
    user = service.set_active(admin, user_id, active=True, request=request)
    return _refreshed(service, user)


@router.get("/tickets", response_model=TicketList)
async def list_tickets(
    status: Optional[str] = Query(None, description="Filter by ticket status"),
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    tickets = SupportService(db).list_all(admin, status=status)
    return TicketList(total=len(tickets), tickets=[TicketResponse.model_validate(t) for t in tickets])


@router.patch("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: UUID,
    payload: TicketStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    admin: IdentityContext = Depends(get_admin_identity),
):
    ticket = SupportService(db).update_status(admin, ticket_id, payload.status, request=request)
    return TicketResponse.model_validate(ticket)
