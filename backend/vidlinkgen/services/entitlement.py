"""
Premium entitlement service.

Admin-only transitions on a user's premium state (assign, extend, revoke) and
account status (suspend, unsuspend). Payment is collected out of band; an
admin marks the user premium once it has been received.
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple, Union

from fastapi import Request
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from vidlinkgen.core.exceptions import (
    NoMatchingPlan,
    NotAuthorized,
    PremiumStateError,
    UserNotFound,
    ValidationFailed,
)
from vidlinkgen.core.pricing import Plan, PlanKey, find_plan_for_tier, get_plan
from vidlinkgen.core.timeutils import add_months, utcnow
from vidlinkgen.models import User, VideoLink
from vidlinkgen.services.audit_logger import log_admin_action
from vidlinkgen.services.identity import IdentityContext

logger = logging.getLogger(__name__)


def compute_assignment(plan_key: Union[str, PlanKey], now: Optional[datetime] = None) -> Tuple[Plan, datetime]:
    """
    Plan and new expiry for an assignment: now + plan duration.

    Raises:
        ValueError: Unknown plan key
    """
    plan = get_plan(plan_key)
    return plan, add_months(now or utcnow(), plan.duration_months)


def compute_extension(tier_name: Optional[str], expires_at: Optional[datetime]) -> Tuple[Plan, datetime]:
    """
    New expiry for an extension, counted from the stored expiry rather than now.

    Raises:
        PremiumStateError: No tier or no expiry to extend from
        NoMatchingPlan: No plan maps to the stored tier
    """
    if not tier_name or expires_at is None:
        raise PremiumStateError()
    plan = find_plan_for_tier(tier_name)
    if plan is None:
        raise NoMatchingPlan(f"No plan found for tier '{tier_name}'.")
    return plan, add_months(expires_at, plan.duration_months)


class EntitlementService:
    """Back-office operations on user accounts."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _require_admin(actor: IdentityContext) -> None:
        if actor is None or not actor.is_admin:
            raise NotAuthorized("Admin access required.")

    def _get_user(self, user_id: uuid.UUID) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFound()
        return user

    def _commit(self, user: User) -> User:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def link_count(self, user_id: uuid.UUID) -> int:
        return (
            self.db.query(func.count(VideoLink.id))
            .filter(VideoLink.user_id == user_id)
            .scalar()
            or 0
        )

    def list_users(
        self,
        actor: IdentityContext,
        search: Optional[str] = None,
        premium: Optional[bool] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Tuple[int, List[Tuple[User, int]]]:
        """
        Users with their link counts, newest first.

        Returns:
            (total matching users, [(user, link_count), ...] for the page)
        """
        self._require_admin(actor)

        query = self.db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.email.ilike(pattern), User.full_name.ilike(pattern)))
        if premium is not None:
            query = query.filter(User.is_premium == premium)

        total = query.count()
        users = query.order_by(User.created_at.desc()).offset(offset).limit(limit).all()
        if not users:
            return total, []

        counts = dict(
            self.db.query(VideoLink.user_id, func.count(VideoLink.id))
            .filter(VideoLink.user_id.in_([u.id for u in users]))
            .group_by(VideoLink.user_id)
            .all()
        )
        return total, [(user, counts.get(user.id, 0)) for user in users]

    def assign_premium(
        self,
        actor: IdentityContext,
        user_id: uuid.UUID,
        plan_key: Union[str, PlanKey],
        now: Optional[datetime] = None,
        request: Optional[Request] = None,
    ) -> User:
        """Set the user's plan, overwriting any existing tier and expiry."""
        self._require_admin(actor)
        user = self._get_user(user_id)
        plan, expires_at = compute_assignment(plan_key, now)

        user.is_premium = True
        user.premium_tier = plan.tier.value
        user.premium_expires_at = expires_at
        log_admin_action(
            self.db,
            event_type="premium_assigned",
            admin_id=actor.user_id,
            target_user_id=user.id,
            details={"plan": plan.key.value, "expires_at": expires_at.isoformat()},
            request=request,
        )
        self._commit(user)

        logger.info(f"Admin {actor.user_id} assigned {plan.key.value} to user {user.id} until {expires_at}")
        return user

    def extend_premium(
        self,
        actor: IdentityContext,
        user_id: uuid.UUID,
        request: Optional[Request] = None,
    ) -> User:
        """Push the user's expiry forward by one period of their tier's plan."""
        self._require_admin(actor)
        user = self._get_user(user_id)
        plan, expires_at = compute_extension(user.premium_tier, user.premium_expires_at)
        previous = user.premium_expires_at

        user.is_premium = True
        user.premium_expires_at = expires_at
        log_admin_action(
            self.db,
            event_type="premium_extended",
            admin_id=actor.user_id,
            target_user_id=user.id,
            details={
                "plan": plan.key.value,
                "previous_expires_at": previous.isoformat(),
                "expires_at": expires_at.isoformat(),
            },
            request=request,
        )
        self._commit(user)

        logger.info(f"Admin {actor.user_id} extended premium for user {user.id} to {expires_at}")
        return user

    def revoke_premium(
        self,
        actor: IdentityContext,
        user_id: uuid.UUID,
        request: Optional[Request] = None,
    ) -> User:
        self._require_admin(actor)
        user = self._get_user(user_id)

        user.is_premium = False
        user.premium_tier = None
        user.premium_expires_at = None
        log_admin_action(
            self.db,
            event_type="premium_revoked",
            admin_id=actor.user_id,
            target_user_id=user.id,
            request=request,
        )
        self._commit(user)

        logger.info(f"Admin {actor.user_id} revoked premium for user {user.id}")
        return user

    def set_active(
        self,
        actor: IdentityContext,
        user_id: uuid.UUID,
        active: bool,
        request: Optional[Request] = None,
    ) -> User:
        """Suspend (active=False) or reinstate a user account."""
        self._require_admin(actor)
        if user_id == actor.user_id and not active:
            raise ValidationFailed("You cannot suspend your own account.")
        user = self._get_user(user_id)

        user.is_active = active
        log_admin_action(
            self.db,
            event_type="user_unsuspended" if active else "user_suspended",
            admin_id=actor.user_id,
            target_user_id=user.id,
            request=request,
        )
        self._commit(user)

        logger.info(f"Admin {actor.user_id} set user {user.id} active={active}")
        return user
