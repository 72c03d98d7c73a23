"""
Admin authentication and authorization middleware.

Provides:
- get_admin_user: FastAPI dependency that ensures the user has the admin role.
- get_admin_identity: the same check, returning an IdentityContext.
"""
from fastapi import Depends, HTTPException, status

from vidlinkgen.core.auth import get_current_user
from vidlinkgen.models import User
from vidlinkgen.services.identity import IdentityContext


def get_admin_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Admin-only dependency that verifies the current user has role "admin".

    Raises:
        HTTPException: 403 Forbidden if user is not an admin
    """
    if current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required. Only administrators can access this resource.",
        )

    return current_user


def get_admin_identity(admin_user: User = Depends(get_admin_user)) -> IdentityContext:
    """Identity context of an authenticated admin."""
    return IdentityContext.from_user(admin_user)
