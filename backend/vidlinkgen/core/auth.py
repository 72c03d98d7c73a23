"""
JWT verification for sessions issued by the identity provider.

The provider signs access tokens with HS256 using the project JWT secret.
Token structure:
{
  "sub": "<user uuid>",
  "email": "user@example.com",
  "aud": "authenticated",
  "user_metadata": {"name": "User Name"},
  "exp": 1234567890
}
"""
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vidlinkgen.core.config import settings
from vidlinkgen.core.timeutils import utcnow
from vidlinkgen.db.base import get_db
from vidlinkgen.models import User
from vidlinkgen.services.identity import IdentityContext

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode an access token issued by the identity provider.
    """
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=["HS256"],
            audience=settings.auth_jwt_audience,
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired authorization token",
        ) from exc


def _resolve_user(token: str, db: Session) -> User:
    claims = verify_access_token(token)

    subject = claims.get("sub")
    email = claims.get("email")
    if not subject or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing required claims",
        )

    try:
        user_id = uuid.UUID(subject)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed subject",
        ) from exc

    user = db.query(User).filter(User.id == user_id).first()
    name = (claims.get("user_metadata") or {}).get("name")

    # Lazy-create the profile on first sight
    if not user:
        user = User(id=user_id, email=email, full_name=name, role="member", is_active=True)
        db.add(user)

    if email.lower() in settings.admin_emails and user.role != "admin":
        user.role = "admin"

    user.last_login_at = utcnow()
    try:
        db.commit()
    except IntegrityError as exc:
        # Email is unique; another account already owns it under a different subject
        db.rollback()
        logger.warning(f"Token subject {user_id} reuses an email registered to another account")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        ) from exc
    db.refresh(user)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is suspended",
        )

    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the current authenticated user from a bearer token.

    - Expects Authorization: Bearer <jwt> header
    - Verifies and decodes the token
    - Lazily creates a User row on first login
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    if credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication scheme",
        )

    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Like get_current_user, but anonymous visitors resolve to None.

    An invalid or expired token is treated as anonymous so public links stay
    viewable; a suspended account is still refused.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return _resolve_user(credentials.credentials, db)
    except HTTPException as exc:
        if exc.status_code != status.HTTP_401_UNAUTHORIZED:
            raise
        logger.info(f"Ignoring unusable bearer token on optional auth: {exc.detail}")
        return None


def get_identity(current_user: User = Depends(get_current_user)) -> IdentityContext:
    """Identity context of the authenticated caller."""
    return IdentityContext.from_user(current_user)


def get_optional_identity(
    current_user: Optional[User] = Depends(get_optional_user),
) -> Optional[IdentityContext]:
    """Identity context of the caller, or None for anonymous visitors."""
    if current_user is None:
        return None
    return IdentityContext.from_user(current_user)
