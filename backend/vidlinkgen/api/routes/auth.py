"""
Authentication endpoints.

Sign-up, sign-in and sign-out are forwarded to the identity provider; the
profile endpoints read the local user row resolved from the bearer token.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from vidlinkgen.core.auth import bearer_scheme, get_current_user
from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import ValidationFailed
from vidlinkgen.core.pricing import format_size_limit
from vidlinkgen.core.quota import get_upload_limit_for
from vidlinkgen.db.base import get_db
from vidlinkgen.models import User
from vidlinkgen.schemas import (
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    UserProfile,
)
from vidlinkgen.services.identity import AuthProviderClient, IdentityContext, get_auth_client

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


def build_profile(user: User) -> UserProfile:
    identity = IdentityContext.from_user(user)
    limit = get_upload_limit_for(identity)
    return UserProfile(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        is_admin=identity.is_admin,
        is_premium=identity.is_premium,
        premium_tier=identity.premium_tier,
        premium_expires_at=identity.premium_expires_at,
        has_joined_channels=user.has_joined_channels,
        upload_limit_bytes=limit,
        upload_limit=format_size_limit(limit) if limit is not None else None,
        created_at=user.created_at,
    )


@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: SignUpRequest,
    db: Session = Depends(get_db),
    auth_client: AuthProviderClient = Depends(get_auth_client),
):
    """
    Register a new account and create its profile row.
    """
    name = payload.name.strip()
    email = payload.email.strip().lower()
    if not name or not email or not payload.password:
        raise ValidationFailed("Name, email and password are required.")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if db.query(User).filter(User.email == email).first():
        raise ValidationFailed("An account with this email already exists.")

    result = auth_client.sign_up(email, payload.password, name)

    user = db.query(User).filter(User.id == result["user_id"]).first()
    if not user:
        user = User(id=result["user_id"], email=email, full_name=name, role="member")
        db.add(user)
    if email in settings.admin_emails:
        user.role = "admin"
    db.commit()
    logger.info(f"Registered user {result['user_id']}")

    session = result["session"]
    return SignUpResponse(
        user_id=result["user_id"],
        email=email,
        display_name=name,
        session=SessionResponse.model_validate(session) if session else None,
        message=(
            "Account created."
            if session
            else "Account created. Please check your email to confirm your address."
        ),
    )


@router.post("/signin", response_model=SessionResponse)
async def sign_in(
    payload: SignInRequest,
    auth_client: AuthProviderClient = Depends(get_auth_client),
):
    """Exchange email and password for an access token."""
    if not payload.email.strip() or not payload.password:
        raise ValidationFailed("Email and password are required.")
    session = auth_client.sign_in(payload.email.strip().lower(), payload.password)
    return SessionResponse.model_validate(session)


@router.post("/signout")
async def sign_out(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    auth_client: AuthProviderClient = Depends(get_auth_client),
):
    """Revoke the caller's session at the identity provider."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    auth_client.sign_out(credentials.credentials)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserProfile)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the caller's profile, premium state and upload ceiling."""
    return build_profile(current_user)


@router.post("/channels-joined", response_model=UserProfile)
async def mark_channels_joined(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record that the user joined the community channels (one-time prompt)."""
    if not current_user.has_joined_channels:
        current_user.has_joined_channels = True
        db.commit()
        db.refresh(current_user)
    return build_profile(current_user)
