"""
Identity context and identity-provider client.

Handles:
- IdentityContext: immutable view of the acting user passed into services
- AuthProviderClient: sign-up / sign-in / sign-out against a GoTrue-compatible
  auth service, with session-change listeners
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import AuthProviderError
from vidlinkgen.models import User

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class IdentityContext:
    """The acting user as seen by the link services."""

    user_id: uuid.UUID
    email: str
    display_name: Optional[str] = None
    role: str = "member"
    is_premium: bool = False
    premium_tier: Optional[str] = None
    premium_expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def has_premium_access(self) -> bool:
        """Admins are never subject to premium gating."""
        return self.is_admin or self.is_premium

    @classmethod
    def from_user(cls, user: User, now: Optional[datetime] = None) -> "IdentityContext":
        active = user.has_active_premium(now)
        return cls(
            user_id=user.id,
            email=user.email,
            display_name=user.full_name,
            role=user.role,
            is_premium=active,
            premium_tier=user.premium_tier if active else None,
            premium_expires_at=user.premium_expires_at if active else None,
        )


@dataclass(frozen=True)
class AuthSession:
    """Session issued by the identity provider."""

    access_token: str
    refresh_token: Optional[str]
    expires_in: Optional[int]
    user_id: uuid.UUID
    email: str
    display_name: Optional[str] = None


SessionListener = Callable[[str, Optional[AuthSession]], None]


class AuthProviderClient:
    """
    Thin client for the hosted identity provider.

    Password hashing, email verification and token issuance all live in the
    provider; this client only forwards credentials and parses sessions.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_anon_key
        self._client = http_client or httpx.Client(timeout=settings.auth_request_timeout)
        self._listeners: List[SessionListener] = []

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """
        Register a listener for sign-in / sign-out events.

        Returns:
            A function that unsubscribes the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _request(self, method: str, path: str, access_token: Optional[str] = None, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(
                method, f"{self.base_url}{path}", headers=self._headers(access_token), **kwargs
            )
        except httpx.HTTPError as exc:
            logger.error(f"Identity provider request failed: {method} {path}: {exc}")
            raise AuthProviderError() from exc

        if response.status_code >= 400:
            raise AuthProviderError(
                _error_message(response),
                status_code=response.status_code if response.status_code < 500 else None,
            )
        return response

    @staticmethod
    def _parse_user(payload: Dict[str, Any]) -> Dict[str, Any]:
        metadata = payload.get("user_metadata") or {}
        return {
            "user_id": uuid.UUID(payload["id"]),
            "email": payload.get("email", ""),
            "display_name": metadata.get("name"),
        }

    def _parse_session(self, payload: Dict[str, Any]) -> Optional[AuthSession]:
        if not payload.get("access_token"):
            return None
        return AuthSession(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            **self._parse_user(payload["user"]),
        )

    def sign_up(self, email: str, password: str, display_name: str) -> Dict[str, Any]:
        """
        Register a new account.

        Returns:
            Dictionary with the new user's id/email/display_name and the
            session, which is None while email verification is pending
        """
        response = self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": {"name": display_name}},
        )
        payload = response.json()
        session = self._parse_session(payload)
        user_payload = payload["user"] if "user" in payload else payload
        if session:
            self._emit(SIGNED_IN, session)
        return {**self._parse_user(user_payload), "session": session}

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange email and password for a session."""
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._parse_session(response.json())
        if session is None:
            raise AuthProviderError("The authentication service returned no session.")
        logger.info(f"User {session.user_id} signed in")
        self._emit(SIGNED_IN, session)
        return session

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        self._request("POST", "/logout", access_token=access_token)
        self._emit(SIGNED_OUT, None)

    def get_user(self, access_token: str) -> Dict[str, Any]:
        """Resolve the user behind an access token."""
        response = self._request("GET", "/user", access_token=access_token)
        return self._parse_user(response.json())

    def close(self) -> None:
        self._client.close()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or "Authentication request failed."
    for key in ("error_description", "msg", "message", "error"):
        if isinstance(payload, dict) and payload.get(key):
            return str(payload[key])
    return "Authentication request failed."


_auth_client: Optional[AuthProviderClient] = None


def get_auth_client() -> AuthProviderClient:
    """FastAPI dependency returning the shared identity-provider client."""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthProviderClient()
    return _auth_client
