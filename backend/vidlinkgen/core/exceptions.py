"""
Domain exceptions raised by the service layer.

Each exception carries a stable error code, an HTTP status and a message that
is safe to show to the person who triggered the operation. The FastAPI app
renders them through a single exception handler (see ``vidlinkgen.main``).
"""
from typing import Any, Dict, Optional

from fastapi import status


class VidLinkError(Exception):
    """Base class for all user-visible domain errors."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Something went wrong."
    # Errors after which the caller may resubmit the same request with new input
    retryable = False

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


# Access gate outcomes

class LinkNotFound(VidLinkError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "This video link was not found."


class LinkExpired(VidLinkError):
    code = "expired"
    status_code = status.HTTP_410_GONE
    default_message = "This video link has expired."


class PasswordRequired(VidLinkError):
    code = "password_required"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "This video link is protected. Please enter the password to continue."
    retryable = True


class IncorrectPassword(VidLinkError):
    code = "incorrect_password"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect password. Please try again."
    retryable = True


class TooManyPasswordAttempts(VidLinkError):
    code = "too_many_attempts"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many incorrect password attempts. Please wait a minute and try again."
    retryable = True


class AccessDenied(VidLinkError):
    code = "access_denied"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not authorized to view this video."


class SourceMissing(VidLinkError):
    code = "source_missing"
    status_code = 422
    default_message = "This link has no playable video source."


# Authoring and authorization

class ValidationFailed(VidLinkError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The submitted data is invalid."


class NotAuthenticated(VidLinkError):
    code = "not_authenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please log in or register to continue."


class NotAuthorized(VidLinkError):
    code = "not_authorized"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class NotLinkOwner(VidLinkError):
    code = "not_owner"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You can only manage links you created."


class PremiumRequired(VidLinkError):
    code = "premium_required"
    status_code = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, feature: str, message: Optional[str] = None):
        self.feature = feature
        super().__init__(message or f"{feature} requires a premium plan.")

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["feature"] = self.feature
        return detail


class UploadLimitExceeded(VidLinkError):
    code = "upload_limit_exceeded"
    status_code = 413

    def __init__(self, limit_bytes: int, limit_text: str, message: str):
        self.limit_bytes = limit_bytes
        self.limit_text = limit_text
        super().__init__(message)

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["limit"] = self.limit_text
        return detail


# Entitlement, support and admin

class UserNotFound(VidLinkError):
    code = "user_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found."


class NoMatchingPlan(VidLinkError):
    code = "no_matching_plan"
    status_code = status.HTTP_409_CONFLICT
    default_message = "No plan matches the user's current tier."


class PremiumStateError(VidLinkError):
    code = "invalid_premium_state"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The user has no premium plan to extend."


class TicketNotFound(VidLinkError):
    code = "ticket_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Support ticket not found."


# Collaborators

class AuthProviderError(VidLinkError):
    code = "auth_provider_error"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "The authentication service is unavailable. Please try again."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class StorageError(VidLinkError):
    code = "storage_error"
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "The file could not be stored. Please try again."
