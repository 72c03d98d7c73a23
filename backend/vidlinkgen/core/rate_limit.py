"""
Shared rate limiting configuration.

Defines the global SlowAPI limiter instance and the password-attempt budget
used by the public viewer. Only wrong password submissions are counted, per
client address and link; viewing a link never consumes the budget.
"""
from fastapi import Request
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address

from vidlinkgen.core.config import settings
from vidlinkgen.core.exceptions import TooManyPasswordAttempts

# Global limiter instance; its storage backs the password-attempt counters
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

PASSWORD_ATTEMPT_SCOPE = "password-attempt"


def _identifiers(request: Request, short_id: str):
    return PASSWORD_ATTEMPT_SCOPE, short_id, get_remote_address(request)


def ensure_password_attempts_left(request: Request, short_id: str) -> None:
    """
    Refuse a password submission once the caller has used up its wrong attempts.

    Raises:
        TooManyPasswordAttempts: The budget for this link and address is spent
    """
    if not limiter.enabled:
        return
    item = parse(settings.password_attempt_limit)
    if not limiter.limiter.test(item, *_identifiers(request, short_id)):
        raise TooManyPasswordAttempts()


def record_failed_password(request: Request, short_id: str) -> None:
    """Count one wrong password submission against the caller's budget."""
    if not limiter.enabled:
        return
    limiter.limiter.hit(parse(settings.password_attempt_limit), *_identifiers(request, short_id))
