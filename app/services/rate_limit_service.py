"""Request throttling per client IP.

Lead submissions and the admin API use slowapi route decorators. The admin
limit is shared, so every admin route draws from one counter per IP.

Logins count failed attempts only. slowapi counts every call to a decorated
route, so the login endpoint uses a `limits` fixed window directly: it is
tested before authenticating and hit on a 401.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)

LEAD_SUBMISSION_MESSAGE = "Too many lead submissions from this IP, please try again later."
LOGIN_MESSAGE = "Too many login attempts, please try again later."
API_MESSAGE = "Too many requests, please try again later."

limiter = Limiter(key_func=get_remote_address)

limit_lead_submissions = limiter.limit(settings.LEAD_SUBMIT_RATE, error_message=LEAD_SUBMISSION_MESSAGE)
limit_api = limiter.shared_limit(settings.API_RATE, scope="admin_api", error_message=API_MESSAGE)

failed_login_rate = parse(settings.LOGIN_RATE)
_login_storage = MemoryStorage()
_failed_logins = FixedWindowRateLimiter(_login_storage)


async def check_login_limit(request: Request) -> None:
    """Reject the login when this IP has used up its failed attempts."""
    key = get_remote_address(request)
    if not _failed_logins.test(failed_login_rate, "login", key):
        logger.warning("Login rate limit exceeded for %s", key)
        raise HTTPException(status_code=429, detail=LOGIN_MESSAGE)


def record_failed_login(request: Request) -> None:
    _failed_logins.hit(failed_login_rate, "login", get_remote_address(request))


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(
        "Rate limit %s exceeded for %s on %s",
        exc.limit.limit,
        get_remote_address(request),
        request.url.path,
    )
    return JSONResponse(status_code=429, content={"detail": exc.detail})


def reset_rate_limits() -> None:
    limiter.reset()
    _login_storage.reset()
