"""Rate limiting middleware and optional bearer-token authentication."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated, Awaitable, Callable, Optional

from fastapi import Depends, Header, Request, Response

from review_assistant.api.handlers import error_response, internal_error_response
from review_assistant.config import Settings, get_settings
from review_assistant.errors import AuthenticationError, RateLimitError
from review_assistant.ratelimit.limiter import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

API_PREFIX = "/api/"
UNKNOWN_CLIENT = "unknown"
RATE_LIMIT_HEADERS = ("X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset")


def client_identifier(request: Request) -> str:
    """Best-effort client address: proxy headers first, then the peer."""
    for header in ("cf-connecting-ip", "x-forwarded-for", "x-real-ip"):
        value = request.headers.get(header)
        if value:
            return value.split(",")[0].strip() or UNKNOWN_CLIENT
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def rate_limit_headers(limit: int, result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at_ms),
    }


async def rate_limit_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Apply the per-client fixed window to every ``/api/`` request."""
    if not request.url.path.startswith(API_PREFIX):
        return await call_next(request)

    limiter: RateLimiter = request.app.state.rate_limiter
    identifier = client_identifier(request)
    result = limiter.check(identifier)

    if result.allowed:
        logger.debug("Rate limit check: %s allowed (%d left)", identifier, result.remaining)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = internal_error_response()
    else:
        logger.warning("Rate limit check: %s blocked", identifier)
        response = error_response(
            RateLimitError("Too many requests. Please try again later.")
        )

    response.headers.update(rate_limit_headers(limiter.limit, result))
    return response


async def require_access_token(
    authorization: Annotated[Optional[str], Header()] = None,
    settings: Settings = Depends(get_settings),
) -> None:
    """Enforce ``Authorization: Bearer <ACCESS_TOKEN>`` when a token is configured."""
    if not settings.access_token:
        return

    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer":
        raise AuthenticationError("Invalid authentication scheme. Use Bearer token.")

    if not token or not secrets.compare_digest(
        token.encode("utf-8"), settings.access_token.encode("utf-8")
    ):
        raise AuthenticationError("Invalid access token")
