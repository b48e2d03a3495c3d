"""Rate limiting with slowapi."""

import json

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from taxdocs.config import get_settings

DEFAULT_RETRY_AFTER = 60  # seconds


def get_client_ip(request: Request) -> str:
    """
    Get the client IP address from the request.

    X-Forwarded-For is only trusted when the direct peer is one of
    TRUSTED_PROXIES, so clients cannot spoof their rate-limit key.
    """
    direct_ip: str = get_remote_address(request)

    settings = get_settings()
    if not settings.trusted_proxies:
        return direct_ip

    trusted = {ip.strip() for ip in settings.trusted_proxies.split(",") if ip.strip()}
    if direct_ip in trusted:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

    return direct_ip


def api_rate_limit() -> str:
    """Per-route limit, read at request time so API_RATE_LIMIT can change per process."""
    return get_settings().api_rate_limit


# In-memory storage, keyed by client IP
limiter = Limiter(key_func=get_client_ip, default_limits=["200/minute"])


def get_limiter() -> Limiter:
    """Return the module-level limiter used by route decorators."""
    return limiter


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Return 429 Too Many Requests with Retry-After and X-RateLimit-* headers.
    """
    retry_after = getattr(exc, "retry_after", DEFAULT_RETRY_AFTER)

    response = Response(
        content=json.dumps({
            "detail": "Rate limit exceeded",
            "message": f"Too many requests. Please retry after {retry_after} seconds.",
            "retry_after": retry_after,
        }),
        status_code=429,
        media_type="application/json",
    )
    response.headers["Retry-After"] = str(retry_after)
    response.headers["X-RateLimit-Remaining"] = "0"
    if getattr(exc, "detail", None):
        response.headers["X-RateLimit-Limit"] = str(exc.detail)

    return response
