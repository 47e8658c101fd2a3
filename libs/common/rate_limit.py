"""Rate limiting configuration for the PDS API.

Uses slowapi; storage is Redis in deployed environments and in-memory locally.
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings


def get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    Checks X-Forwarded-For, then X-Real-IP, then the direct connection IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain (original client)
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return get_remote_address(request)


def _get_ip_key(request: Request) -> str:
    return f"ip:{get_client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    """
    Create and return a cached Limiter instance.
    """
    settings = get_settings()

    return Limiter(
        key_func=_get_ip_key,
        default_limits=["100/minute"],
        storage_uri=settings.REDIS_URL,
        strategy="fixed-window",
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Render rate limit errors in the standard ``{"error": ...}`` shape.
    """
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests. Please try again later."},
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


# Decorator shortcuts for common rate limit tiers
def login_check_limit(func: Callable) -> Callable:
    """Pre-login checks (10/minute per IP)."""
    return limiter.limit("10/minute")(func)


def auth_limit(func: Callable) -> Callable:
    """Apply strict rate limit for code-sending endpoints (5/minute)."""
    return limiter.limit("5/minute")(func)
