"""Rate limiting using slowapi."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from devconnector.auth.api_key import get_key_prefix


def rate_limit_key(request: Request) -> str:
    """Limit authenticated callers per API key, anonymous callers per IP."""
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"key:{get_key_prefix(api_key)}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=rate_limit_key)


def reset_limiter() -> None:
    """Clear all rate limit counters. Used in tests for isolation."""
    limiter.reset()
