"""Per-client-IP rate limiting backed by slowapi."""

from fastapi import Request
from slowapi import Limiter

from .config import get_settings


def client_ip(request: Request) -> str:
    """Real client address behind a proxy (first X-Forwarded-For hop)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def redeem_limit() -> str:
    return get_settings().redeem_rate_limit


def quiz_submit_limit() -> str:
    return get_settings().quiz_submit_rate_limit


limiter = Limiter(key_func=client_ip, enabled=get_settings().rate_limit_enabled)
