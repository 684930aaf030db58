"""Rate limiting for write endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_global_settings

# Keyed by client IP; limits are declared per endpoint
limiter = Limiter(key_func=get_remote_address)


def session_report_limit() -> str:
    """Limit applied to session reports, read from settings on each request."""
    return get_global_settings().session_rate_limit
