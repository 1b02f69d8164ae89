"""
Rate limiter configuration module.

Lives apart from main.py so routers can import `limiter` for the
@limiter.limit() decorator without a circular import.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from palina.core.config import settings

# Keyed by client IP; RATE_LIMIT_ENABLED=false turns it off
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)
