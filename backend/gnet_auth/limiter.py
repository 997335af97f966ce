"""
Shared Rate Limiter Instance

Imported by the app and the routers; storage lives in Redis unless
RATE_LIMIT_STORAGE_URI points elsewhere (``memory://`` in tests).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000/hour"],
    storage_uri=settings.rate_limit_storage,
    enabled=settings.RATE_LIMIT_ENABLED,
)
