"""
Per-client rate limiter shared by the application and its routers.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from nearest_trees.config import settings


limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)

# Limit string applied to public query routes
QUERY_RATE_LIMIT = f"{settings.rate_limit_requests}/minute"
