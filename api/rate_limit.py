"""
Rate limiting for the FuelEU Ledger API using Redis and SlowAPI.

Only mutating endpoints are decorated. Without a reachable Redis the limiter
is disabled rather than falling back to per-process counters, which would
give each worker its own budget.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import redis
import logging

from api.config import settings

logger = logging.getLogger(__name__)

redis_client = None
if settings.rate_limit_enabled and settings.redis_enabled:
    try:
        redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=5
        )
        redis_client.ping()
        logger.info("Redis connection established")
    except redis.RedisError as e:
        logger.error(f"Redis connection failed: {e}")
        logger.warning("Rate limiting disabled: Redis unavailable")
        redis_client = None


def get_client_identifier(request: Request) -> str:
    """
    Key requests by API key prefix when one is sent, else by client IP.
    """
    api_key = request.headers.get(settings.api_key_header)
    if api_key:
        return f"key:{api_key[:8]}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.rate_limit_enabled and redis_client is not None,
    storage_uri=settings.redis_url if redis_client else "memory://",
    strategy="fixed-window",
)


def get_rate_limit_string() -> str:
    """Limit string for ``@limiter.limit()``, e.g. "60/minute;1000/hour"."""
    return f"{settings.rate_limit_per_minute}/minute;{settings.rate_limit_per_hour}/hour"
