"""
Health checks for the FuelEU Ledger API.

Backs the liveness and readiness probes and the full /api/health report.
The ledger cannot serve without its database; Redis only backs rate limiting,
so losing it degrades the service instead of failing it.
"""
import logging
from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
from dataclasses import dataclass

import redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.config import settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class HealthStatus(Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""
    name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None


def _elapsed_ms(start: datetime) -> float:
    return round((datetime.utcnow() - start).total_seconds() * 1000, 2)


def check_database_health() -> ComponentHealth:
    """Run ``SELECT 1`` on a fresh session."""
    from api.database import SessionLocal, engine

    start = datetime.utcnow()
    db = SessionLocal()
    try:
        result = db.execute(text("SELECT 1")).scalar()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return ComponentHealth(
            name="database",
            status=HealthStatus.UNHEALTHY,
            latency_ms=_elapsed_ms(start),
            message=f"Connection failed: {type(e).__name__}",
        )
    finally:
        db.close()

    if result != 1:
        return ComponentHealth(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message="Unexpected query result",
        )
    return ComponentHealth(
        name="database",
        status=HealthStatus.HEALTHY,
        latency_ms=_elapsed_ms(start),
        message=f"{engine.dialect.name} connected",
    )


def check_redis_health() -> ComponentHealth:
    if not (settings.redis_enabled and settings.rate_limit_enabled):
        return ComponentHealth(
            name="redis",
            status=HealthStatus.HEALTHY,
            message="Redis disabled (not required)",
        )

    start = datetime.utcnow()
    try:
        client = redis.from_url(
            settings.redis_url,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return ComponentHealth(
            name="redis",
            status=HealthStatus.DEGRADED,
            latency_ms=_elapsed_ms(start),
            message=f"Connection failed: {type(e).__name__}",
        )

    return ComponentHealth(
        name="redis",
        status=HealthStatus.HEALTHY,
        latency_ms=_elapsed_ms(start),
        message="Redis connected",
    )


def perform_full_health_check() -> Dict[str, Any]:
    """Check every component and roll the results up into one status."""
    start = datetime.utcnow()
    components = [check_database_health(), check_redis_health()]

    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    elif any(c.status == HealthStatus.DEGRADED for c in components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return {
        "status": overall_status.value,
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "version": API_VERSION,
        "environment": settings.environment,
        "check_duration_ms": _elapsed_ms(start),
        "components": {
            c.name: {
                "status": c.status.value,
                "latency_ms": c.latency_ms,
                "message": c.message,
            }
            for c in components
        },
    }


def perform_liveness_check() -> Dict[str, Any]:
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


def perform_readiness_check() -> Dict[str, Any]:
    """Ready once the database answers."""
    db_health = check_database_health()
    is_ready = db_health.status == HealthStatus.HEALTHY

    return {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "database": db_health.status.value,
    }
