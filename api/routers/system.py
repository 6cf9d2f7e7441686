"""
System API router: root endpoint and health probes.
"""

import logging

from fastapi import APIRouter, HTTPException

from api.health import (
    API_VERSION,
    perform_full_health_check,
    perform_liveness_check,
    perform_readiness_check,
)
from api.middleware import get_request_id

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)


@router.get("/")
async def root():
    """API name, version and endpoint groups."""
    return {
        "name": "FuelEU Ledger API",
        "version": API_VERSION,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "routes": "/api/routes",
            "compliance": "/api/compliance/...",
            "banking": "/api/banking/...",
            "pools": "/api/pools/...",
        },
    }


@router.get("/api/health")
def health_check():
    """
    Full health report.

    Returns overall status (healthy/degraded/unhealthy), timestamp, version
    and per-component status for the database and Redis.
    """
    result = perform_full_health_check()
    result["request_id"] = get_request_id()
    return result


@router.get("/api/health/live")
def liveness_check():
    """Liveness probe. Does not touch dependencies."""
    return perform_liveness_check()


@router.get("/api/health/ready")
def readiness_check():
    """Readiness probe. 503 until the database answers."""
    result = perform_readiness_check()
    if result.get("status") != "ready":
        logger.warning("Readiness check failed: database %s", result.get("database"))
        raise HTTPException(status_code=503, detail="Service not ready")
    return result
