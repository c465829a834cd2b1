"""
Health check endpoints.

Reports service liveness and OTP store connectivity.
"""

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from otp_gate.core.deps import get_store
from otp_gate.core.exceptions import StoreError
from otp_gate.core.store import KeyValueStore

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    Use this for simple uptime monitoring and load balancer health checks.
    """
    return {
        "status": "healthy",
        "timestamp": _timestamp()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(store: KeyValueStore = Depends(get_store)):
    """
    Detailed health check with store connectivity.

    Returns 200 if the OTP store answers, 503 otherwise.
    """
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": _timestamp(),
        "checks": {}
    }

    try:
        store.ping()
        health_status["checks"]["store"] = {
            "status": "healthy",
            "backend": type(store).__name__,
            "message": "OTP store reachable"
        }
    except StoreError as e:
        logger.error(f"Store health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["store"] = {
            "status": "unhealthy",
            "backend": type(store).__name__,
            "message": f"Store error: {str(e)}"
        }
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status)

    return health_status
