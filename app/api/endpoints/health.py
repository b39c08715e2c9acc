"""
@file health.py
@brief Health check API endpoints
@details
Status, readiness and liveness probes. A scrape needs the database (reference
tables and artifact store); Redis only speeds up the file listing.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from app import __version__
from app.core.health import get_system_health, HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    @brief Get system health status

    @details
    503 only when the database is down. A missing cache or empty reference
    tables are reported as degraded with HTTP 200.
    """
    health = await get_system_health()
    body = {
        "status": health["status"],
        "message": health["message"],
        "components": health["components"]
    }

    if health["status"] == HealthStatus.UNHEALTHY:
        body["note"] = "System is in maintenance mode. Reports cannot be generated or downloaded."
        return JSONResponse(status_code=503, content=body)
    return body


@router.get("/health/ready")
async def readiness_check():
    """
    @brief Ready once the database answers and metro areas are seeded
    """
    health = await get_system_health()
    components = health["components"]

    if health["status"] == HealthStatus.UNHEALTHY:
        reason = health["message"]
    elif components.get("reference_data", {}).get("status") != HealthStatus.HEALTHY:
        reason = components.get("reference_data", {}).get("message", "Reference data unavailable")
    else:
        return {"ready": True, "status": "System is ready"}

    return JSONResponse(
        status_code=503,
        content={"ready": False, "status": "System is not ready", "reason": reason}
    )


@router.get("/health/live")
async def liveness_check():
    """
    @brief Liveness probe: 200 as long as the application is running
    """
    return {"alive": True, "status": "Application is running", "version": __version__}
