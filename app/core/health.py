"""
@file health.py
@brief System health checks and status monitoring

@details
Checks the components the API depends on:
- Database (artifact store and reference tables), critical
- Reference tables (metro areas seeded), degrade when empty
- Redis cache, optional

The pipeline's external sources (city-data.com, BLS, Google) are not probed;
their failures are soft and handled per call.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import logging
from typing import Dict, Any
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from app.db.database import SessionLocal
from app.core.cache import cache
from app.models.city import CityReference
from app.models.msa import MetropolitanArea

logger = logging.getLogger(__name__)


class HealthStatus:
    """Health status indicator for system components"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


async def check_database() -> Dict[str, Any]:
    """
    @brief Run a trivial query against the database
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": HealthStatus.HEALTHY,
            "message": "Database is healthy",
            "component": "database"
        }
    except OperationalError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": HealthStatus.UNHEALTHY,
            "message": "Database is unavailable",
            "component": "database",
            "error": str(e)
        }
    except Exception as e:
        logger.error(f"Unexpected database health check error: {e}")
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Database health check encountered an error",
            "component": "database",
            "error": str(e)
        }
    finally:
        db.close()


async def check_cache() -> Dict[str, Any]:
    """
    @brief PING Redis; an unavailable cache only degrades the system
    """
    if not cache.client:
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Redis cache is not connected (running without cache)",
            "component": "cache"
        }
    try:
        await cache.client.ping()
        return {
            "status": HealthStatus.HEALTHY,
            "message": "Redis cache is healthy",
            "component": "cache"
        }
    except Exception as e:
        logger.warning(f"Cache health check failed: {e}")
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Redis cache is unavailable (running in degraded mode)",
            "component": "cache",
            "error": str(e)
        }


async def check_reference_data() -> Dict[str, Any]:
    """
    @brief Count the seeded metro areas and known cities

    @details
    Without metro areas every report row loses its metro and job growth
    columns, so an empty table degrades the system.
    """
    db = SessionLocal()
    try:
        metro_areas = db.query(MetropolitanArea).count()
        cities = db.query(CityReference).count()
    except SQLAlchemyError as e:
        logger.warning(f"Reference data health check failed: {e}")
        return {
            "status": HealthStatus.DEGRADED,
            "message": "Reference data could not be read",
            "component": "reference_data",
            "error": str(e)
        }
    finally:
        db.close()

    if metro_areas == 0:
        return {
            "status": HealthStatus.DEGRADED,
            "message": "No metro areas seeded; reports will lack job growth",
            "component": "reference_data",
            "metro_areas": 0,
            "cities": cities
        }
    return {
        "status": HealthStatus.HEALTHY,
        "message": f"{metro_areas} metro areas, {cities} known cities",
        "component": "reference_data",
        "metro_areas": metro_areas,
        "cities": cities
    }


async def get_system_health() -> Dict[str, Any]:
    """
    @brief Overall status from the component checks

    @details
    - HEALTHY: All components operational
    - DEGRADED: Database OK, cache unavailable or reference data missing
    - UNHEALTHY: Database unavailable (reference data is not checked)
    """
    components = {"database": await check_database()}

    if components["database"]["status"] == HealthStatus.UNHEALTHY:
        components["cache"] = await check_cache()
        overall_status = HealthStatus.UNHEALTHY
    else:
        components["reference_data"] = await check_reference_data()
        components["cache"] = await check_cache()
        if any(c["status"] != HealthStatus.HEALTHY for c in components.values()):
            overall_status = HealthStatus.DEGRADED
        else:
            overall_status = HealthStatus.HEALTHY

    return {
        "status": overall_status,
        "components": components,
        "message": get_status_message(overall_status, components)
    }


def get_status_message(status: str, components: Dict[str, Any] = None) -> str:
    if status == HealthStatus.DEGRADED and components:
        degraded = [name for name, c in components.items() if c["status"] != HealthStatus.HEALTHY]
        return f"System is operational with degraded components: {', '.join(degraded)}"
    messages = {
        HealthStatus.HEALTHY: "System is operational",
        HealthStatus.DEGRADED: "System is running in degraded mode",
        HealthStatus.UNHEALTHY: "System is in maintenance mode (database unavailable)"
    }
    return messages.get(status, "Unknown status")
