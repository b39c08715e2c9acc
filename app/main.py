"""
@file main.py
@brief FastAPI application factory and root endpoint.
@details
Initializes the Market Research FastAPI application with:
- Logging configuration
- Database initialization and reference data seeding
- Middleware setup (CORS, storage error handling)
- Router registration (API, Health)
- Root documentation page

Run with: uvicorn app.main:app

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import HTMLResponse

from app import __version__
from app.core.config import DATABASE_URL, GOOGLE_MAPS_API_KEY, REQUEST_TIMEOUT, DEFAULT_MIN_POPULATION
from app.core.logging import setup_logging
from app.core import exceptions
from app.core import docs
from app.core.middleware import DatabaseErrorMiddleware
from app.core.cache import cache
from app.api import routes
from app.api.endpoints import health
from app.db.seed import initialize_database

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    @brief Application lifecycle manager
    @details
    Startup: database tables and reference data, Redis connection.
    Shutdown: Redis connection.
    """
    logger.info("=" * 60)
    logger.info("Starting Market Research API...")
    logger.info(f"Version {__version__}")
    logger.info(f"Database: {DATABASE_URL.rsplit('@', 1)[-1]}")
    logger.info(f"Default minimum population: {DEFAULT_MIN_POPULATION}, request timeout: {REQUEST_TIMEOUT}s")
    if not GOOGLE_MAPS_API_KEY:
        logger.warning("⚠ GOOGLE_MAPS_API_KEY is not set; scrape requests must supply their own key")
    logger.info("=" * 60)

    try:
        if initialize_database():
            logger.info("✓ Database initialization completed")
        else:
            logger.warning("⚠ Database initialization encountered issues")
    except Exception as e:
        logger.error(f"✗ Database initialization failed: {e}", exc_info=True)

    await cache.connect()

    yield

    await cache.close()
    logger.info("Market Research API shutdown completed")


## @brief FastAPI application instance
app = FastAPI(
    title="Market Research API - City Demographics & Metro Job Growth",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None
)

# --------------------------------------------------------------------------
# Middleware
# --------------------------------------------------------------------------

# Production Note: Restrict allow_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(DatabaseErrorMiddleware)


# --------------------------------------------------------------------------
# Routers
# --------------------------------------------------------------------------

app.include_router(health.router)
app.include_router(routes.router)


# --------------------------------------------------------------------------
# Exception Handlers
# --------------------------------------------------------------------------

app.add_exception_handler(HTTPException, exceptions.http_exception_handler)
app.add_exception_handler(RequestValidationError, exceptions.validation_exception_handler)
app.add_exception_handler(exceptions.MarketResearchError, exceptions.market_research_exception_handler)
app.add_exception_handler(Exception, exceptions.general_exception_handler)


@app.get("/", response_class=HTMLResponse)
def read_root():
    """
    @brief Serve root documentation page
    """
    return docs.get_root_documentation()
