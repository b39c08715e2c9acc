"""
@file exceptions.py
@brief Domain exceptions and centralized exception handlers
@details
Hard pipeline failures are raised as MarketResearchError subclasses and
propagate out of the orchestrator. The handlers below give every HTTP error
the same JSON shape.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import logging
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi import Request

logger = logging.getLogger(__name__)


class MarketResearchError(Exception):
    """Base class for failures that abort a pipeline run."""


class ReferenceDataError(MarketResearchError):
    """The metro-area or city reference tables could not be loaded."""


class ArtifactStoreError(MarketResearchError):
    """A generated file could not be written to the artifact store."""


class ArtifactNotFoundError(MarketResearchError):
    """No generated file exists under the requested name."""

    def __init__(self, filename: str):
        super().__init__(f"File not found: {filename}")
        self.filename = filename


async def http_exception_handler(request: Request, exc: HTTPException):
    """
    @brief Custom HTTP exception handler
    @details Keeps the route's detail as the "error" field.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": str(exc.detail),
            "status_code": exc.status_code,
            "message": f"Request failed with HTTP {exc.status_code}"
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    @brief Request body validation handler
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "details": exc.errors(),
            "message": "Request validation failed. Check the request body and try again."
        }
    )


async def market_research_exception_handler(request: Request, exc: MarketResearchError):
    """
    @brief Handler for pipeline failures that escaped a route
    """
    logger.error(f"Pipeline failure handling {request.url}: {exc}")
    status_code = 404 if isinstance(exc, ArtifactNotFoundError) else 500
    return JSONResponse(
        status_code=status_code,
        content={
            "error": str(exc),
            "message": "The market research pipeline could not complete the request."
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    @brief Catch-all exception handler
    @details
    Logs the full error while returning a safe message to the client.
    """
    logger.exception(f"Unexpected error handling {request.url}: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later.",
            "status": "error"
        }
    )
