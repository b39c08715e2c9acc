"""
@file middleware.py
@brief Middleware translating storage failures into HTTP responses

@details
Database errors that escape a route (reference tables or artifact store
unreachable) become 503 maintenance responses instead of stack traces.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import DatabaseError, OperationalError

from app.core.exceptions import ArtifactStoreError, ReferenceDataError

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (OperationalError, DatabaseError, ArtifactStoreError, ReferenceDataError)


class DatabaseErrorMiddleware(BaseHTTPMiddleware):
    """
    @brief Return 503 when storage is down, 500 for anything else unhandled
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except _STORAGE_ERRORS as e:
            logger.error(f"Storage error handling {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Service unavailable",
                    "message": "Database connection failed. Reports cannot be read or written.",
                    "status": "unavailable"
                }
            )
        except Exception as e:
            logger.exception(f"Unexpected error handling {request.method} {request.url.path}: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": "An unexpected error occurred. Please try again later.",
                    "status": "error"
                }
            )
