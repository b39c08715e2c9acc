"""
@file routes.py
@brief FastAPI API endpoint definitions

@details
Thin request/response wrappers around the pipeline and the artifact store:
- POST /api/scrape: run the pipeline for a list of states
- GET /api/files: list generated files (cached in Redis)
- GET /api/download/{filename}: download one generated file

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see etl.pipeline for the scrape itself
@see services.artifacts for file storage
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.core.cache import FILES_CACHE_KEY, cache
from app.core.config import DEFAULT_MIN_POPULATION, FILES_CACHE_TTL, GOOGLE_MAPS_API_KEY
from app.core.exceptions import ArtifactNotFoundError, MarketResearchError
from app.core.states import unknown_states
from app.db.database import get_db
from app.etl.pipeline import run_scraper
from app.services.artifacts import ArtifactStore

## @brief FastAPI router instance for API endpoints
router = APIRouter(prefix="/api")

logger = logging.getLogger(__name__)


class ScrapeRequest(BaseModel):
    """
    @brief Body of POST /api/scrape (camelCase keys as sent by the frontend)
    """
    states: List[str] = []
    minPopulation: Optional[int] = None
    googleMapsApiKey: Optional[str] = None


@router.post("/scrape")
async def scrape(request: ScrapeRequest, db: Session = Depends(get_db)):
    """
    @brief Run the market research pipeline

    @details
    States are processed one after another; the call returns when every
    state is done. Soft failures (missing pages, unmatched cities) only
    shrink the output. Storage failures abort the run with HTTP 500.

    @return {"message": ..., "files": [descriptor, ...]}

    @throws HTTPException(400): No states, unknown states, bad threshold or
    missing API key
    @throws HTTPException(500): Pipeline aborted
    """
    if not request.states:
        raise HTTPException(status_code=400, detail="Please provide at least one valid state")

    unknown = unknown_states(request.states)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown states: {', '.join(unknown)}")

    min_population = request.minPopulation or DEFAULT_MIN_POPULATION
    if min_population < 0:
        raise HTTPException(status_code=400, detail="minPopulation must be a positive integer")

    api_key = request.googleMapsApiKey or GOOGLE_MAPS_API_KEY
    if not api_key:
        raise HTTPException(status_code=400, detail="Google Maps API key is required")

    logger.info(f"Received scrape request for {request.states} (min population {min_population})")
    try:
        generated = await run_in_threadpool(
            run_scraper, request.states, min_population, api_key, db
        )
    except MarketResearchError as e:
        logger.error(f"Scraper error: {e}")
        raise HTTPException(status_code=500, detail=f"Error running scraper: {e}")
    finally:
        await cache.delete(FILES_CACHE_KEY)

    return {
        "message": "Scraping completed successfully",
        "files": [descriptor.to_dict() for descriptor in generated],
    }


@router.get("/files")
async def list_files(db: Session = Depends(get_db)):
    """
    @brief List generated files, newest first, without their content

    @details
    Cached in Redis for FILES_CACHE_TTL seconds; a scrape invalidates it.
    """
    cached = await cache.get(FILES_CACHE_KEY)
    if cached is not None:
        return cached

    files = ArtifactStore(db).list()
    await cache.set(FILES_CACHE_KEY, files, ttl=FILES_CACHE_TTL)
    return files


@router.get("/download/{filename}")
def download_file(filename: str, db: Session = Depends(get_db)):
    """
    @brief Download a generated file as an attachment

    @throws HTTPException(404): No file with that name
    """
    try:
        artifact = ArtifactStore(db).get_by_name(filename)
    except ArtifactNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return Response(
        content=artifact.content,
        media_type=artifact.content_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
