"""
@file __init__.py
@brief Market Research backend application package initialization

@details
Package defining the FastAPI application and the city market research
pipeline.

**Package Structure:**
- api/: FastAPI route handlers
- core/: Configuration, logging, exceptions, cache, health, state reference data
- db/: Database engine, session management, and reference data seeding
- etl/: Scrapers (city roster, city details, BLS employment) and the pipeline
- models/: SQLAlchemy ORM models (metro areas, city coordinates, generated files)
- services/: Geocoding, metro matching, job growth, reports, artifact storage
- config/: Bundled reference data (metro areas, city coordinates)

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see main for FastAPI application setup
@see etl.pipeline for the scrape workflow
"""

__version__ = "1.0.0"
