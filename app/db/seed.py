"""
@file seed.py
@brief Database initialization and reference data seeding on application startup

@details
Manages the database lifecycle:
- Connection health checking with retry logic
- Table creation
- Reconciling metro_areas with the bundled area_data.json on every start
- Seeding city_references from city_data.json when it is empty
- Idempotent initialization (safe to call multiple times)

Reference JSON layout:

@code{.json}
{"Austin-Round Rock-Georgetown, TX": {"area_code": "12420", "coordinates": [30.2672, -97.7431]}}
{"Round Rock, TX": {"coordinates": [30.5083, -97.6789]}}
@endcode

@author Market Research Project
@date 2025-03-19
@version 2.0
@license AGPL-3.0

@see services.reference_data for how the tables are read
@see etl.area_codes for refreshing area_data.json
"""

import json
import logging
import time
from typing import Any, Dict

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import AREA_DATA_PATH, CITY_DATA_PATH, DATABASE_URL
from app.db.base import Base
from app.models.city import CityReference
from app.models.generated_file import GeneratedFile  # noqa: F401 (registers table)
from app.models.msa import MetropolitanArea

## @brief Module logger for startup diagnostics
logger = logging.getLogger(__name__)


def read_reference_file(path: str) -> Dict[str, Any]:
    """
    @brief Read one reference JSON file

    @param path File path
    @return Name-keyed mapping
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def wait_for_database(max_retries: int = 30, retry_delay: int = 2, engine: Engine = None) -> bool:
    """
    @brief Wait for database to become available

    @details
    Useful for containerized deployments where the database may start after
    the app.

    @param max_retries (int) Maximum connection attempts [default: 30]
    @param retry_delay (int) Delay between retries in seconds [default: 2]
    @param engine Optional engine, a new one on DATABASE_URL by default

    @return True if database available, False if max retries exceeded
    """
    retries = 0
    while retries < max_retries:
        try:
            target = engine or create_engine(DATABASE_URL)
            with target.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("✓ Database connection established successfully")
            return True
        except OperationalError as e:
            retries += 1
            logger.warning(
                f"Database not ready (attempt {retries}/{max_retries}): {str(e)[:100]}"
            )
            if retries < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                time.sleep(retry_delay)

    logger.error(f"Failed to connect to database after {max_retries} attempts")
    return False


def sync_metro_areas(db: Session, areas: Dict[str, Any]) -> Dict[str, int]:
    """
    @brief Make metro_areas match a name-keyed area mapping

    @details
    Rows whose name is missing from the mapping are deleted, changed area
    codes and coordinates are updated, new names are inserted. The caller
    owns the transaction.

    @param db Open session
    @param areas Mapping in the area_data.json layout
    @return Counts of inserted, updated and deleted rows
    """
    counts = {"inserted": 0, "updated": 0, "deleted": 0}
    existing = {area.name: area for area in db.query(MetropolitanArea).all()}

    for name, row in existing.items():
        if name not in areas:
            logger.info(f"Removing metro area {name} ({row.area_code})")
            db.delete(row)
            counts["deleted"] += 1

    for name, area in areas.items():
        latitude, longitude = area.get("coordinates") or [None, None]
        row = existing.get(name)
        if row is None:
            db.add(MetropolitanArea(
                name=name, area_code=area["area_code"], latitude=latitude, longitude=longitude,
            ))
            counts["inserted"] += 1
        elif (row.area_code, row.latitude, row.longitude) != (area["area_code"], latitude, longitude):
            if row.area_code != area["area_code"]:
                logger.info(f"Updating area code for {name} from {row.area_code} to {area['area_code']}")
            row.area_code = area["area_code"]
            row.latitude = latitude
            row.longitude = longitude
            counts["updated"] += 1

    return counts


def apply_metro_areas(engine: Engine, areas: Dict[str, Any]) -> Dict[str, int]:
    """
    @brief Run sync_metro_areas in its own transaction

    @return Counts of inserted, updated and deleted rows
    """
    db = sessionmaker(bind=engine)()
    try:
        counts = sync_metro_areas(db, areas)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()

    if any(counts.values()):
        logger.info(
            f"✓ Metro areas synced: {counts['inserted']} added, "
            f"{counts['updated']} updated, {counts['deleted']} removed"
        )
    return counts


def seed_metro_areas(engine: Engine, path: str = AREA_DATA_PATH) -> int:
    """
    @brief Reconcile metro_areas with area_data.json

    @details
    The file is authoritative, so a refreshed file (see etl.area_codes) takes
    effect on the next start even when the table is already populated.

    @return Number of rows inserted, updated or deleted (0 when in sync)
    """
    areas = read_reference_file(path)
    changed = sum(apply_metro_areas(engine, areas).values())
    if not changed:
        logger.info(f"Metro area table already matches {path} ({len(areas)} areas)")
    return changed


def seed_city_references(engine: Engine, path: str = CITY_DATA_PATH) -> int:
    """
    @brief Seed city_references from city_data.json if the table is empty

    @return Number of rows inserted (0 when already seeded)
    """
    db = sessionmaker(bind=engine)()
    try:
        existing = db.query(CityReference).count()
        if existing > 0:
            logger.info(f"City reference table already seeded with {existing} cities - skipping")
            return 0

        cities = read_reference_file(path)
        inserted = 0
        for name, city in cities.items():
            coordinates = city.get("coordinates")
            if not coordinates or len(coordinates) != 2:
                logger.warning(f"Skipping {name}: invalid coordinates {coordinates}")
                continue
            db.add(CityReference(name=name, latitude=coordinates[0], longitude=coordinates[1]))
            inserted += 1
        db.commit()
        logger.info(f"✓ Seeded {inserted} city coordinates from {path}")
        return inserted
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


def initialize_database(engine: Engine = None) -> bool:
    """
    @brief Main entry point for database initialization on app startup

    @details
    1. Wait for the database
    2. Create tables (idempotent via SQLAlchemy metadata)
    3. Sync metro areas with area_data.json, seed city coordinates when empty

    Failures are logged and reported as False; the API still starts so the
    health endpoints can report maintenance mode.

    @param engine Optional engine, the application engine by default
    @return True if all steps succeeded
    """
    logger.info("Starting database initialization...")

    if engine is None:
        from app.db.database import engine as main_engine
        engine = main_engine

    if not wait_for_database(max_retries=1, retry_delay=1, engine=engine):
        logger.error("Could not establish database connection - proceeding anyway")
        return False

    try:
        logger.info("Creating tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("✓ Tables created/verified")
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {e}", exc_info=True)
        return False

    try:
        seed_metro_areas(engine)
        seed_city_references(engine)
    except (OSError, ValueError, KeyError, SQLAlchemyError) as e:
        logger.error(f"Error seeding reference data: {e}", exc_info=True)
        return False

    logger.info("✓ Database initialization completed successfully")
    return True
