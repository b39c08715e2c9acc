"""
Market Research Pipeline

This module drives the complete scrape for a list of states:

1. EXTRACT: Scrape the city roster of each state (population filter applied)
2. EXTRACT: Scrape every roster city's city-data.com profile
3. TRANSFORM: Match each city to its nearest metro area and read the metro's
   BLS total nonfarm employment series
4. TRANSFORM: Compute year-over-year job growth
5. LOAD: Save the raw roster (JSON) and the report (Excel) per state

Failure handling:
- A failed roster scrape skips the state; a failed detail scrape drops the
  city from the report (it stays in the roster file); a failed metro match or
  employment scrape leaves those columns empty.
- Reference data and artifact store failures raise and abort the run.

States and cities are processed sequentially, in request and roster order.

Author: Market Research Project
License: AGPL-3.0
"""

import argparse
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import requests
from sqlalchemy.orm import Session

from app.core.states import (
    city_detail_url,
    is_known_state,
    state_abbreviation,
    state_file_slug,
    state_listing_url,
)
from app.etl.city_detail import FieldRegistry, build_city_fields, scrape_city_data
from app.etl.employment import construct_bls_url, scrape_bls_data
from app.etl.fetch import create_session
from app.etl.roster import scrape_cities
from app.services.artifacts import ArtifactDescriptor, ArtifactStore
from app.services.geocoder import GoogleGeocoder
from app.services.job_growth import calculate_job_growth
from app.services.metro_resolver import find_closest_metro_area
from app.services.reference_data import CoordinateCache, MetroArea, load_reference_data
from app.services.report import (
    EXCEL_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    ReportRow,
    render_excel,
    render_roster,
)

logger = logging.getLogger(__name__)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC truncated to whole seconds, e.g. 2025-03-19T12:34:56"""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.replace(microsecond=0).isoformat()


def roster_filename(state: str, min_population: int, timestamp: str) -> str:
    return f"{state_file_slug(state)}_cities_population_min_{min_population}_{timestamp}.json"


def report_filename(state: str, min_population: int, timestamp: str) -> str:
    return f"market_research_{state_file_slug(state)}_min_{min_population}_{timestamp}.xlsx"


class MarketResearchPipeline:
    """
    One pipeline run.

    Owns the run-scoped state: reference data, the coordinate cache and the
    field registry are set up once and shared by every state of the run.

    Attributes:
        store (ArtifactStore): Destination of generated files
        metro_areas (Dict[str, MetroArea]): Metro reference table
        city_cache (CoordinateCache): City coordinates, grows on geocoder hits
        fields (FieldRegistry): Ordered detail extraction rules
    """

    def __init__(
        self,
        store: ArtifactStore,
        metro_areas: Dict[str, MetroArea],
        city_cache: CoordinateCache,
        api_key: str,
        fields: Optional[FieldRegistry] = None,
        session: Optional[requests.Session] = None,
        geocoder: Optional[GoogleGeocoder] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.metro_areas = metro_areas
        self.city_cache = city_cache
        self.api_key = api_key
        self.fields = fields if fields is not None else build_city_fields()
        self.session = session
        self.geocoder = geocoder or GoogleGeocoder(session)
        self.now = now or (lambda: datetime.now(timezone.utc))

    @property
    def field_names(self) -> List[str]:
        return [name for name, _ in self.fields]

    def build_row(self, city: str, state: str) -> Optional[ReportRow]:
        """
        Scrape and correlate one city.

        Returns:
            ReportRow or None when the city's profile could not be scraped
        """
        url_city = city_detail_url(city, state)
        logger.info(f"Scraping {city}, {state}")

        details = scrape_city_data(url_city, self.fields, self.session)
        if not details.ok:
            logger.warning(f"Dropping {city}, {state} from report: {details.detail} ({url_city})")
            return None

        row = ReportRow(city=city, city_data_url=url_city, details=details.value)

        city_state = f"{city}, {state_abbreviation(state)}"
        closest = find_closest_metro_area(
            city_state, self.city_cache, self.metro_areas, self.api_key, self.geocoder
        )
        area = self.metro_areas.get(closest) if closest else None
        if area is None or not area.area_code:
            logger.info(f"No metro area matched for {city_state}")
            return row

        row.closest_metro_area = closest
        row.bls_url = construct_bls_url(state, area.area_code)

        jobs = scrape_bls_data(row.bls_url, self.session)
        if jobs.ok:
            row.job_growth = calculate_job_growth(
                jobs.value.most_recent_value, jobs.value.previous_year_value
            )
            logger.info(f"{city_state}: {closest}, job growth {row.job_growth}")
        else:
            logger.warning(
                f"No employment data for {city_state} ({closest}): {jobs.detail} ({row.bls_url})"
            )

        return row

    def process_state(self, state: str, min_population: int) -> List[ArtifactDescriptor]:
        """
        Run the pipeline for one state.

        Returns:
            List[ArtifactDescriptor]: Roster file and, if any city was scraped,
            the report file. Empty when the state was skipped.
        """
        if not is_known_state(state):
            logger.warning(f"Skipping unknown state {state!r}")
            return []

        url = state_listing_url(state)
        logger.info(f"Scraping cities for {state} from {url}")
        roster = scrape_cities(url, state, min_population, self.session)

        if not roster.ok or not roster.value:
            logger.info(f"No cities found for {state} with population > {min_population}")
            return []

        cities = roster.value
        logger.info(f"Found {len(cities)} cities for {state} with population > {min_population}")

        timestamp = format_timestamp(self.now())
        generated = [
            self.store.persist(
                roster_filename(state, min_population, timestamp),
                render_roster(cities),
                JSON_CONTENT_TYPE,
                {"state": state, "type": "cities-population"},
            )
        ]

        rows = []
        for city in cities:
            row = self.build_row(city, state)
            if row is not None:
                rows.append(row)

        if not rows:
            logger.warning(f"No city profiles could be scraped for {state}; no report written")
            return generated

        logger.info(f"Scraping complete for {state}: {len(rows)} of {len(cities)} cities")
        generated.append(
            self.store.persist(
                report_filename(state, min_population, timestamp),
                render_excel(rows, self.field_names, state),
                EXCEL_CONTENT_TYPE,
                {"state": state, "type": "excel-report"},
            )
        )
        return generated

    def run(self, states: List[str], min_population: int) -> List[ArtifactDescriptor]:
        generated = []
        for state in states:
            generated.extend(self.process_state(state, min_population))
        return generated


def run_scraper(
    states: List[str],
    min_population: int,
    api_key: str,
    db: Session,
    store: Optional[ArtifactStore] = None,
    fields: Optional[FieldRegistry] = None,
    session: Optional[requests.Session] = None,
    geocoder: Optional[GoogleGeocoder] = None,
    now: Optional[Callable[[], datetime]] = None
) -> List[ArtifactDescriptor]:
    """
    Execute the complete pipeline.

    Args:
        states (List[str]): State names, processed in order
        min_population (int): Exclusive city population threshold
        api_key (str): Google Maps API key for geocoding cache misses
        db (Session): Session holding reference tables and generated files
        store (ArtifactStore): Optional artifact store, defaults to one over db
        fields (FieldRegistry): Optional detail extraction rules
        session (requests.Session): Optional HTTP session for scraping; when
            omitted the run opens its own and closes it on return
        geocoder (GoogleGeocoder): Optional geocoder
        now (Callable): Optional clock, used for artifact timestamps

    Returns:
        List[ArtifactDescriptor]: Every file generated, in creation order

    Raises:
        ReferenceDataError: Reference tables could not be loaded
        ArtifactStoreError: A generated file could not be saved
    """
    logger.info("=" * 70)
    logger.info(f"STARTING MARKET RESEARCH PIPELINE for {len(states)} state(s)")
    logger.info("=" * 70)

    metro_areas, city_cache = load_reference_data(db)

    http = session or create_session()
    try:
        pipeline = MarketResearchPipeline(
            store=store or ArtifactStore(db),
            metro_areas=metro_areas,
            city_cache=city_cache,
            api_key=api_key,
            fields=fields,
            session=http,
            geocoder=geocoder,
            now=now,
        )
        generated = pipeline.run(states, min_population)
    finally:
        if session is None:
            http.close()

    logger.info(f"✓ PIPELINE COMPLETED: {len(generated)} file(s) generated")
    return generated


def main(argv: Optional[List[str]] = None) -> int:
    from app.core.config import DEFAULT_MIN_POPULATION, GOOGLE_MAPS_API_KEY
    from app.core.exceptions import MarketResearchError
    from app.core.logging import setup_logging
    from app.db.database import SessionLocal

    parser = argparse.ArgumentParser(description="Scrape market research data for U.S. states")
    parser.add_argument("states", nargs="+", help="State names, e.g. Texas 'New York'")
    parser.add_argument("--min-population", type=int, default=DEFAULT_MIN_POPULATION)
    parser.add_argument("--api-key", default=GOOGLE_MAPS_API_KEY, help="Google Maps API key")
    args = parser.parse_args(argv)

    setup_logging()
    db = SessionLocal()
    try:
        files = run_scraper(args.states, args.min_population, args.api_key, db)
    except MarketResearchError as e:
        logger.critical(f"Pipeline aborted: {e}")
        return 1
    finally:
        db.close()

    for descriptor in files:
        logger.info(f"  → {descriptor.name} ({descriptor.size} bytes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
