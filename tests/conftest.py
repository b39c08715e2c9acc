"""
Test Configuration and Shared Fixtures

This module provides shared pytest fixtures and configuration for the test suite.
Includes an in-memory database, HTML fixtures mirroring the scraped pages, and
HTTP mocking helpers.

Fixtures:
- test_engine: SQLite in-memory engine with every table created
- test_db_session: SQLAlchemy session bound to test_engine
- make_http_session: Build a mocked requests.Session serving canned pages
- roster_html / city_html / bls_html: Page fixtures

Author: Market Research Project
License: AGPL-3.0
"""

import logging
from unittest.mock import MagicMock

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.models.city import CityReference
from app.models.generated_file import GeneratedFile  # noqa: F401
from app.models.msa import MetropolitanArea

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


# Mark test categories for selective running
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (slower)")
    config.addinivalue_line("markers", "database: Tests requiring a database session")
    config.addinivalue_line("markers", "api: API endpoint tests")
    config.addinivalue_line("markers", "etl: Scraper and pipeline tests")
    config.addinivalue_line("markers", "services: Service layer tests")
    config.addinivalue_line("markers", "models: Database model tests")
    config.addinivalue_line("markers", "seed: Database seeding tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    etl_modules = ("test_roster", "test_city_detail", "test_employment", "test_pipeline",
                   "test_fetch", "test_area_codes")
    service_modules = ("test_metro_resolver", "test_geocoder", "test_job_growth",
                       "test_artifacts", "test_report", "test_reference_data")
    for item in items:
        path = str(item.fspath)
        # Mark tests by file location
        if "test_api" in path:
            item.add_marker(pytest.mark.api)
        elif any(name in path for name in etl_modules):
            item.add_marker(pytest.mark.etl)
        elif any(name in path for name in service_modules):
            item.add_marker(pytest.mark.services)
        elif "test_models" in path:
            item.add_marker(pytest.mark.models)
        elif "test_seed" in path:
            item.add_marker(pytest.mark.seed)

        if "test_pipeline" in path:
            item.add_marker(pytest.mark.integration)

        # Mark as unit if no database marker
        if "database" not in item.keywords:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def test_engine():
    """SQLite in-memory engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_engine):
    """Provide a fresh database session for each test."""
    Session = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def seeded_db_session(test_db_session):
    """
    Session with a small reference data set.

    Returns:
        Session: Three metro areas and two known cities
    """
    test_db_session.add_all([
        MetropolitanArea(name="Austin-Round Rock-Georgetown, TX", area_code="12420",
                         latitude=30.2672, longitude=-97.7431),
        MetropolitanArea(name="Dallas-Fort Worth-Arlington, TX", area_code="19100",
                         latitude=32.7767, longitude=-96.7970),
        MetropolitanArea(name="Houston-The Woodlands-Sugar Land, TX", area_code="26420",
                         latitude=29.7604, longitude=-95.3698),
        CityReference(name="Round Rock, TX", latitude=30.5083, longitude=-97.6789),
        CityReference(name="Plano, TX", latitude=33.0198, longitude=-96.6989),
    ])
    test_db_session.commit()
    return test_db_session


def make_response(status_code=200, text="", payload=None):
    """Build a mocked requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error"
        )
    return response


@pytest.fixture
def make_http_session():
    """
    Factory for a mocked requests.Session.

    Args:
        pages (dict): URL to markup (200) or to an int status code. URLs not
            listed get a 404.

    Returns:
        MagicMock: Session whose get() serves the pages
    """
    def factory(pages):
        session = MagicMock()

        def get(url, **kwargs):
            page = pages.get(url, 404)
            if isinstance(page, Exception):
                raise page
            if isinstance(page, int):
                return make_response(status_code=page)
            return make_response(text=page)

        session.get.side_effect = get
        return session

    return factory


@pytest.fixture
def roster_html():
    """city-data.com state page with four cities, one below 50,000."""
    return """
    <html><body>
    <table class="tabBlue">
      <thead><tr><th>#</th><th>Name</th><th>Population</th></tr></thead>
      <tbody>
        <tr><td>1</td><td>Round Rock, TX</td><td>119,468</td></tr>
        <tr><td>2</td><td>Plano, TX</td><td>285,494</td></tr>
        <tr><td>3</td><td>Marfa, TX</td><td>1,788</td></tr>
        <tr><td>4</td><td>Sugar Land, TX</td><td>111,026 (2022)</td></tr>
        <tr><td>no population column</td></tr>
      </tbody>
    </table>
    </body></html>
    """


def _median_income_section():
    # Child nodes alternate element / text. Index 1 is the current income
    # text, 3 the base-year income, 25 the current condo value and 27 the
    # base-year condo value.
    children = []
    for index in range(29):
        if index == 0:
            children.append("<b>Estimated median household income in 2023:</b>")
        elif index == 1:
            children.append(" $78,538")
        elif index == 2:
            children.append("<b>Median household income in 2000:</b>")
        elif index == 3:
            children.append(" $40,424")
        elif index == 24:
            children.append("<b>Estimated median condo value in 2023:</b>")
        elif index == 25:
            children.append(" $312,400")
        elif index == 26:
            children.append("<b>Median condo value in 2000:</b>")
        elif index == 27:
            children.append(" $101,300")
        elif index % 2 == 0:
            children.append("<br/>")
        else:
            children.append(" filler ")
    return "".join(children)


@pytest.fixture
def city_html():
    """city-data.com city profile carrying every extracted section."""
    return f"""
    <html><body>
    <section id="city-population"><b>Population in 2022:</b> 123,456 (100% urban, 0% rural).
      <b>Population change since 2000:</b> +101.2%</section>
    <section id="median-income">{_median_income_section()}</section>
    <section id="median-rent"><p><b>Median gross rent in 2023:</b> $1,592.</p></section>
    <section id="poverty-level"><b>Percentage of residents living in poverty in 2023:</b> 6.1%</section>
    <section id="races-graph"><ul><li><ul>
      <li><b>White alone</b> <span>58,000</span> <span>48.2%</span></li>
      <li><b>Hispanic</b> <span>34,000</span> <span>28.1%</span></li>
    </ul></li></ul></section>
    <table id="crimeTab">
      <tbody><tr><td>2021</td><td>150.2</td></tr></tbody>
      <tfoot><tr><td>City-Data.com crime index</td><td>121.3</td><td>118.0</td></tr></tfoot>
    </table>
    <section id="unemployment"><div class="hgraph"><table>
      <tr><td>Here:</td><td>4.4%</td></tr>
      <tr><td>Texas:</td><td>4.1%</td></tr>
    </table></div></section>
    </body></html>
    """


def build_bls_table(rows):
    """
    Render a BLS #table0 from {year: [cell text, ...]}.

    The year goes in a <th> cell as on data.bls.gov.
    """
    body = "".join(
        "<tr><th>{}</th>{}</tr>".format(year, "".join(f"<td>{cell}</td>" for cell in cells))
        for year, cells in rows.items()
    )
    return f'<html><body><table id="table0"><thead><tr><th>Year</th></tr></thead><tbody>{body}</tbody></table></body></html>'


@pytest.fixture
def bls_html():
    """Two years of total nonfarm employment, newest year partially filled."""
    return build_bls_table({
        2023: ["1,240.1", "1,250.0", "1,260.3", "1,270.2", "1,275.0", "1,280.9",
               "1,270.5", "1,275.1", "1,290.2", "1,295.4", "1,300.0", "1,305.6"],
        2024: ["1,280.0", "1,290.0", "1,298.7", "1,310.2(P)", "&nbsp;", ""],
    })
