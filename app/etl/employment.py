"""
Employment Series Scraper

Reads BLS "State and Metro Area Employment" (SM) time series pages and
returns the newest monthly value together with the comparable value one year
earlier.

Series IDs are built as

    SMU <state FIPS, 2> <area code, 5> 0000000001

i.e. not seasonally adjusted, total nonfarm, all employees (thousands).
See https://www.bls.gov/help/hlpforma.htm#SM

The page holds a single `#table0` table with one row per year: the year in the
first cell followed by one cell per month. Preliminary values carry a "(P)"
marker.

Author: Market Research Project
License: AGPL-3.0
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from app.core.states import state_fips_code
from app.etl.fetch import ScrapeResult, fetch_html

logger = logging.getLogger(__name__)

BLS_TIMESERIES_URL = "https://data.bls.gov/timeseries/"

_PRELIMINARY_MARKER = re.compile(r"\(P\)|\(p\)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class EmploymentSample:
    """
    Newest employment value and its year-earlier comparison.

    Months are 1-based. previous_month is None when the previous year had no
    value for the same month and the closest month was used instead.
    """
    most_recent_value: float
    previous_year_value: float
    current_year: int
    previous_year: int
    current_month: int
    previous_month: Optional[int]


def build_series_id(state: str, area_code: str) -> str:
    return f"SMU{state_fips_code(state)}{area_code}0000000001"


def construct_bls_url(state: str, area_code: str) -> str:
    """Timeseries page of total nonfarm employment for a state and metro area."""
    return f"{BLS_TIMESERIES_URL}{build_series_id(state, area_code)}"


def parse_value(text: str) -> Optional[float]:
    """Parse a month cell such as "1,234.5(P)"; None for empty or non-numeric cells."""
    value = text.strip()
    if not value or value == "&nbsp;":
        return None
    cleaned = _PRELIMINARY_MARKER.sub("", value).replace(",", "").strip()
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return None
    return float(match.group(1))


def parse_year_table(html: str, url: str = "") -> Optional[Dict[int, List[Tuple[int, float]]]]:
    """
    Read the yearly rows of #table0.

    Returns:
        Dict[int, List[Tuple[int, float]]]: year to (month column index, value)
        pairs, or None when the table or its rows are missing. Years without
        any parseable month are left out.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find(id="table0")
    if table is None:
        logger.warning(f"Could not find table with id 'table0' in {url}")
        return None

    rows = table.select("tbody tr")
    if not rows:
        logger.warning(f"No rows found in the table at {url}")
        return None

    years: Dict[int, List[Tuple[int, float]]] = {}
    for row in rows:
        cells = row.find_all(["th", "td"], recursive=False)
        if not cells:
            continue
        year_match = _LEADING_INT.match(cells[0].get_text().strip())
        if not year_match:
            continue
        year = int(year_match.group(1))

        months = []
        for index, cell in enumerate(cells[1:]):
            value = parse_value(cell.get_text())
            if value is not None:
                months.append((index, value))

        if months:
            years.setdefault(year, []).extend(months)

    return years


def select_comparison(
    years: Dict[int, List[Tuple[int, float]]],
    url: str = ""
) -> Optional[EmploymentSample]:
    """
    Pick the newest month and the matching month of the year before.

    The same month index is preferred; otherwise the month closest to it,
    ties going to the earlier month.
    """
    ordered_years = sorted(years, reverse=True)
    if len(ordered_years) < 2:
        logger.warning(f"Not enough years found in the table at {url}")
        return None

    current_year, previous_year = ordered_years[0], ordered_years[1]
    current_months = sorted(years[current_year], key=lambda m: m[0], reverse=True)
    anchor_index, anchor_value = current_months[0]

    previous_months = years[previous_year]
    same_month = next((m for m in previous_months if m[0] == anchor_index), None)
    if same_month is not None:
        previous_value = same_month[1]
    else:
        # parse_year_table never keeps a year without months
        previous_value = min(previous_months, key=lambda m: (abs(m[0] - anchor_index), m[0]))[1]

    return EmploymentSample(
        most_recent_value=anchor_value,
        previous_year_value=previous_value,
        current_year=current_year,
        previous_year=previous_year,
        current_month=anchor_index + 1,
        previous_month=same_month[0] + 1 if same_month is not None else None,
    )


def scrape_bls_data(
    url: str,
    session: Optional[requests.Session] = None
) -> ScrapeResult[EmploymentSample]:
    """
    Fetch a BLS timeseries page and extract the year-over-year comparison.

    Args:
        url (str): Timeseries page, see construct_bls_url
        session (requests.Session): Optional HTTP session

    Returns:
        ScrapeResult[EmploymentSample]: The comparison, or why it is unavailable
    """
    page = fetch_html(url, session)
    if not page.ok:
        logger.warning(f"Could not scrape BLS data from {url}: {page.detail}")
        return page.failed_as()

    years = parse_year_table(page.value, url)
    if years is None:
        return ScrapeResult.not_found("employment table missing")

    sample = select_comparison(years, url)
    if sample is None:
        return ScrapeResult.not_found("fewer than two years of data")

    return ScrapeResult.success(sample)
