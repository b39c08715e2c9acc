"""
City Roster Scraper

Extracts the list of cities of one state, with their populations, from the
city-data.com state page. The page holds a `.tabBlue` table where each data
row reads: rank | "City, ST" | population | ...

Only cities whose population is strictly greater than the requested minimum
are kept.

Author: Market Research Project
License: AGPL-3.0
"""

import logging
import re
from typing import Dict, Optional

import requests
from bs4 import BeautifulSoup

from app.core.states import state_abbreviation
from app.etl.fetch import ScrapeResult, fetch_html

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_population(text: str) -> Optional[int]:
    """
    Parse a population figure such as "1,234,567".

    Thousands separators are dropped and the leading integer is read; text
    without leading digits yields None.
    """
    match = _LEADING_INT.match(text.replace(",", ""))
    if not match:
        return None
    return int(match.group(1))


def parse_cities(html: str, state: str, min_population: int) -> Dict[str, int]:
    """
    Parse the state listing table.

    Args:
        html (str): Markup of the state page
        state (str): Full state name, used to strip the ", ST" label suffix
        min_population (int): Exclusive population threshold

    Returns:
        Dict[str, int]: City name to population, in page order
    """
    suffix = f", {state_abbreviation(state)}"
    soup = BeautifulSoup(html, "html.parser")
    cities: Dict[str, int] = {}

    for row in soup.select(".tabBlue tbody tr"):
        cells = row.find_all("td")
        if len(cells) < 3:
            continue

        city_name = cells[1].get_text().replace(suffix, "", 1).strip()
        population_text = cells[2].get_text().strip()

        population = parse_population(population_text)
        if population is None:
            logger.debug(f"Skipping {city_name}: unparseable population {population_text!r}")
            continue
        if population > min_population:
            cities[city_name] = population

    return cities


def scrape_cities(
    url: str,
    state: str,
    min_population: int,
    session: Optional[requests.Session] = None
) -> ScrapeResult[Dict[str, int]]:
    """
    Fetch a state page and return its roster.

    Args:
        url (str): city-data.com state page
        state (str): Full state name
        min_population (int): Exclusive population threshold
        session (requests.Session): Optional HTTP session

    Returns:
        ScrapeResult[Dict[str, int]]: The roster, possibly empty, or the fetch failure

    Raises:
        ValueError: If the state name is unknown
    """
    # Fail fast on bad input before touching the network
    state_abbreviation(state)

    page = fetch_html(url, session)
    if not page.ok:
        logger.warning(f"Could not scrape cities for {state} from {url}: {page.detail}")
        return page.failed_as()

    cities = parse_cities(page.value, state, min_population)
    logger.info(f"Parsed {len(cities)} cities above {min_population} for {state}")
    return ScrapeResult.success(cities)
