"""
City Detail Scraper

Extracts demographic and economic fields from a city-data.com city profile.

Each field is produced by a named extraction rule: a callable that receives
the parsed page and returns the field's text, or None when its section or
pattern is missing. Rules are registered in a fixed, ordered list of
(field name, rule) pairs which also defines the column order of the report.

The rules encode the exact shape of the observed markup, including the
positional child-node offsets inside the #median-income section. They are
intentionally not derived from any schema:

    #median-income children
      [1]  text after "Estimated median household income in <year>:" -> "$78,538"
      [3]  text holding the <base year> household income
      [25] text after the third bold label -> condo value
      [27] text holding the <base year> condo value

Author: Market Research Project
License: AGPL-3.0
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup, Tag

from app.etl.fetch import ScrapeResult, fetch_html

logger = logging.getLogger(__name__)

ExtractionRule = Callable[[BeautifulSoup], Optional[str]]
FieldRegistry = List[Tuple[str, ExtractionRule]]

CURRENCY_PATTERN = re.compile(r"\$\d{1,3}(?:,\d{3})*")

# Child-node offsets inside #median-income
HOUSEHOLD_INCOME_NODE = 1
HOUSEHOLD_INCOME_BASE_NODE = 3
CONDO_VALUE_NODE = 25
CONDO_VALUE_BASE_NODE = 27


def _node_text(node) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    return str(node)


def _child_text(soup: BeautifulSoup, section_id: str, index: int) -> str:
    """Stripped text of the index-th child node (text or element) of a section."""
    section = soup.find(id=section_id)
    if section is None or index >= len(section.contents):
        return ""
    return _node_text(section.contents[index]).strip()


def _inner_markup(soup: BeautifulSoup, section_id: str) -> Optional[str]:
    section = soup.find(id=section_id)
    if section is None:
        return None
    return section.decode_contents()


def _first_ethnicity_item(soup: BeautifulSoup) -> Optional[Tag]:
    graph = soup.find(id="races-graph")
    if graph is None:
        return None
    items = graph.select("ul li ul li")
    return items[0] if items else None


# ---------------------------------------------------------------------------
# Rule factories
# ---------------------------------------------------------------------------

def population_rule(year: int) -> ExtractionRule:
    pattern = re.compile(rf"Population in {year}:\s*([\d,]+)")

    def rule(soup: BeautifulSoup) -> Optional[str]:
        section = soup.find(id="city-population")
        if section is None:
            return None
        match = pattern.search(section.get_text())
        return match.group(1).strip() if match else None

    return rule


def population_change_rule(base_year: int) -> ExtractionRule:
    pattern = re.compile(rf"Population change since {base_year}:</b>(.*?)%")

    def rule(soup: BeautifulSoup) -> Optional[str]:
        markup = _inner_markup(soup, "city-population")
        if not markup:
            return None
        match = pattern.search(markup)
        return match.group(1).strip() + "%" if match else None

    return rule


def income_currency_rule(index: int) -> ExtractionRule:
    """Currency amount found in the index-th child node of #median-income."""
    def rule(soup: BeautifulSoup) -> Optional[str]:
        match = CURRENCY_PATTERN.search(_child_text(soup, "median-income", index))
        return match.group(0) if match else None

    return rule


def income_text_rule(index: int) -> ExtractionRule:
    """Raw text of the index-th child node of #median-income."""
    def rule(soup: BeautifulSoup) -> Optional[str]:
        return _child_text(soup, "median-income", index) or None

    return rule


def rent_rule(year: int) -> ExtractionRule:
    pattern = re.compile(rf"Median gross rent in {year}:.*?(\$[\d,]+)")

    def rule(soup: BeautifulSoup) -> Optional[str]:
        section = soup.find(id="median-rent")
        if section is None:
            return None
        paragraph = section.find("p")
        if paragraph is None:
            return None
        match = pattern.search(paragraph.get_text())
        return match.group(1).strip() if match else None

    return rule


def poverty_rule(year: int) -> ExtractionRule:
    pattern = re.compile(rf"Percentage of residents living in poverty in {year}.*?:</b>(.*?)%")

    def rule(soup: BeautifulSoup) -> Optional[str]:
        markup = _inner_markup(soup, "poverty-level")
        if not markup:
            return None
        match = pattern.search(markup)
        return match.group(1).strip() + "%" if match else None

    return rule


def largest_ethnicity_percentage(soup: BeautifulSoup) -> Optional[str]:
    item = _first_ethnicity_item(soup)
    if item is None:
        return None
    spans = item.find_all("span")
    if not spans:
        return None
    return spans[-1].get_text().strip() or None


def largest_ethnicity_slice(soup: BeautifulSoup) -> Optional[str]:
    item = _first_ethnicity_item(soup)
    if item is None:
        return None
    label = "".join(bold.get_text() for bold in item.find_all("b"))
    return label.strip() or None


def most_recent_crime_index(soup: BeautifulSoup) -> Optional[str]:
    table = soup.find(id="crimeTab")
    if table is None:
        return None
    cells = table.select("tfoot tr td")
    if not cells:
        return None
    return cells[-1].get_text().strip() or None


def unemployment_rate(soup: BeautifulSoup) -> Optional[str]:
    # First row reads e.g. "Here: | 4.4%"
    rows = soup.select("#unemployment .hgraph table tr")
    if not rows:
        return None
    cells = rows[0].find_all("td")
    if not cells:
        return None
    return cells[-1].get_text().strip() or None


def build_city_fields(
    population_year: int = 2022,
    income_year: int = 2023,
    base_year: int = 2000
) -> FieldRegistry:
    """
    Build the ordered field registry.

    Years appear both in the column labels and in the patterns matched against
    the page, so they are bound together here.

    Args:
        population_year (int): Year of the current population estimate
        income_year (int): Year of the current income, rent and poverty figures
        base_year (int): Census year used for comparisons

    Returns:
        FieldRegistry: (field name, rule) pairs in report column order
    """
    return [
        (f"Population in {population_year}", population_rule(population_year)),
        (f"Population change since {base_year} (%)", population_change_rule(base_year)),
        (f"Median household income in {income_year}", income_currency_rule(HOUSEHOLD_INCOME_NODE)),
        (f"Median household income in {base_year}", income_text_rule(HOUSEHOLD_INCOME_BASE_NODE)),
        (f"Median condo value in {income_year}", income_currency_rule(CONDO_VALUE_NODE)),
        (f"Median condo value in {base_year}", income_text_rule(CONDO_VALUE_BASE_NODE)),
        ("Median contract rent", rent_rule(income_year)),
        ("Poverty percentage", poverty_rule(income_year)),
        ("Largest ethnicity percentage", largest_ethnicity_percentage),
        ("Largest ethnicity slice", largest_ethnicity_slice),
        ("Most recent crime index", most_recent_crime_index),
        ("Unemployment rate", unemployment_rate),
    ]


def extract_field(rule: ExtractionRule, html: str) -> Optional[str]:
    """Apply a single rule to raw markup."""
    return rule(BeautifulSoup(html, "html.parser"))


def extract_fields(html: str, fields: FieldRegistry) -> Dict[str, Optional[str]]:
    """
    Apply every rule of the registry to one page.

    A rule that raises only loses its own field.
    """
    soup = BeautifulSoup(html, "html.parser")
    data: Dict[str, Optional[str]] = {}
    for field_name, rule in fields:
        try:
            data[field_name] = rule(soup)
        except Exception as e:
            logger.warning(f"Extraction of {field_name!r} failed: {e}")
            data[field_name] = None
    return data


def scrape_city_data(
    url: str,
    fields: FieldRegistry,
    session: Optional[requests.Session] = None
) -> ScrapeResult[Dict[str, Optional[str]]]:
    """
    Fetch a city profile and extract every registered field.

    Args:
        url (str): city-data.com city page
        fields (FieldRegistry): Ordered extraction rules
        session (requests.Session): Optional HTTP session

    Returns:
        ScrapeResult[Dict[str, Optional[str]]]: Field values in registry order
    """
    page = fetch_html(url, session)
    if not page.ok:
        logger.warning(f"Could not scrape city data from {url}: {page.detail}")
        return page.failed_as()

    return ScrapeResult.success(extract_fields(page.value, fields))
