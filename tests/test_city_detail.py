"""
City Detail Scraper Tests

Tests for the extraction rules run against a city-data.com profile.
Every rule is exercised on its own against the city_html fixture, then the
registry as a whole.

Author: Market Research Project
License: AGPL-3.0
"""

import pytest

from app.etl.city_detail import (
    build_city_fields,
    extract_field,
    extract_fields,
    income_currency_rule,
    income_text_rule,
    largest_ethnicity_percentage,
    largest_ethnicity_slice,
    most_recent_crime_index,
    population_change_rule,
    population_rule,
    poverty_rule,
    rent_rule,
    scrape_city_data,
    unemployment_rate,
)
from app.etl.fetch import ScrapeStatus

CITY_URL = "https://www.city-data.com/city/Round-Rock-Texas.html"

EXPECTED_FIELDS = [
    "Population in 2022",
    "Population change since 2000 (%)",
    "Median household income in 2023",
    "Median household income in 2000",
    "Median condo value in 2023",
    "Median condo value in 2000",
    "Median contract rent",
    "Poverty percentage",
    "Largest ethnicity percentage",
    "Largest ethnicity slice",
    "Most recent crime index",
    "Unemployment rate",
]


class TestExtractionRules:
    """Test each rule against the profile fixture."""

    def test_population(self, city_html):
        assert extract_field(population_rule(2022), city_html) == "123,456"

    def test_population_other_year_missing(self, city_html):
        assert extract_field(population_rule(2019), city_html) is None

    def test_population_change(self, city_html):
        assert extract_field(population_change_rule(2000), city_html) == "+101.2%"

    def test_household_income(self, city_html):
        assert extract_field(income_currency_rule(1), city_html) == "$78,538"

    def test_household_income_base_year(self, city_html):
        assert extract_field(income_text_rule(3), city_html) == "$40,424"

    def test_condo_value(self, city_html):
        assert extract_field(income_currency_rule(25), city_html) == "$312,400"

    def test_condo_value_base_year(self, city_html):
        assert extract_field(income_text_rule(27), city_html) == "$101,300"

    def test_child_offset_past_end(self, city_html):
        assert extract_field(income_text_rule(500), city_html) is None

    def test_rent(self, city_html):
        assert extract_field(rent_rule(2023), city_html) == "$1,592"

    def test_poverty(self, city_html):
        assert extract_field(poverty_rule(2023), city_html) == "6.1%"

    def test_largest_ethnicity(self, city_html):
        assert extract_field(largest_ethnicity_percentage, city_html) == "48.2%"
        assert extract_field(largest_ethnicity_slice, city_html) == "White alone"

    def test_crime_index_uses_last_footer_cell(self, city_html):
        assert extract_field(most_recent_crime_index, city_html) == "118.0"

    def test_unemployment_rate_uses_first_row(self, city_html):
        assert extract_field(unemployment_rate, city_html) == "4.4%"

    @pytest.mark.parametrize("rule", [
        population_rule(2022),
        population_change_rule(2000),
        income_currency_rule(1),
        income_text_rule(3),
        rent_rule(2023),
        poverty_rule(2023),
        largest_ethnicity_percentage,
        largest_ethnicity_slice,
        most_recent_crime_index,
        unemployment_rate,
    ])
    def test_missing_section_yields_none(self, rule):
        """Test that every rule reports None on a page without its section."""
        assert extract_field(rule, "<html><body><p>Nothing here</p></body></html>") is None

    def test_empty_crime_cell_yields_none(self):
        html = '<table id="crimeTab"><tfoot><tr><td>index</td><td> </td></tr></tfoot></table>'
        assert extract_field(most_recent_crime_index, html) is None


class TestFieldRegistry:
    """Test the ordered registry and its application."""

    def test_default_field_order(self):
        assert [name for name, _ in build_city_fields()] == EXPECTED_FIELDS

    def test_years_bound_into_names(self):
        names = [name for name, _ in build_city_fields(2021, 2022, 2010)]
        assert names[0] == "Population in 2021"
        assert names[1] == "Population change since 2010 (%)"
        assert names[2] == "Median household income in 2022"
        assert names[3] == "Median household income in 2010"

    def test_extract_fields_keeps_registry_order(self, city_html):
        data = extract_fields(city_html, build_city_fields())

        assert list(data) == EXPECTED_FIELDS
        assert data["Population in 2022"] == "123,456"
        assert data["Unemployment rate"] == "4.4%"

    def test_failing_rule_only_loses_its_field(self, city_html):
        def broken(soup):
            raise RuntimeError("markup changed")

        fields = [("Broken", broken), ("Unemployment rate", unemployment_rate)]
        data = extract_fields(city_html, fields)

        assert data == {"Broken": None, "Unemployment rate": "4.4%"}


class TestScrapeCityData:
    """Test the complete detail scrape."""

    def test_scrape_city_data_success(self, make_http_session, city_html):
        session = make_http_session({CITY_URL: city_html})
        result = scrape_city_data(CITY_URL, build_city_fields(), session)

        assert result.ok
        assert result.value["Median contract rent"] == "$1,592"

    def test_scrape_city_data_not_found(self, make_http_session):
        session = make_http_session({CITY_URL: 404})
        result = scrape_city_data(CITY_URL, build_city_fields(), session)

        assert result.status is ScrapeStatus.NOT_FOUND
        assert result.value is None
