"""
U.S. State Reference Data

Maps every state name accepted by the pipeline to its USPS postal abbreviation
and two-digit FIPS code. The FIPS code is the state component of BLS State and
Metro Area (SM) series IDs.

Also builds the city-data.com URLs derived from state and city names.

Author: Market Research Project
License: AGPL-3.0
"""

from typing import Dict, List

CITY_DATA_BASE_URL = "https://www.city-data.com/city/"

# name: (postal abbreviation, FIPS code)
STATES: Dict[str, tuple] = {
    "Alabama": ("AL", "01"),
    "Alaska": ("AK", "02"),
    "Arizona": ("AZ", "04"),
    "Arkansas": ("AR", "05"),
    "California": ("CA", "06"),
    "Colorado": ("CO", "08"),
    "Connecticut": ("CT", "09"),
    "Delaware": ("DE", "10"),
    "District of Columbia": ("DC", "11"),
    "Florida": ("FL", "12"),
    "Georgia": ("GA", "13"),
    "Hawaii": ("HI", "15"),
    "Idaho": ("ID", "16"),
    "Illinois": ("IL", "17"),
    "Indiana": ("IN", "18"),
    "Iowa": ("IA", "19"),
    "Kansas": ("KS", "20"),
    "Kentucky": ("KY", "21"),
    "Louisiana": ("LA", "22"),
    "Maine": ("ME", "23"),
    "Maryland": ("MD", "24"),
    "Massachusetts": ("MA", "25"),
    "Michigan": ("MI", "26"),
    "Minnesota": ("MN", "27"),
    "Mississippi": ("MS", "28"),
    "Missouri": ("MO", "29"),
    "Montana": ("MT", "30"),
    "Nebraska": ("NE", "31"),
    "Nevada": ("NV", "32"),
    "New Hampshire": ("NH", "33"),
    "New Jersey": ("NJ", "34"),
    "New Mexico": ("NM", "35"),
    "New York": ("NY", "36"),
    "North Carolina": ("NC", "37"),
    "North Dakota": ("ND", "38"),
    "Ohio": ("OH", "39"),
    "Oklahoma": ("OK", "40"),
    "Oregon": ("OR", "41"),
    "Pennsylvania": ("PA", "42"),
    "Rhode Island": ("RI", "44"),
    "South Carolina": ("SC", "45"),
    "South Dakota": ("SD", "46"),
    "Tennessee": ("TN", "47"),
    "Texas": ("TX", "48"),
    "Utah": ("UT", "49"),
    "Vermont": ("VT", "50"),
    "Virginia": ("VA", "51"),
    "Washington": ("WA", "53"),
    "West Virginia": ("WV", "54"),
    "Wisconsin": ("WI", "55"),
    "Wyoming": ("WY", "56"),
}


def _lookup(state: str) -> tuple:
    try:
        return STATES[state]
    except KeyError:
        raise ValueError(f"Unknown state: {state!r}") from None


def state_abbreviation(state: str) -> str:
    """Return the postal abbreviation, e.g. 'Texas' -> 'TX'."""
    return _lookup(state)[0]


def state_fips_code(state: str) -> str:
    """Return the two-digit FIPS code, e.g. 'Texas' -> '48'."""
    return _lookup(state)[1]


def is_known_state(state: str) -> bool:
    return state in STATES


def unknown_states(states: List[str]) -> List[str]:
    return [state for state in states if state not in STATES]


def state_listing_url(state: str) -> str:
    """URL of the city-data.com page listing every city of a state."""
    return f"{CITY_DATA_BASE_URL}{state.replace(' ', '-')}.html"


def city_detail_url(city: str, state: str) -> str:
    """URL of a city's city-data.com profile (spaces dashed, apostrophes dropped)."""
    city_slug = city.replace(" ", "-").replace("'", "")
    return f"{CITY_DATA_BASE_URL}{city_slug}-{state.replace(' ', '-')}.html"


def state_file_slug(state: str) -> str:
    """Lower-case state name without spaces, used in artifact names."""
    return state.replace(" ", "").lower()
