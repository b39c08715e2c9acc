"""
@file metro_resolver.py
@brief Nearest metropolitan area lookup

@details
Matches a city to the metro area whose reference point is closest on the
WGS84 ellipsoid. City coordinates come from the run's CoordinateCache, or
from the geocoder on a cache miss (the hit is then cached for the rest of the
run).

Ties keep the first metro area seen while iterating the reference mapping.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import logging
import math
from typing import Dict, Optional

from pyproj import Geod

from app.services.geocoder import Coordinates, GoogleGeocoder
from app.services.reference_data import CoordinateCache, MetroArea

logger = logging.getLogger(__name__)

## @brief WGS84 ellipsoid used for distances
_GEOD = Geod(ellps="WGS84")


def geodesic_distance(origin: Coordinates, destination: Coordinates) -> float:
    """
    @brief Distance in meters between two (lat, lon) pairs
    """
    # pyproj takes lon/lat order
    _, _, distance = _GEOD.inv(origin[1], origin[0], destination[1], destination[0])
    return distance


def resolve_coordinates(
    target_city: str,
    city_cache: CoordinateCache,
    api_key: str,
    geocoder: Optional[GoogleGeocoder] = None
) -> Optional[Coordinates]:
    coordinates = city_cache.get(target_city)
    if coordinates is not None:
        return coordinates

    geocoder = geocoder or GoogleGeocoder()
    coordinates = geocoder.geocode(target_city, api_key)
    if coordinates is None:
        logger.warning(f"Could not geocode {target_city}; skipping metro area lookup")
        return None

    city_cache.put(target_city, coordinates)
    return coordinates


def closest_metro_area(
    coordinates: Coordinates,
    metro_areas: Dict[str, MetroArea]
) -> Optional[str]:
    """
    @brief Name of the metro area nearest to the coordinates, or None if no
    metro area has coordinates
    """
    closest = None
    min_distance = math.inf
    for name, area in metro_areas.items():
        if area.coordinates is None:
            continue
        distance = geodesic_distance(coordinates, area.coordinates)
        if distance < min_distance:
            min_distance = distance
            closest = name
    return closest


def find_closest_metro_area(
    target_city: str,
    city_cache: CoordinateCache,
    metro_areas: Dict[str, MetroArea],
    api_key: str,
    geocoder: Optional[GoogleGeocoder] = None
) -> Optional[str]:
    """
    @brief Resolve "City, ST" to the name of its nearest metro area

    @param target_city City label, e.g. "Round Rock, TX"
    @param city_cache Run-scoped coordinate cache, updated on geocoder hits
    @param metro_areas Metro reference table
    @param api_key Google Maps API key for cache misses
    @param geocoder Optional geocoder, defaults to the Google client
    @return Metro area name present in metro_areas, or None
    """
    try:
        coordinates = resolve_coordinates(target_city, city_cache, api_key, geocoder)
        if coordinates is None:
            return None
        return closest_metro_area(coordinates, metro_areas)
    except Exception as e:
        logger.error(f"Error finding closest metro area for {target_city}: {e}", exc_info=True)
        return None
