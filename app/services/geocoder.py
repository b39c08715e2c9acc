"""
@file geocoder.py
@brief Google Geocoding API adapter

@details
Resolves a free-text place name ("Austin, TX") to a (latitude, longitude)
pair. Any failure (transport error, non-OK API status, empty result set,
missing coordinates) is logged and reported as None so callers can drop the
city from metro correlation without aborting the run.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see services.metro_resolver for the caller
"""

import logging
from typing import Optional, Tuple

import requests

from app.core.config import REQUEST_TIMEOUT
from app.etl.fetch import get_session

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

Coordinates = Tuple[float, float]


class GoogleGeocoder:
    """
    @brief Thin client for the Google Geocoding REST endpoint
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or get_session()

    def geocode(self, place: str, api_key: str) -> Optional[Coordinates]:
        """
        @brief Geocode one place name

        @param place Free-text place name
        @param api_key Google Maps API key
        @return (lat, lon) of the first result, or None
        """
        try:
            response = self.session.get(
                GEOCODE_URL,
                params={"address": place, "key": api_key},
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Geocoding request for {place!r} failed: {e}")
            return None

        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            logger.warning(f"No geocoding result for {place!r} (status={status})")
            return None

        location = (results[0].get("geometry") or {}).get("location") or {}
        lat, lng = location.get("lat"), location.get("lng")
        if lat is None or lng is None:
            logger.warning(f"Geocoding result for {place!r} has no coordinates")
            return None

        return (float(lat), float(lng))


def get_city_lat_lng(city_name: str, api_key: str) -> Optional[Coordinates]:
    """Geocode with a default client."""
    return GoogleGeocoder().geocode(city_name, api_key)
