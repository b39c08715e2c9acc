"""
@file reference_data.py
@brief Metro-area and city reference data for a pipeline run

@details
Loads the two static lookup tables once at the start of a run:
- metro areas, each with a BLS area code and coordinates
- cities with known coordinates, used to avoid geocoding

The city table is wrapped in a CoordinateCache. Cities geocoded during the run
are added to that object only; nothing is written back to the database, and a
new run starts from the stored table again.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see models.msa for the metro_areas table
@see models.city for the city_references table
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ReferenceDataError
from app.models.city import CityReference
from app.models.msa import MetropolitanArea

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


@dataclass(frozen=True)
class MetroArea:
    name: str
    area_code: str
    coordinates: Optional[Coordinates]


class CoordinateCache:
    """
    @brief Run-scoped name -> (lat, lon) cache

    @details
    Seeded from the city reference table and augmented with geocoder hits.
    A pipeline run owns exactly one instance.
    """

    def __init__(self, entries: Optional[Dict[str, Coordinates]] = None):
        self._entries: Dict[str, Coordinates] = dict(entries or {})

    def get(self, name: str) -> Optional[Coordinates]:
        return self._entries.get(name)

    def put(self, name: str, coordinates: Coordinates) -> None:
        lat, lon = coordinates
        self._entries[name] = (float(lat), float(lon))

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


def _coordinates(latitude, longitude) -> Optional[Coordinates]:
    if latitude is None or longitude is None:
        return None
    return (float(latitude), float(longitude))


def load_area_data(db: Session) -> Dict[str, MetroArea]:
    """
    @brief Load every metro area, ordered by name

    @throws ReferenceDataError if the table cannot be read
    """
    try:
        rows = db.query(MetropolitanArea).order_by(MetropolitanArea.name).all()
    except SQLAlchemyError as e:
        raise ReferenceDataError(f"Could not load metro areas: {e}") from e

    return {
        row.name: MetroArea(
            name=row.name,
            area_code=row.area_code,
            coordinates=_coordinates(row.latitude, row.longitude),
        )
        for row in rows
    }


def load_city_data(db: Session) -> CoordinateCache:
    """
    @brief Load known city coordinates into a fresh cache

    @throws ReferenceDataError if the table cannot be read
    """
    try:
        rows = db.query(CityReference).all()
    except SQLAlchemyError as e:
        raise ReferenceDataError(f"Could not load city coordinates: {e}") from e

    cache = CoordinateCache()
    for row in rows:
        coordinates = _coordinates(row.latitude, row.longitude)
        if coordinates is not None:
            cache.put(row.name, coordinates)
    return cache


def load_reference_data(db: Session) -> Tuple[Dict[str, MetroArea], CoordinateCache]:
    metro_areas = load_area_data(db)
    city_cache = load_city_data(db)
    logger.info(
        f"Loaded {len(metro_areas)} metro areas and {len(city_cache)} city coordinates"
    )
    return metro_areas, city_cache
