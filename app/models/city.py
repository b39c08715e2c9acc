"""
City Reference Data Model

Known city coordinates, keyed by the "City, ST" label the pipeline geocodes.
Serves as a persistent geocoding cache seeded from app/config/city_data.json.

Author: Market Research Project
License: AGPL-3.0
"""

from sqlalchemy import Column, Integer, Float, String
from app.db.base import Base


class CityReference(Base):
    """
    SQLAlchemy ORM model for cities with known coordinates.

    Attributes:
        id (int): Surrogate primary key
        name (str): Unique "City, ST" label
        latitude (float): WGS84 latitude
        longitude (float): WGS84 longitude
    """

    __tablename__ = "city_references"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
