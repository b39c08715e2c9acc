"""
Metropolitan Statistical Area (MSA) Data Model

This module defines the SQLAlchemy ORM model for the metro areas that cities
are correlated with. Each row carries the BLS area code used to build
employment series IDs and a reference point for nearest-neighbour matching.

Model: MetropolitanArea
- name: MSA title without the " MSA" suffix, e.g. "Austin-Round Rock-Georgetown, TX"
- area_code: 5-character BLS/QCEW area code (Census CBSA code), e.g. "12420"
- latitude/longitude: WGS84 reference point in decimal degrees

Author: Market Research Project
License: AGPL-3.0
"""

from sqlalchemy import Column, Integer, Float, String
from app.db.base import Base


class MetropolitanArea(Base):
    """
    SQLAlchemy ORM model for metropolitan statistical areas.

    Rows are seeded from app/config/area_data.json and are read-only while
    the pipeline runs.

    Attributes:
        id (int): Surrogate primary key
        name (str): Unique MSA name
        area_code (str): 5-character area code
        latitude (float): Reference point latitude
        longitude (float): Reference point longitude
    """

    __tablename__ = "metro_areas"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), unique=True, nullable=False, index=True)
    area_code = Column(String(5), nullable=False)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
