"""
Generated File Data Model

Stores the artifacts produced by pipeline runs: the raw JSON roster of each
state and the Excel market research report.

Key Attributes:
- filename: artifact name, includes state, population threshold and timestamp
- content_type: MIME type returned on download
- content: raw bytes, returned unchanged on download
- file_metadata: JSON object, e.g. {"state": "Texas", "type": "excel-report"}

Author: Market Research Project
License: AGPL-3.0
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, JSON, LargeBinary, String
from app.db.base import Base


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GeneratedFile(Base):
    """
    SQLAlchemy ORM model for generated report files.

    Rows are written once and never updated.

    Attributes:
        id (int): Primary key
        filename (str): Artifact name
        content_type (str): MIME type
        content (bytes): File content
        size (int): Content length in bytes
        file_metadata (dict): Free-form descriptor (state, artifact type)
        created_at (datetime): UTC creation time
    """

    __tablename__ = "generated_files"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False, index=True)
    content_type = Column(String(255), nullable=False)
    content = Column(LargeBinary, nullable=False)
    size = Column(Integer, nullable=False, default=0)

    # "metadata" is reserved on declarative classes
    file_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)
