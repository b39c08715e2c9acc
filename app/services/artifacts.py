"""
@file artifacts.py
@brief Artifact store for generated report files

@details
The pipeline only needs persist(); the API uses list() and get_by_name() to
serve the file listing and downloads. Content is stored as raw bytes so a
download returns exactly what was persisted.

Write failures are hard failures: they roll back the session and raise
ArtifactStoreError, which aborts the pipeline run.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see models.generated_file for the table definition
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ArtifactNotFoundError, ArtifactStoreError
from app.models.generated_file import GeneratedFile

logger = logging.getLogger(__name__)


def display_type(content_type: str) -> str:
    """'application/json' -> 'JSON'"""
    return content_type.split("/")[-1].upper()


@dataclass
class ArtifactDescriptor:
    name: str
    type: str
    size: int
    created: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "created": self.created.isoformat(),
        }


@dataclass
class StoredArtifact:
    filename: str
    content_type: str
    content: bytes


class ArtifactStore:
    """
    @brief Generated files persisted in the generated_files table
    """

    def __init__(self, db: Session):
        self.db = db

    def persist(
        self,
        name: str,
        content: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> ArtifactDescriptor:
        """
        @brief Store one artifact

        @param name Artifact file name
        @param content Raw bytes
        @param content_type MIME type served on download
        @param metadata Free-form descriptor
        @return Descriptor of the stored file
        @throws ArtifactStoreError if the write fails
        """
        record = GeneratedFile(
            filename=name,
            content_type=content_type,
            content=content,
            size=len(content),
            file_metadata=metadata or {},
        )
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Could not save {name}: {e}")
            raise ArtifactStoreError(f"Could not save {name}: {e}") from e

        logger.info(f"Saved {name} ({record.size} bytes)")
        return ArtifactDescriptor(
            name=record.filename,
            type=display_type(record.content_type),
            size=record.size,
            created=record.created_at,
        )

    def list(self) -> List[Dict[str, Any]]:
        """
        @brief All artifacts, newest first, without their content
        """
        rows = (
            self.db.query(
                GeneratedFile.id,
                GeneratedFile.filename,
                GeneratedFile.size,
                GeneratedFile.created_at,
                GeneratedFile.content_type,
            )
            .order_by(GeneratedFile.created_at.desc(), GeneratedFile.id.desc())
            .all()
        )
        return [
            {
                "name": row.filename,
                "size": row.size,
                "created": row.created_at.isoformat(),
                "type": display_type(row.content_type),
                "id": str(row.id),
            }
            for row in rows
        ]

    def get_by_name(self, filename: str) -> StoredArtifact:
        """
        @brief Fetch an artifact's content

        @throws ArtifactNotFoundError if no artifact has that name
        """
        record = (
            self.db.query(GeneratedFile)
            .filter(GeneratedFile.filename == filename)
            .order_by(GeneratedFile.id.desc())
            .first()
        )
        if record is None:
            raise ArtifactNotFoundError(filename)

        return StoredArtifact(
            filename=record.filename,
            content_type=record.content_type,
            content=bytes(record.content),
        )
