"""
@file database.py
@brief SQLAlchemy database engine and session configuration

@details
This module provides centralized database connection management.
Configures the engine, session factory, and dependency injection
for FastAPI routes. The same database holds the reference tables
(metro areas, city coordinates) and the generated report files.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0

@see models.generated_file for the artifact table
@see db.seed for database initialization
"""

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from app.core.config import DATABASE_URL

## @brief SQLAlchemy engine instance
engine = create_engine(DATABASE_URL, pool_pre_ping=True)

## @brief Session factory for creating database sessions
## Configured with autocommit=False and autoflush=False for explicit transaction control
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    @brief FastAPI dependency for database session injection

    @details
    Provides a database session for a single request lifecycle and closes it
    afterwards. Returns 503 Service Unavailable if the database cannot be
    reached.

    @return Generator yielding a SQLAlchemy Session instance

    @throws HTTPException with status_code=503 if database connection fails

    @code{.python}
    @router.get("/files")
    def list_files(db: Session = Depends(get_db)):
        return ArtifactStore(db).list()
    @endcode
    """
    from fastapi import HTTPException
    from sqlalchemy.exc import OperationalError

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except OperationalError:
        db.close()
        raise HTTPException(
            status_code=503,
            detail="Database connection unavailable. System is in maintenance mode."
        )

    try:
        yield db
    finally:
        db.close()
