import pytest
from unittest.mock import patch
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from app.core.exceptions import ArtifactStoreError, ReferenceDataError
from app.core.middleware import DatabaseErrorMiddleware
from app.core.health import HealthStatus, get_system_health

# Setup mock app
app = FastAPI()
app.add_middleware(DatabaseErrorMiddleware)


@app.get("/test-db-error")
def trigger_db_error():
    raise OperationalError("SELECT 1", {}, "Mock DB Error")


@app.get("/test-store-error")
def trigger_store_error():
    raise ArtifactStoreError("Could not save texas.json")


@app.get("/test-reference-error")
def trigger_reference_error():
    raise ReferenceDataError("Could not load metro areas")


@app.get("/test-generic-error")
def trigger_generic_error():
    raise Exception("Boom")


client = TestClient(app)


def test_database_error_middleware():
    """Test that middleware catches DB errors and returns 503"""
    response = client.get("/test-db-error")
    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "Service unavailable"
    assert "Database connection failed" in data["message"]


@pytest.mark.parametrize("path", ["/test-store-error", "/test-reference-error"])
def test_storage_errors_return_503(path):
    """Test that pipeline storage failures escaping a route map to 503"""
    assert client.get(path).status_code == 503


def test_generic_error_middleware():
    """Test that middleware catches generic errors and returns 500"""
    response = client.get("/test-generic-error")
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal server error"


@pytest.mark.asyncio
@patch("app.core.health.check_database")
@patch("app.core.health.check_cache")
async def test_health_check_unhealthy(mock_cache, mock_db):
    """Test health check when DB is down"""
    mock_db.return_value = {"status": HealthStatus.UNHEALTHY, "component": "database"}
    mock_cache.return_value = {"status": HealthStatus.HEALTHY, "component": "cache"}

    health = await get_system_health()

    assert health["status"] == HealthStatus.UNHEALTHY
    assert "maintenance" in health["message"]


@pytest.mark.asyncio
@patch("app.core.health.check_reference_data")
@patch("app.core.health.check_database")
@patch("app.core.health.check_cache")
async def test_health_check_degraded_without_cache(mock_cache, mock_db, mock_reference):
    """Test health check when only Redis is down"""
    mock_db.return_value = {"status": HealthStatus.HEALTHY, "component": "database"}
    mock_cache.return_value = {"status": HealthStatus.DEGRADED, "component": "cache"}
    mock_reference.return_value = {"status": HealthStatus.HEALTHY, "component": "reference_data"}

    health = await get_system_health()

    assert health["status"] == HealthStatus.DEGRADED


@pytest.mark.asyncio
async def test_check_cache_without_client():
    from app.core.health import check_cache
    from app.core.cache import cache

    with patch.object(cache, "client", None):
        result = await check_cache()

    assert result["status"] == HealthStatus.DEGRADED


@pytest.mark.asyncio
@patch("app.core.health.check_reference_data")
@patch("app.core.health.check_database")
@patch("app.core.health.check_cache")
async def test_health_check_degraded_without_reference_data(mock_cache, mock_db, mock_reference):
    """Test that empty reference tables degrade the system"""
    mock_db.return_value = {"status": HealthStatus.HEALTHY, "component": "database"}
    mock_cache.return_value = {"status": HealthStatus.HEALTHY, "component": "cache"}
    mock_reference.return_value = {"status": HealthStatus.DEGRADED, "component": "reference_data"}

    health = await get_system_health()

    assert health["status"] == HealthStatus.DEGRADED
    assert "reference_data" in health["message"]


@pytest.mark.asyncio
async def test_check_reference_data_counts(seeded_db_session, test_engine):
    from sqlalchemy.orm import sessionmaker
    from app.core.health import check_reference_data

    with patch("app.core.health.SessionLocal", sessionmaker(bind=test_engine)):
        result = await check_reference_data()

    assert result["status"] == HealthStatus.HEALTHY
    assert result["metro_areas"] == 3
    assert result["cities"] == 2


@pytest.mark.asyncio
async def test_check_reference_data_empty(test_engine):
    from sqlalchemy.orm import sessionmaker
    from app.core.health import check_reference_data

    with patch("app.core.health.SessionLocal", sessionmaker(bind=test_engine)):
        result = await check_reference_data()

    assert result["status"] == HealthStatus.DEGRADED
