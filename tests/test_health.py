"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient

from app.core.config import HealthConfig, Settings

TEST_HEADERS = {"X-API-Key": "das_0123456789abcdef0123456789abcdef"}


@pytest.fixture
def locked_health(monkeypatch: pytest.MonkeyPatch, test_settings: Settings) -> Settings:
    """Settings that require credentials for /healthz."""
    settings = test_settings.model_copy(update={"health": HealthConfig(allow_anonymous=False)})
    monkeypatch.setattr("app.core.config._current_settings", settings)
    return settings


def test_liveness(client: TestClient) -> None:
    """
    Test liveness check without credentials.

    Args:
        client: Test client fixture
    """
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_check_sync(client: TestClient) -> None:
    """
    Test detailed health check endpoint (synchronous).

    Args:
        client: Test client fixture
    """
    response = client.get("/healthz")

    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "Data Assets API"
    assert data["version"] == "0.1.0"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_check_async(async_client: AsyncClient) -> None:
    """
    Test detailed health check endpoint (asynchronous).

    Args:
        async_client: Async test client fixture
    """
    response = await async_client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_check_response_schema(client: TestClient) -> None:
    """
    Test that health check response has correct schema.

    Args:
        client: Test client fixture
    """
    data = client.get("/healthz").json()

    required_fields = ["status", "timestamp", "service", "version"]
    for field in required_fields:
        assert field in data, f"Missing required field: {field}"

    assert isinstance(data["status"], str)
    assert isinstance(data["timestamp"], str)
    assert isinstance(data["service"], str)
    assert isinstance(data["version"], str)


def test_healthz_requires_credentials_when_locked(
    client: TestClient, locked_health: Settings
) -> None:
    """/healthz is protected once anonymous access is disabled."""
    response = client.get("/healthz")

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized"}


def test_healthz_accepts_api_key_when_locked(
    client: TestClient, locked_health: Settings
) -> None:
    """A valid API key passes the locked health check."""
    response = client.get("/healthz", headers=TEST_HEADERS)

    assert response.status_code == 200


def test_liveness_stays_open_when_locked(client: TestClient, locked_health: Settings) -> None:
    """The liveness check never requires credentials."""
    assert client.get("/health").status_code == 200
