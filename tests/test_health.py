"""Health endpoint tests."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from falcon.asgi import App
from falcon.testing import TestClient
from psycopg_pool import PoolTimeout

from rowguard.interfaces.api.resources.health import HealthResource


class _Pool:
    """Pool stand-in whose connection() yields a mock or raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.conn = AsyncMock()

    @asynccontextmanager
    async def connection(self, timeout: float | None = None):
        if self._error is not None:
            raise self._error
        yield self.conn


def _client(pool=None) -> TestClient:
    app = App()
    health = HealthResource(pool)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    """Create test client with health endpoints."""
    return _client()


def test_health_liveness(client: TestClient) -> None:
    """GET /v1/health returns 200."""
    result = client.simulate_get("/v1/health")
    assert result.status_code == 200
    assert result.json["status"] == "ok"


def test_health_ready(client: TestClient) -> None:
    """GET /v1/health/ready returns 200."""
    result = client.simulate_get("/v1/health/ready")
    assert result.status_code == 200
    assert result.json["status"] == "ready"


def test_health_ready_checks_database() -> None:
    pool = _Pool()
    result = _client(pool).simulate_get("/v1/health/ready")
    assert result.status_code == 200
    pool.conn.execute.assert_awaited_once_with("SELECT 1")


def test_health_ready_unavailable_when_pool_times_out() -> None:
    result = _client(_Pool(PoolTimeout("no connection"))).simulate_get("/v1/health/ready")
    assert result.status_code == 503
    assert result.json["status"] == "unavailable"
