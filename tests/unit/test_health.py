"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from api.config import Settings, get_settings
from api.routers.health import (
    DependencyCheck,
    HealthResponse,
    HealthStatus,
    overall_status,
    probe_provider,
    probe_storage,
)
from worker.reports.storage import ReportStorage


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health endpoint returns healthy status."""
    response = await client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_api_root_returns_info(client: AsyncClient) -> None:
    """Test API root endpoint returns API info."""
    response = await client.get("/api/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "PageGrade Landing Page Analyzer API"
    assert data["version"] == "0.1.0"
    assert data["env"] == "test"


@pytest.mark.asyncio
async def test_v1_root(client: AsyncClient) -> None:
    """Test v1 API root endpoint."""
    response = await client.get("/v1/")

    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "1"
    assert data["status"] == "active"


@pytest.mark.asyncio
async def test_ready_endpoint_structure(client: AsyncClient) -> None:
    """Test ready endpoint reports storage and provider checks."""
    response = await client.get("/api/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data
    assert data["provider"] == "mock"
    assert data["checks"]["storage"]["status"] == "healthy"
    assert data["checks"]["analysis_provider"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_ready_degraded_without_provider_key(client: AsyncClient) -> None:
    """A provider without credentials degrades readiness."""
    from api.main import app

    app.dependency_overrides[get_settings] = lambda: Settings(
        analysis_provider="gemini", gemini_api_key=None
    )
    response = await client.get("/api/ready")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["analysis_provider"]["status"] == "unhealthy"
    assert "gemini" in data["checks"]["analysis_provider"]["error"]


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient) -> None:
    """Prometheus metrics are exposed."""
    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "pagegrade_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_request_id_echoed(client: AsyncClient) -> None:
    """Request ids are echoed back, or generated when absent."""
    response = await client.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = await client.get("/api/health")
    assert len(response.headers["X-Request-ID"]) == 36


class TestSchemas:
    """Tests for health response schemas."""

    def test_requires_uptime(self) -> None:
        with pytest.raises(ValidationError):
            HealthResponse(status="healthy", timestamp="2026-01-29T12:00:00Z", version="0.1.0")

    def test_optional_latency(self) -> None:
        check = DependencyCheck(status="healthy")
        assert check.latency_ms is None
        assert check.error is None


class TestProbes:
    """Tests for readiness probes and status roll-up."""

    @pytest.mark.parametrize(
        ("statuses", "expected"),
        [
            ([HealthStatus.HEALTHY, HealthStatus.HEALTHY], HealthStatus.HEALTHY),
            ([HealthStatus.HEALTHY, HealthStatus.UNHEALTHY], HealthStatus.DEGRADED),
            ([HealthStatus.UNHEALTHY, HealthStatus.UNHEALTHY], HealthStatus.UNHEALTHY),
        ],
    )
    def test_overall_status(self, statuses, expected) -> None:
        checks = {str(i): DependencyCheck(status=s) for i, s in enumerate(statuses)}
        assert overall_status(checks) == expected

    @pytest.mark.asyncio
    async def test_storage_probe_unwritable(self, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        check = await probe_storage(ReportStorage(blocker))

        assert check.status == HealthStatus.UNHEALTHY
        assert "not writable" in check.error
        assert check.latency_ms is not None

    def test_provider_probe_mock(self) -> None:
        check = probe_provider(Settings(_env_file=None, analysis_provider="mock"))
        assert check == DependencyCheck.ok()
