"""Liveness, readiness and API info endpoints.

Readiness covers what an analysis needs besides the network: a writable
report store and credentials for the configured analysis provider.
"""

import asyncio
import time
from datetime import UTC, datetime
from enum import StrEnum

import structlog
from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.config import Settings
from api.deps import SettingsDep, StorageDep
from worker.reports.storage import ReportStorage

router = APIRouter(tags=["Health"])
logger = structlog.get_logger(__name__)

API_VERSION = "0.1.0"

_started_at = time.monotonic()


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class DependencyCheck(BaseModel):
    """Result of probing one dependency."""

    status: HealthStatus
    latency_ms: float | None = None
    error: str | None = None

    @classmethod
    def ok(cls, latency_ms: float | None = None) -> "DependencyCheck":
        return cls(status=HealthStatus.HEALTHY, latency_ms=latency_ms)

    @classmethod
    def failed(cls, error: str, latency_ms: float | None = None) -> "DependencyCheck":
        return cls(status=HealthStatus.UNHEALTHY, latency_ms=latency_ms, error=error)


class HealthResponse(BaseModel):
    status: HealthStatus
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str
    uptime_seconds: int


class ReadyResponse(HealthResponse):
    provider: str = Field(..., description="Configured analysis provider")
    checks: dict[str, DependencyCheck]


class ApiInfoResponse(BaseModel):
    name: str
    version: str
    env: str
    provider: str
    docs: str | None


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _uptime() -> int:
    return int(time.monotonic() - _started_at)


async def probe_storage(storage: ReportStorage) -> DependencyCheck:
    """Check that reports and screenshots can be written."""
    start = time.perf_counter()
    writable = await asyncio.to_thread(storage.is_writable)
    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    if writable:
        return DependencyCheck.ok(latency_ms)
    logger.warning("storage_check_failed", path=str(storage.base_path))
    return DependencyCheck.failed(f"Storage at {storage.base_path} is not writable", latency_ms)


def probe_provider(settings: Settings) -> DependencyCheck:
    """Check that the configured provider has its credentials. No call is made."""
    if settings.analysis_enabled:
        return DependencyCheck.ok()
    logger.warning("provider_check_failed", provider=settings.analysis_provider)
    return DependencyCheck.failed(
        f"No API key configured for provider '{settings.analysis_provider}'"
    )


def overall_status(checks: dict[str, DependencyCheck]) -> HealthStatus:
    """Healthy when every check passes, unhealthy when none do, degraded otherwise."""
    failing = sum(1 for check in checks.values() if check.status != HealthStatus.HEALTHY)
    if failing == 0:
        return HealthStatus.HEALTHY
    if failing < len(checks):
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe. Dependencies are not checked; see /ready."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=_now(),
        version=API_VERSION,
        uptime_seconds=_uptime(),
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(settings: SettingsDep, storage: StorageDep) -> ReadyResponse:
    """Readiness probe: report storage and analysis provider credentials."""
    checks = {
        "storage": await probe_storage(storage),
        "analysis_provider": probe_provider(settings),
    }
    return ReadyResponse(
        status=overall_status(checks),
        timestamp=_now(),
        version=API_VERSION,
        uptime_seconds=_uptime(),
        provider=settings.analysis_provider,
        checks=checks,
    )


@router.get("/", response_model=ApiInfoResponse)
async def root(settings: SettingsDep) -> ApiInfoResponse:
    return ApiInfoResponse(
        name="PageGrade Landing Page Analyzer API",
        version=API_VERSION,
        env=settings.env,
        provider=settings.analysis_provider,
        docs="/docs" if settings.debug else None,
    )
