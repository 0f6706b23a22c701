"""Prometheus metrics.

HTTP traffic is recorded by `MetricsMiddleware`; analysis outcomes, pipeline
stage durations and provider calls are recorded by the worker through the
`record_*` helpers. Everything is exposed at `/metrics`.
"""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "pagegrade_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "pagegrade_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
)

REQUEST_IN_PROGRESS = Gauge(
    "pagegrade_http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Error metrics
ERROR_COUNT = Counter(
    "pagegrade_errors_total",
    "Total application errors",
    ["error_type", "endpoint"],
)

# Business metrics
ANALYSES_TOTAL = Counter(
    "pagegrade_analyses_total",
    "Total landing page analyses",
    ["mode", "status"],
)

ANALYSES_IN_PROGRESS = Gauge(
    "pagegrade_analyses_in_progress",
    "Analyses currently running",
)

PIPELINE_STAGE_SECONDS = Histogram(
    "pagegrade_pipeline_stage_seconds",
    "Pipeline stage duration in seconds",
    ["stage"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 90.0, 120.0],
)

PROVIDER_CALLS_TOTAL = Counter(
    "pagegrade_provider_calls_total",
    "Total analysis provider calls",
    ["provider", "status"],
)

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def get_metrics() -> bytes:
    """Render the default registry in exposition format."""
    metrics: bytes = generate_latest()
    return metrics


def get_metrics_content_type() -> str:
    """Content type matching `get_metrics` output."""
    content_type: str = CONTENT_TYPE_LATEST
    return content_type


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count and time requests per normalized route; probes and scrapes are skipped."""

    EXCLUDE_PATHS = {"/metrics", "/api/health", "/api/ready", "/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_path(request.url.path)

        REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(response.status_code),
            ).inc()

            duration = time.perf_counter() - start_time
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)

            return response

        except Exception as e:
            ERROR_COUNT.labels(
                error_type=type(e).__name__,
                endpoint=endpoint,
            ).inc()
            raise

        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing report and screenshot ids with placeholders."""
        return _UUID_PATTERN.sub("{id}", path)


# Helper functions for recording business metrics


def record_analysis_started() -> None:
    """Record an analysis started."""
    ANALYSES_IN_PROGRESS.inc()


def record_analysis_completed(mode: str, success: bool = True) -> None:
    """Record an analysis finished, single or comparison."""
    ANALYSES_TOTAL.labels(mode=mode, status="success" if success else "failed").inc()
    ANALYSES_IN_PROGRESS.dec()


def record_stage_duration(stage: str, duration: float) -> None:
    """Record how long a pipeline stage took."""
    PIPELINE_STAGE_SECONDS.labels(stage=stage).observe(duration)


def record_provider_call(provider: str, success: bool = True) -> None:
    """Record a generation call to an analysis provider."""
    PROVIDER_CALLS_TOTAL.labels(
        provider=provider,
        status="success" if success else "failed",
    ).inc()
