"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest
import structlog
from httpx import ASGITransport, AsyncClient

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ["ANALYSIS_PROVIDER"] = "mock"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="pagegrade-test-")
os.environ.pop("SENTRY_DSN", None)

from api.config import get_settings  # noqa: E402

get_settings.cache_clear()  # Use test env, not stale or .env values

from tests.fixtures import FakeAnalyzer, FakeCapturer  # noqa: E402
from worker.pipeline.orchestrator import AnalysisPipeline  # noqa: E402
from worker.reports.storage import ReportStorage  # noqa: E402


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging config bound to a test's captured streams."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def storage(tmp_path) -> ReportStorage:
    """Report storage rooted in a per-test directory."""
    return ReportStorage(tmp_path / "data")


@pytest.fixture
def fake_capturer() -> FakeCapturer:
    return FakeCapturer()


@pytest.fixture
def fake_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def pipeline(fake_capturer: FakeCapturer, fake_analyzer: FakeAnalyzer) -> AnalysisPipeline:
    """Pipeline wired to in-memory collaborators."""
    return AnalysisPipeline(capturer=fake_capturer, analyzer=fake_analyzer)


@pytest.fixture
async def client(
    storage: ReportStorage,
    pipeline: AnalysisPipeline,
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with storage and pipeline overridden."""
    from api.deps import get_analysis_pipeline, get_storage
    from api.main import app

    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
