"""Tests for the analysis endpoint."""

import pytest
from httpx import AsyncClient

from api.exceptions import AnalysisError, CaptureError
from api.schemas.analyze import AnalyzeRequest
from worker.reports.storage import ReportStorage

from tests.fixtures import FakeAnalyzer, FakeCapturer


class TestAnalyzeRequest:
    """Tests for AnalyzeRequest schema."""

    def test_camel_case_aliases(self) -> None:
        request = AnalyzeRequest.model_validate(
            {
                "url": "https://a.example.com",
                "comparisonUrl": "https://b.example.com",
                "trafficSource": "Google Ads",
            }
        )
        assert request.comparison_url == "https://b.example.com"
        assert request.campaign_context().traffic_source == "Google Ads"

    def test_snake_case_accepted(self) -> None:
        request = AnalyzeRequest.model_validate(
            {"url": "https://a.example.com", "campaign_goal": "Trials"}
        )
        assert request.campaign_goal == "Trials"

    def test_blank_fields_are_absent(self) -> None:
        request = AnalyzeRequest(url="https://a.example.com", comparison_url="  ", target_audience="")
        assert request.comparison_url is None
        assert request.campaign_context().is_empty


@pytest.mark.asyncio
async def test_analyze_single(client: AsyncClient, storage: ReportStorage) -> None:
    """A single analysis is returned and stored with its screenshot."""
    response = await client.post(
        "/v1/analyze",
        json={"url": "https://example.com", "trafficSource": "Newsletter"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["kind"] == "single"
    report = body["data"]
    assert report["url"] == "https://example.com"
    assert report["campaign_context"]["traffic_source"] == "Newsletter"
    assert len(report["dimensions"]) == 8
    assert report["max_total_score"] == 100

    assert storage.load(report["id"]) is not None
    assert storage.load_screenshot(report["id"]) is not None


@pytest.mark.asyncio
async def test_analyze_comparison(client: AsyncClient, storage: ReportStorage) -> None:
    """A comparison URL switches to A/B mode."""
    response = await client.post(
        "/v1/analyze",
        json={"url": "https://a.example.com", "comparisonUrl": "https://b.example.com"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["kind"] == "comparison"
    data = body["data"]
    assert data["report_a"]["comparison_url"] == "https://b.example.com"
    assert data["report_b"]["comparison_url"] == "https://a.example.com"
    assert data["comparison"]["overview"]

    entries = storage.list_reports()
    assert [e.id for e in entries] == [data["id"]]
    assert storage.load_screenshot(data["report_a"]["id"]) is not None
    assert storage.load_screenshot(data["report_b"]["id"]) is not None


@pytest.mark.asyncio
async def test_analyze_rejects_bad_scheme(
    client: AsyncClient, fake_capturer: FakeCapturer, storage: ReportStorage
) -> None:
    """Non-http(s) URLs are rejected before anything runs."""
    response = await client.post("/v1/analyze", json={"url": "ftp://example.com"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert error["details"] == {"field": "url"}
    assert fake_capturer.urls == []
    assert storage.list_reports() == []


@pytest.mark.asyncio
async def test_analyze_stage_failure_stores_nothing(
    client: AsyncClient,
    fake_analyzer: FakeAnalyzer,
    storage: ReportStorage,
) -> None:
    """A failed analyzer call fails the request and persists nothing."""
    fake_analyzer.errors["trust"] = AnalysisError("trust", "HTTP 500 from gemini", kind="api_error")

    response = await client.post("/v1/analyze", json={"url": "https://example.com"})

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["code"] == "analysis_error"
    assert error["details"] == {"stage": "trust", "kind": "api_error"}
    assert storage.list_reports() == []


@pytest.mark.asyncio
async def test_comparison_one_side_failure_stores_nothing(
    client: AsyncClient,
    fake_capturer: FakeCapturer,
    storage: ReportStorage,
) -> None:
    """When one side of a comparison fails, neither report nor any screenshot is kept."""
    fake_capturer.errors["https://b.example.com"] = CaptureError.network("https://b.example.com")

    response = await client.post(
        "/v1/analyze",
        json={"url": "https://a.example.com", "comparisonUrl": "https://b.example.com"},
    )

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "capture_network_error"
    assert storage.list_reports() == []
    screenshots = storage.screenshots_dir
    assert not screenshots.exists() or list(screenshots.iterdir()) == []


@pytest.mark.asyncio
async def test_analyze_capture_timeout(
    client: AsyncClient,
    fake_capturer: FakeCapturer,
    storage: ReportStorage,
) -> None:
    """Capture timeouts map to 504."""
    fake_capturer.errors["https://slow.example.com"] = CaptureError.timeout(
        "https://slow.example.com", 30000
    )

    response = await client.post("/v1/analyze", json={"url": "https://slow.example.com"})

    assert response.status_code == 504
    assert response.json()["error"]["code"] == "capture_timeout"
    assert storage.list_reports() == []
