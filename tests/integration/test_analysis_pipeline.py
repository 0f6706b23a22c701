"""Integration tests for the analysis pipeline.

Runs the real analyzer, parser, aggregator, builder and storage against
the mock provider. Only the browser is replaced.
"""

import json

import pytest

from api.exceptions import AnalysisError, SynthesisError
from worker.analysis.analyzer import ProviderAnalyzer
from worker.analysis.providers import MockProvider
from worker.pipeline.orchestrator import AnalysisPipeline
from worker.reports.contract import CampaignContext, ComparisonReport, Report
from worker.reports.storage import ReportStorage
from worker.scoring.head_to_head import comparison_verdict
from worker.scoring.prioritizer import build_action_plan

from tests.fixtures import FakeCapturer

pytestmark = pytest.mark.integration

# Stage results are joined visual, structure, trust
JOIN_ORDER = ["A1", "A2", "A3", "A4", "B1", "B3", "B4", "B2"]


@pytest.fixture
def provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def mock_pipeline(provider: MockProvider) -> AnalysisPipeline:
    return AnalysisPipeline(capturer=FakeCapturer(), analyzer=ProviderAnalyzer(provider))


class TestSinglePipeline:
    """End-to-end single page analysis."""

    @pytest.mark.asyncio
    async def test_analyze_store_and_reload(
        self,
        mock_pipeline: AnalysisPipeline,
        provider: MockProvider,
        storage: ReportStorage,
    ) -> None:
        context = CampaignContext(traffic_source="LinkedIn", campaign_goal="Demo bookings")

        result = await mock_pipeline.run("https://example.com", context)
        report = result.report

        assert [d.dimension_id for d in report.dimensions] == JOIN_ORDER
        assert report.total_score == 60
        assert report.max_total_score == 100
        assert report.synthesis.overview

        # Three dimension calls and one synthesis call
        assert len(provider.calls) == 4
        image_counts = sorted(count for _, count in provider.calls)
        assert image_counts == [0, 0, 1, 1]
        assert all("LinkedIn" in prompt for prompt, _ in provider.calls)

        storage.save_report(report, result.screenshot)
        loaded = storage.load(report.id)

        assert isinstance(loaded, Report)
        assert loaded.to_dict() == report.to_dict()
        assert storage.load_screenshot(report.id) == result.screenshot

        plan = build_action_plan(loaded.dimensions)
        assert plan.to_dict()["total_findings"] == 8
        assert [g.tier.label for g in plan.groups] == ["Soon"]

    @pytest.mark.asyncio
    async def test_malformed_response_fails_stage(
        self,
        mock_pipeline: AnalysisPipeline,
        provider: MockProvider,
        storage: ReportStorage,
    ) -> None:
        provider.set_response("**B2 - ", "I could not analyze this page.")

        with pytest.raises(AnalysisError) as exc_info:
            await mock_pipeline.run("https://example.com")

        assert exc_info.value.details["stage"] == "trust"
        assert exc_info.value.details["kind"] == "schema"
        assert storage.list_reports() == []

    @pytest.mark.asyncio
    async def test_synthesis_failure(
        self,
        mock_pipeline: AnalysisPipeline,
        provider: MockProvider,
    ) -> None:
        provider.set_response("Here are the results", json.dumps({"strengths": []}))

        with pytest.raises(SynthesisError):
            await mock_pipeline.run("https://example.com")


class TestComparisonPipeline:
    """End-to-end A/B comparison."""

    @pytest.mark.asyncio
    async def test_compare_store_and_verdict(
        self,
        mock_pipeline: AnalysisPipeline,
        provider: MockProvider,
        storage: ReportStorage,
    ) -> None:
        result = await mock_pipeline.compare("https://a.example.com", "https://b.example.com")
        comparison = result.comparison

        # Two full analyses plus the comparison synthesis
        assert len(provider.calls) == 9
        assert comparison.report_a.comparison_url == "https://b.example.com"
        assert comparison.report_b.comparison_url == "https://a.example.com"

        storage.save_comparison(comparison, result.screenshots)
        loaded = storage.load(comparison.id)

        assert isinstance(loaded, ComparisonReport)
        verdict = comparison_verdict(loaded)
        assert verdict.is_tie
        assert verdict.margin == 0
        assert storage.load_screenshot(loaded.report_a.id) != storage.load_screenshot(
            loaded.report_b.id
        )
