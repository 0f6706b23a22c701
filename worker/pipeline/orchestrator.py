"""Analysis pipeline orchestration.

One analysis is: capture the page, run the visual, structure and trust
calls concurrently, synthesize over their combined results, and assemble
the report. A comparison runs two analyses concurrently under the same
campaign context and adds a synthesis over both reports' dimensions.

Any failure aborts the whole run. Nothing here persists; callers save the
result only after it is returned.
"""

import time
from collections import Counter
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from api.config import Settings
from api.exceptions import AnalysisError, PageGradeError
from api.metrics import (
    record_analysis_completed,
    record_analysis_started,
    record_stage_duration,
)
from worker.analysis.analyzer import DimensionAnalyzer, get_analyzer
from worker.capture.browser import PageCapturer, get_capturer
from worker.capture.url import validate_url
from worker.pipeline.concurrency import gather_or_abort
from worker.reports.builder import ReportBuilder
from worker.reports.contract import (
    CampaignContext,
    ComparisonReport,
    DimensionResult,
    Report,
)
from worker.scoring.dimensions import CANONICAL_ORDER

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """A finished single analysis and the screenshot it was scored from."""

    report: Report
    screenshot: bytes


@dataclass(frozen=True)
class ComparisonResult:
    """A finished comparison with screenshots keyed by component report id."""

    comparison: ComparisonReport
    screenshots: dict[str, bytes]


@contextmanager
def _timed(stage: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        record_stage_duration(stage, time.perf_counter() - start)


def check_dimension_coverage(dimensions: Sequence[DimensionResult]) -> None:
    """
    Require exactly one result per scoring axis and unique finding ids.

    Raises:
        AnalysisError: If any axis is missing or duplicated, or two findings
            share an id
    """
    counts = Counter(d.dimension_id for d in dimensions)
    missing = [d.value for d in CANONICAL_ORDER if counts[d] == 0]
    duplicated = [d.value for d in CANONICAL_ORDER if counts[d] > 1]
    finding_counts = Counter(f.id for d in dimensions for f in d.findings)
    shared_ids = [finding_id for finding_id, count in finding_counts.items() if count > 1]
    if missing or duplicated or shared_ids:
        problems = []
        if missing:
            problems.append(f"missing {', '.join(missing)}")
        if duplicated:
            problems.append(f"duplicated {', '.join(duplicated)}")
        if shared_ids:
            problems.append(f"duplicate finding id(s) {', '.join(shared_ids)}")
        raise AnalysisError("pipeline", "; ".join(problems), kind="coverage")


class AnalysisPipeline:
    """Runs capture, analysis, synthesis and report assembly."""

    def __init__(
        self,
        capturer: PageCapturer,
        analyzer: DimensionAnalyzer,
        builder: ReportBuilder | None = None,
    ):
        self.capturer = capturer
        self.analyzer = analyzer
        self.builder = builder or ReportBuilder()

    async def _analyze(self, url: str, context: CampaignContext) -> PipelineResult:
        log = logger.bind(url=url)

        with _timed("capture"):
            capture = await self.capturer.capture(url)
        log.info("capture_completed", screenshot_bytes=len(capture.screenshot))

        with _timed("dimensions"):
            visual, structure, trust = await gather_or_abort(
                self.analyzer.analyze_visual(capture.screenshot, context),
                self.analyzer.analyze_structure(capture.html, capture.text, context),
                self.analyzer.analyze_trust(capture.screenshot, capture.html, context),
            )
        dimensions = [*visual, *structure, *trust]
        check_dimension_coverage(dimensions)
        log.info("dimensions_completed", dimensions=len(dimensions))

        with _timed("synthesis"):
            synthesis = await self.analyzer.synthesize(dimensions, context)
        log.info("synthesis_completed")

        report = self.builder.build_report(url, context, dimensions, synthesis)
        log.info(
            "report_built",
            report_id=report.id,
            total_score=report.total_score,
            max_total_score=report.max_total_score,
        )
        return PipelineResult(report=report, screenshot=capture.screenshot)

    async def run(self, url: str, context: CampaignContext | None = None) -> PipelineResult:
        """
        Analyze a single landing page.

        Raises:
            ValidationError: If the URL is not absolute http(s); no capture
                or analysis call is made
            CaptureError: If the page could not be captured
            AnalysisError: If any dimension call fails or returns invalid data
            SynthesisError: If the synthesis call fails
        """
        url = validate_url(url)
        context = context or CampaignContext()

        succeeded = False
        record_analysis_started()
        try:
            result = await self._analyze(url, context)
            succeeded = True
            return result
        except PageGradeError as e:
            logger.warning("pipeline_failed", mode="single", url=url, code=e.code, error=e.message)
            raise
        finally:
            record_analysis_completed("single", success=succeeded)

    async def compare(
        self,
        url_a: str,
        url_b: str,
        context: CampaignContext | None = None,
    ) -> ComparisonResult:
        """
        Analyze two landing pages concurrently and compare them.

        Both URLs are validated before anything runs. If either analysis
        fails, the other is cancelled and the failure is raised.
        """
        url_a = validate_url(url_a)
        url_b = validate_url(url_b, field="comparison_url")
        context = context or CampaignContext()

        succeeded = False
        record_analysis_started()
        try:
            result_a, result_b = await gather_or_abort(
                self._analyze(url_a, context),
                self._analyze(url_b, context),
            )

            union = [*result_a.report.dimensions, *result_b.report.dimensions]
            with _timed("comparison_synthesis"):
                comparison_synthesis = await self.analyzer.synthesize(union, context)
            logger.info("comparison_synthesis_completed", url_a=url_a, url_b=url_b)

            comparison = self.builder.build_comparison(
                result_a.report, result_b.report, comparison_synthesis
            )
            succeeded = True
        except PageGradeError as e:
            logger.warning(
                "pipeline_failed",
                mode="comparison",
                url_a=url_a,
                url_b=url_b,
                code=e.code,
                error=e.message,
            )
            raise
        finally:
            record_analysis_completed("comparison", success=succeeded)

        return ComparisonResult(
            comparison=comparison,
            screenshots={
                comparison.report_a.id: result_a.screenshot,
                comparison.report_b.id: result_b.screenshot,
            },
        )


def get_pipeline(settings: Settings) -> AnalysisPipeline:
    """Build the pipeline with the configured capturer and analyzer."""
    return AnalysisPipeline(
        capturer=get_capturer(
            timeout_ms=settings.capture_timeout_ms,
            viewport_width=settings.capture_viewport_width,
            viewport_height=settings.capture_viewport_height,
            full_page=settings.capture_full_page,
        ),
        analyzer=get_analyzer(settings),
    )
