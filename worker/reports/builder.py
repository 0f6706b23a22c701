"""Report builder for combining analysis results.

Assembles dimension results and synthesis into a complete report, and two
reports plus a comparison synthesis into a comparison report.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import uuid4

from worker.reports.contract import (
    CampaignContext,
    ComparisonReport,
    DimensionResult,
    Report,
    Synthesis,
)


def _new_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ReportBuilderConfig:
    """Identity and clock sources for report assembly."""

    id_factory: Callable[[], str] = _new_id
    clock: Callable[[], datetime] = _utc_now


class ReportBuilder:
    """Assembles analysis results into reports."""

    def __init__(self, config: ReportBuilderConfig | None = None):
        self.config = config or ReportBuilderConfig()

    def build_report(
        self,
        url: str,
        context: CampaignContext | None,
        dimensions: Sequence[DimensionResult],
        synthesis: Synthesis,
    ) -> Report:
        """
        Assemble a single-page report.

        Args:
            url: Analyzed URL
            context: Campaign context the analysis ran under
            dimensions: Dimension results in the order they were produced
            synthesis: Executive summary

        Returns:
            Report with a fresh id and the current UTC timestamp
        """
        return Report(
            id=self.config.id_factory(),
            url=url,
            campaign_context=context or CampaignContext(),
            dimensions=tuple(dimensions),
            synthesis=synthesis,
            created_at=self.config.clock(),
        )

    def build_comparison(
        self,
        report_a: Report,
        report_b: Report,
        comparison: Synthesis,
    ) -> ComparisonReport:
        """Wrap two reports, each annotated with the other's URL."""
        return ComparisonReport(
            id=self.config.id_factory(),
            report_a=replace(report_a, comparison_url=report_b.url),
            report_b=replace(report_b, comparison_url=report_a.url),
            comparison=comparison,
            created_at=self.config.clock(),
        )
