"""Command-line entrypoint for running analyses outside the API.

Usage:
    python -m worker.main analyze https://example.com [--compare https://other.com]
    python -m worker.main list
"""

import argparse
import asyncio
import json
import sys

import structlog

from api.config import get_settings
from api.exceptions import PageGradeError
from api.logging import setup_logging
from worker.pipeline.orchestrator import get_pipeline
from worker.reports.contract import CampaignContext, ComparisonReport, Report
from worker.reports.storage import ReportStorage
from worker.scoring.aggregator import ScoreTotals, category_scores
from worker.scoring.head_to_head import comparison_verdict
from worker.scoring.prioritizer import DEFAULT_TOP_CRITICAL, top_critical

logger = structlog.get_logger(__name__)


def _score(totals: ScoreTotals) -> str:
    return f"{totals.total_score:g}/{totals.max_total_score:g} ({totals.band.value})"


def format_report(report: Report, top: int = DEFAULT_TOP_CRITICAL) -> list[str]:
    """Summary lines for one report."""
    lines = [
        f"URL:      {report.url}",
        f"Report:   {report.id}",
        f"Score:    {_score(report.totals)}",
    ]
    for category, totals in category_scores(report.dimensions).items():
        lines.append(f"  {category.value:<11} {_score(totals)}")

    critical = top_critical(report.dimensions, top)
    if critical:
        lines.append("")
        lines.append(f"Top {len(critical)} fixes:")
        for item in critical:
            finding = item.finding
            lines.append(
                f"  {item.rank}. [{finding.priority or '--'}] {item.dimension_id.value} "
                f"{finding.name} ({finding.score:g}/{finding.max_score:g})"
            )
            if finding.suggested_fix:
                lines.append(f"     -> {finding.suggested_fix}")

    if report.synthesis.overview:
        lines.append("")
        lines.append(report.synthesis.overview)
    return lines


def format_comparison(comparison: ComparisonReport, top: int = DEFAULT_TOP_CRITICAL) -> list[str]:
    """Summary lines for a comparison, each side followed by the verdict."""
    verdict = comparison_verdict(comparison)
    lines = [f"Comparison: {comparison.id}", "", "[A]"]
    lines.extend(format_report(comparison.report_a, top))
    lines.extend(["", "[B]"])
    lines.extend(format_report(comparison.report_b, top))
    lines.append("")
    if verdict.is_tie:
        lines.append(f"Verdict: tie at {verdict.totals_a.total_score:g}")
    else:
        lines.append(
            f"Verdict: {verdict.winner} wins "
            f"({verdict.winner_url}) by {verdict.margin:g}"
        )
    wins = verdict.dimension_wins
    lines.append(f"Dimensions won: A {wins['A']}, B {wins['B']}, tied {wins['tie']}")
    return lines


async def run_analyze(args: argparse.Namespace) -> int:
    """Run the pipeline for one URL or a comparison and print the result."""
    settings = get_settings()
    pipeline = get_pipeline(settings)
    storage = ReportStorage(settings.data_dir)
    context = CampaignContext(
        traffic_source=args.traffic_source,
        campaign_goal=args.campaign_goal,
        target_audience=args.target_audience,
    )

    if args.compare:
        result = await pipeline.compare(args.url, args.compare, context)
        if not args.no_save:
            await asyncio.to_thread(storage.save_comparison, result.comparison, result.screenshots)
        payload = result.comparison.to_dict()
        lines = format_comparison(result.comparison, args.top)
    else:
        single = await pipeline.run(args.url, context)
        if not args.no_save:
            await asyncio.to_thread(storage.save_report, single.report, single.screenshot)
        payload = single.report.to_dict()
        lines = format_report(single.report, args.top)

    if args.json:
        print(json.dumps(payload, indent=2))
    else:
        print("\n".join(lines))
    return 0


def run_list(_args: argparse.Namespace) -> int:
    """Print stored report metadata, newest first."""
    storage = ReportStorage(get_settings().data_dir)
    entries = storage.list_reports()
    if not entries:
        print("No reports stored.")
        return 0
    for entry in entries:
        target = entry.url if not entry.comparison_url else f"{entry.url} vs {entry.comparison_url}"
        print(
            f"{entry.created_at.isoformat()}  {entry.id}  "
            f"{entry.total_score:g}/{entry.max_total_score:g}  {entry.kind.value:<10}  {target}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Landing page analysis")
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="Analyze a landing page")
    analyze.add_argument("url", help="Page to analyze (http/https)")
    analyze.add_argument("--compare", metavar="URL", help="Second page for an A/B comparison")
    analyze.add_argument("--traffic-source", help="Campaign traffic source")
    analyze.add_argument("--campaign-goal", help="Campaign goal")
    analyze.add_argument("--target-audience", help="Campaign target audience")
    analyze.add_argument("--no-save", action="store_true", help="Do not persist the report")
    analyze.add_argument(
        "--top", type=int, default=DEFAULT_TOP_CRITICAL, help="Number of top fixes to show"
    )
    analyze.add_argument("--json", action="store_true", help="Print the full report as JSON")

    commands.add_parser("list", help="List stored reports")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the selected command."""
    setup_logging(stream=sys.stderr)
    args = build_parser().parse_args(argv)

    try:
        if args.command == "analyze":
            return asyncio.run(run_analyze(args))
        return run_list(args)
    except PageGradeError as e:
        logger.error("command_failed", command=args.command, code=e.code, error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
