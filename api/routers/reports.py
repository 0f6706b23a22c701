"""Stored report endpoints: listing, retrieval, action plans and screenshots."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Query, Response

from api.deps import StorageDep
from api.exceptions import NotFoundError, PageGradeError
from api.schemas.analyze import ReportSummary
from api.schemas.responses import SuccessResponse
from worker.reports.contract import AnyReport, ComparisonReport, Report, ReportKind
from worker.reports.storage import ReportStorage
from worker.scoring.aggregator import category_scores
from worker.scoring.head_to_head import comparison_verdict
from worker.scoring.prioritizer import (
    DEFAULT_TOP_CRITICAL,
    build_action_plan,
    group_dimensions,
    top_critical,
)

router = APIRouter(prefix="/reports", tags=["reports"])
screenshots_router = APIRouter(prefix="/screenshots", tags=["reports"])

# Screenshots never change once stored
SCREENSHOT_CACHE_CONTROL = "public, max-age=31536000, immutable"

TopQuery = Annotated[
    int,
    Query(ge=0, le=50, description="Number of top critical findings to include"),
]


async def _load_report(storage: ReportStorage, report_id: str) -> AnyReport:
    report = await asyncio.to_thread(storage.load, report_id)
    if report is None:
        raise NotFoundError("Report", report_id)
    return report


def report_plan(report: Report, top: int = DEFAULT_TOP_CRITICAL) -> dict:
    """Prioritized remediation view of a single report."""
    return {
        "report_id": report.id,
        "url": report.url,
        "totals": report.totals.to_dict(),
        "categories": {
            category.value: totals.to_dict()
            for category, totals in category_scores(report.dimensions).items()
        },
        "dimension_groups": {
            category.value: [d.dimension_id.value for d in dimensions]
            for category, dimensions in group_dimensions(report.dimensions).items()
        },
        "top_critical": [f.to_dict() for f in top_critical(report.dimensions, top)],
        "action_plan": build_action_plan(report.dimensions).to_dict(),
    }


@router.get(
    "",
    response_model=SuccessResponse[list[ReportSummary]],
    summary="List stored reports",
)
async def list_reports(storage: StorageDep) -> SuccessResponse[list[ReportSummary]]:
    """List stored reports, newest first. Comparisons show A's URL with B as comparison."""
    entries = await asyncio.to_thread(storage.list_reports)
    return SuccessResponse(
        data=[ReportSummary.from_metadata(m) for m in entries],
        meta={"total": len(entries)},
    )


@router.get(
    "/{report_id}",
    response_model=SuccessResponse[dict],
    summary="Get full report",
)
async def get_report(report_id: str, storage: StorageDep) -> SuccessResponse[dict]:
    """Get a single or comparison report."""
    report = await _load_report(storage, report_id)
    kind = ReportKind.COMPARISON if isinstance(report, ComparisonReport) else ReportKind.SINGLE
    return SuccessResponse(
        data=report.to_dict(),
        meta={"report_id": report.id, "kind": kind.value},
    )


@router.get(
    "/{report_id}/action-plan",
    response_model=SuccessResponse[dict],
    summary="Get prioritized remediation plan",
)
async def get_action_plan(
    report_id: str,
    storage: StorageDep,
    top: TopQuery = DEFAULT_TOP_CRITICAL,
) -> SuccessResponse[dict]:
    """
    Get the remediation plan for a report.

    Findings are tiered into Immediate, Soon and When possible, ranked
    globally, and the top critical ones are listed separately. Comparisons
    return one plan per side plus the head-to-head verdict.
    """
    report = await _load_report(storage, report_id)

    if isinstance(report, ComparisonReport):
        data = {
            "kind": ReportKind.COMPARISON.value,
            "report_a": report_plan(report.report_a, top),
            "report_b": report_plan(report.report_b, top),
            "head_to_head": comparison_verdict(report).to_dict(),
        }
    else:
        data = {"kind": ReportKind.SINGLE.value, **report_plan(report, top)}

    return SuccessResponse(data=data, meta={"report_id": report.id})


@router.get(
    "/{report_id}/head-to-head",
    response_model=SuccessResponse[dict],
    summary="Get comparison verdict",
)
async def get_head_to_head(report_id: str, storage: StorageDep) -> SuccessResponse[dict]:
    """Get the head-to-head verdict of a comparison report."""
    report = await _load_report(storage, report_id)
    if not isinstance(report, ComparisonReport):
        raise PageGradeError(
            "Head-to-head is only available for comparison reports",
            code="not_a_comparison",
            status_code=422,
            details={"id": report_id},
        )
    return SuccessResponse(data=comparison_verdict(report).to_dict(), meta={"report_id": report.id})


@screenshots_router.get(
    "/{screenshot_id}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
    summary="Get page screenshot",
)
async def get_screenshot(screenshot_id: str, storage: StorageDep) -> Response:
    """Get the full-page screenshot captured for a report."""
    image = await asyncio.to_thread(storage.load_screenshot, screenshot_id)
    if image is None:
        raise NotFoundError("Screenshot", screenshot_id)
    return Response(
        content=image,
        media_type="image/png",
        headers={"Cache-Control": SCREENSHOT_CACHE_CONTROL},
    )
