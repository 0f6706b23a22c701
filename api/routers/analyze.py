"""Analysis endpoint: run the pipeline and persist the result."""

import asyncio

import structlog
from fastapi import APIRouter

from api.deps import PipelineDep, StorageDep
from api.schemas.analyze import AnalyzeRequest
from api.schemas.responses import SuccessResponse
from worker.reports.contract import ReportKind

router = APIRouter(prefix="/analyze", tags=["analyze"])
logger = structlog.get_logger(__name__)


@router.post(
    "",
    response_model=SuccessResponse[dict],
    summary="Analyze a landing page",
)
async def analyze(
    body: AnalyzeRequest,
    pipeline: PipelineDep,
    storage: StorageDep,
) -> SuccessResponse[dict]:
    """
    Analyze one landing page, or two when `comparison_url` is given.

    The page is captured, scored on all eight dimensions and summarized.
    The response is sent only after the report and its screenshots are
    stored; a failure at any stage stores nothing.
    """
    context = body.campaign_context()

    if body.comparison_url:
        result = await pipeline.compare(body.url, body.comparison_url, context)
        await asyncio.to_thread(storage.save_comparison, result.comparison, result.screenshots)
        comparison = result.comparison
        logger.info("analysis_saved", kind=ReportKind.COMPARISON.value, report_id=comparison.id)
        return SuccessResponse(
            data=comparison.to_dict(),
            meta={"report_id": comparison.id, "kind": ReportKind.COMPARISON.value},
        )

    single = await pipeline.run(body.url, context)
    await asyncio.to_thread(storage.save_report, single.report, single.screenshot)
    logger.info("analysis_saved", kind=ReportKind.SINGLE.value, report_id=single.report.id)
    return SuccessResponse(
        data=single.report.to_dict(),
        meta={"report_id": single.report.id, "kind": ReportKind.SINGLE.value},
    )
