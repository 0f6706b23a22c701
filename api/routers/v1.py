"""Versioned API: analysis, stored reports and screenshots."""

from typing import Any

from fastapi import APIRouter

from api.routers import analyze, reports

router = APIRouter()

router.include_router(analyze.router)
router.include_router(reports.router)
router.include_router(reports.screenshots_router)


@router.get("/")
async def v1_root() -> dict[str, Any]:
    return {
        "version": "1",
        "status": "active",
        "endpoints": {
            "analyze": "POST /v1/analyze",
            "reports": "GET /v1/reports",
            "report": "GET /v1/reports/{id}",
            "action_plan": "GET /v1/reports/{id}/action-plan",
            "head_to_head": "GET /v1/reports/{id}/head-to-head",
            "screenshot": "GET /v1/screenshots/{id}",
        },
    }
