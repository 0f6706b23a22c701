"""Tests for stored report endpoints."""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from worker.reports.contract import FindingStatus
from worker.reports.storage import ReportStorage
from worker.scoring.dimensions import DimensionId

from tests.fixtures import (
    FAKE_PNG,
    full_dimensions,
    make_comparison,
    make_dimension,
    make_finding,
    make_report,
)

MISSING_ID = "550e8400-e29b-41d4-a716-446655440000"


def report_with_findings():
    dims = full_dimensions()
    dims[0] = make_dimension(
        DimensionId.VISUAL_HIERARCHY,
        findings=(
            make_finding(id="A1-1", priority="P1", score=2, max_score=10),
            make_finding(id="A1-2", priority="P0", score=8, max_score=10),
            make_finding(id="A1-3", status=FindingStatus.SUCCESS, priority="P3", score=10),
        ),
    )
    dims[6] = make_dimension(
        DimensionId.CTA_MECHANICS,
        findings=(make_finding(id="B3-1", priority="P0", score=1, max_score=10),),
    )
    return make_report(dimensions=dims)


def save_comparison(storage: ReportStorage, **kwargs):
    comparison = make_comparison(**kwargs)
    storage.save_comparison(
        comparison,
        {comparison.report_a.id: FAKE_PNG, comparison.report_b.id: FAKE_PNG},
    )
    return comparison


class TestListReports:
    """Tests for GET /v1/reports."""

    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient) -> None:
        response = await client.get("/v1/reports")
        assert response.status_code == 200
        assert response.json() == {"data": [], "meta": {"total": 0}}

    @pytest.mark.asyncio
    async def test_newest_first(self, client: AsyncClient, storage: ReportStorage) -> None:
        now = datetime.now(UTC)
        older = make_report("https://old.example.com", created_at=now - timedelta(hours=1))
        storage.save_report(older, FAKE_PNG)
        comparison = save_comparison(storage, created_at=now)

        body = (await client.get("/v1/reports")).json()

        assert body["meta"]["total"] == 2
        first, second = body["data"]
        assert first["id"] == comparison.id
        assert first["kind"] == "comparison"
        assert first["url"] == "https://a.example.com"
        assert first["comparison_url"] == "https://b.example.com"
        assert second["id"] == older.id
        assert second["kind"] == "single"
        assert second["max_total_score"] == 100


class TestGetReport:
    """Tests for GET /v1/reports/{id}."""

    @pytest.mark.asyncio
    async def test_single(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = make_report()
        storage.save_report(report, FAKE_PNG)

        response = await client.get(f"/v1/reports/{report.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"] == {"report_id": report.id, "kind": "single"}
        assert body["data"]["id"] == report.id
        assert len(body["data"]["dimensions"]) == 8

    @pytest.mark.asyncio
    async def test_comparison(self, client: AsyncClient, storage: ReportStorage) -> None:
        comparison = save_comparison(storage)
        body = (await client.get(f"/v1/reports/{comparison.id}")).json()
        assert body["meta"]["kind"] == "comparison"
        assert body["data"]["report_b"]["url"] == "https://b.example.com"

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient) -> None:
        response = await client.get(f"/v1/reports/{MISSING_ID}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_id(self, client: AsyncClient) -> None:
        response = await client.get("/v1/reports/not..valid")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_id"


class TestActionPlan:
    """Tests for GET /v1/reports/{id}/action-plan."""

    @pytest.mark.asyncio
    async def test_single(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = report_with_findings()
        storage.save_report(report, FAKE_PNG)

        body = (await client.get(f"/v1/reports/{report.id}/action-plan")).json()
        data = body["data"]

        assert data["kind"] == "single"
        assert [f["id"] for f in data["top_critical"]] == ["B3-1", "A1-2", "A1-1"]
        assert [f["rank"] for f in data["top_critical"]] == [1, 2, 3]
        assert [g["label"] for g in data["action_plan"]["groups"]] == ["Immediate", "Soon"]
        assert data["action_plan"]["total_findings"] == 3
        assert data["dimension_groups"]["design"] == ["A1", "A2", "A3", "A4"]
        assert data["categories"]["conversion"]["max_total_score"] == 50

    @pytest.mark.asyncio
    async def test_top_parameter(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = report_with_findings()
        storage.save_report(report, FAKE_PNG)

        data = (await client.get(f"/v1/reports/{report.id}/action-plan?top=1")).json()["data"]
        assert [f["id"] for f in data["top_critical"]] == ["B3-1"]

    @pytest.mark.asyncio
    async def test_top_out_of_range(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = make_report()
        storage.save_report(report, FAKE_PNG)
        response = await client.get(f"/v1/reports/{report.id}/action-plan?top=500")
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_comparison(self, client: AsyncClient, storage: ReportStorage) -> None:
        comparison = save_comparison(storage)
        data = (await client.get(f"/v1/reports/{comparison.id}/action-plan")).json()["data"]
        assert data["kind"] == "comparison"
        assert data["report_a"]["url"] == "https://a.example.com"
        assert data["report_b"]["url"] == "https://b.example.com"
        assert data["head_to_head"]["is_tie"] is True


class TestHeadToHead:
    """Tests for GET /v1/reports/{id}/head-to-head."""

    @pytest.mark.asyncio
    async def test_winner(self, client: AsyncClient, storage: ReportStorage) -> None:
        a = make_report(
            "https://a.example.com",
            dimensions=full_dimensions({DimensionId.CTA_MECHANICS: 15}),
        )
        comparison = save_comparison(storage, report_a=a)

        data = (await client.get(f"/v1/reports/{comparison.id}/head-to-head")).json()["data"]

        assert data["winner"] == "A"
        assert data["winner_url"] == "https://a.example.com"
        assert data["margin"] == 6
        assert data["dimension_wins"] == {"A": 1, "B": 0, "tie": 7}

    @pytest.mark.asyncio
    async def test_single_report_rejected(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = make_report()
        storage.save_report(report, FAKE_PNG)

        response = await client.get(f"/v1/reports/{report.id}/head-to-head")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "not_a_comparison"


class TestScreenshots:
    """Tests for GET /v1/screenshots/{id}."""

    @pytest.mark.asyncio
    async def test_png(self, client: AsyncClient, storage: ReportStorage) -> None:
        report = make_report()
        storage.save_report(report, FAKE_PNG)

        response = await client.get(f"/v1/screenshots/{report.id}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert "immutable" in response.headers["cache-control"]
        assert response.content == FAKE_PNG

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient) -> None:
        response = await client.get(f"/v1/screenshots/{MISSING_ID}")
        assert response.status_code == 404
        assert response.json()["error"]["message"].startswith("Screenshot")

    @pytest.mark.asyncio
    async def test_invalid_id(self, client: AsyncClient) -> None:
        response = await client.get("/v1/screenshots/NOT_AN_ID")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid screenshot ID."
