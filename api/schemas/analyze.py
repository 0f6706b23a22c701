"""Analysis request and report listing schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from worker.reports.contract import CampaignContext, ReportKind, ReportMetadata


class AnalyzeRequest(BaseModel):
    """Schema for starting an analysis. A comparison URL switches to A/B mode."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str = Field(..., max_length=2048)
    comparison_url: str | None = Field(None, max_length=2048)
    traffic_source: str | None = Field(None, max_length=200)
    campaign_goal: str | None = Field(None, max_length=500)
    target_audience: str | None = Field(None, max_length=500)

    @field_validator("comparison_url", "traffic_source", "campaign_goal", "target_audience")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty form fields as absent."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    def campaign_context(self) -> CampaignContext:
        return CampaignContext(
            traffic_source=self.traffic_source,
            campaign_goal=self.campaign_goal,
            target_audience=self.target_audience,
        )


class ReportSummary(BaseModel):
    """Listing entry for a stored report."""

    id: str
    url: str
    comparison_url: str | None = None
    total_score: float
    max_total_score: float
    created_at: datetime
    kind: ReportKind

    @classmethod
    def from_metadata(cls, metadata: ReportMetadata) -> "ReportSummary":
        return cls(
            id=metadata.id,
            url=metadata.url,
            comparison_url=metadata.comparison_url,
            total_score=metadata.total_score,
            max_total_score=metadata.max_total_score,
            created_at=metadata.created_at,
            kind=metadata.kind,
        )
