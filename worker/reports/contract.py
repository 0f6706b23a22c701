"""Report JSON contract and data structures.

Defines the report format used for API responses and persistence. Entities
are immutable once built; report totals are derived from the dimension
results on every read and are never stored independently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from worker.scoring.aggregator import ScoreTotals, aggregate_scores, score_ratio
from worker.scoring.dimensions import DimensionId


class FindingStatus(StrEnum):
    """Severity of a finding."""

    CRITICAL = "critical"
    WARNING = "warning"
    SUCCESS = "success"


class Priority(StrEnum):
    """Remediation priority tiers, most urgent first."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


PRIORITY_RANK: dict[str, int] = {p.value: i for i, p in enumerate(Priority)}

# Missing or unrecognized priorities sort after every known tier
UNRANKED_PRIORITY = 9


def priority_rank(priority: str | None) -> int:
    """Sort rank of a priority string (P0 = 0 ... P3 = 3, anything else = 9)."""
    if priority is None:
        return UNRANKED_PRIORITY
    return PRIORITY_RANK.get(priority, UNRANKED_PRIORITY)


class ReportKind(StrEnum):
    """Kind of persisted report."""

    SINGLE = "single"
    COMPARISON = "comparison"


def _check_score_bounds(owner: str, score: float, max_score: float) -> None:
    if max_score < 0 or score < 0:
        raise ValueError(f"{owner}: score and max_score must be non-negative")
    if score > max_score:
        raise ValueError(f"{owner}: score {score} exceeds max_score {max_score}")


@dataclass(frozen=True)
class SubScore:
    """One component score within a dimension."""

    id: str
    name: str
    score: float
    max_score: float

    def __post_init__(self) -> None:
        _check_score_bounds(f"sub-score {self.id}", self.score, self.max_score)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "max_score": self.max_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubScore:
        return cls(
            id=data["id"],
            name=data["name"],
            score=data["score"],
            max_score=data["max_score"],
        )


@dataclass(frozen=True)
class Finding:
    """A single observation within a dimension."""

    id: str
    name: str
    status: FindingStatus
    priority: str
    score: float
    max_score: float
    what_we_found: str = ""
    why_it_matters: str = ""
    what_good_looks_like: str = ""
    suggested_fix: str = ""
    effort: str = ""
    expected_impact: str = ""

    def __post_init__(self) -> None:
        _check_score_bounds(f"finding {self.id}", self.score, self.max_score)

    @property
    def is_actionable(self) -> bool:
        """Critical and warning findings need remediation; success findings do not."""
        return self.status != FindingStatus.SUCCESS

    @property
    def ratio(self) -> float:
        return score_ratio(self.score, self.max_score)

    @property
    def priority_rank(self) -> int:
        return priority_rank(self.priority)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "priority": self.priority,
            "score": self.score,
            "max_score": self.max_score,
            "what_we_found": self.what_we_found,
            "why_it_matters": self.why_it_matters,
            "what_good_looks_like": self.what_good_looks_like,
            "suggested_fix": self.suggested_fix,
            "effort": self.effort,
            "expected_impact": self.expected_impact,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        return cls(
            id=data["id"],
            name=data["name"],
            status=FindingStatus(data["status"]),
            priority=data.get("priority") or "",
            score=data["score"],
            max_score=data["max_score"],
            what_we_found=data.get("what_we_found", ""),
            why_it_matters=data.get("why_it_matters", ""),
            what_good_looks_like=data.get("what_good_looks_like", ""),
            suggested_fix=data.get("suggested_fix", ""),
            effort=data.get("effort", ""),
            expected_impact=data.get("expected_impact", ""),
        )


@dataclass(frozen=True)
class DimensionResult:
    """One scored evaluation axis."""

    dimension_id: DimensionId
    dimension_name: str
    score: float
    max_score: float
    sub_scores: tuple[SubScore, ...] = ()
    findings: tuple[Finding, ...] = ()

    def __post_init__(self) -> None:
        _check_score_bounds(f"dimension {self.dimension_id}", self.score, self.max_score)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "dimension_id": self.dimension_id.value,
            "dimension_name": self.dimension_name,
            "score": self.score,
            "max_score": self.max_score,
            "sub_scores": [s.to_dict() for s in self.sub_scores],
            "findings": [f.to_dict() for f in self.findings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DimensionResult:
        return cls(
            dimension_id=DimensionId(data["dimension_id"]),
            dimension_name=data["dimension_name"],
            score=data["score"],
            max_score=data["max_score"],
            sub_scores=tuple(SubScore.from_dict(s) for s in data.get("sub_scores", [])),
            findings=tuple(Finding.from_dict(f) for f in data.get("findings", [])),
        )


@dataclass(frozen=True)
class Synthesis:
    """Narrative executive summary produced by the synthesis call."""

    overview: str
    strengths: tuple[str, ...] = ()
    critical_fixes: tuple[str, ...] = ()
    action_plan: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "overview": self.overview,
            "strengths": list(self.strengths),
            "critical_fixes": list(self.critical_fixes),
            "action_plan": list(self.action_plan),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Synthesis:
        return cls(
            overview=data["overview"],
            strengths=tuple(data.get("strengths", [])),
            critical_fixes=tuple(data.get("critical_fixes", [])),
            action_plan=tuple(data.get("action_plan", [])),
        )


@dataclass(frozen=True)
class CampaignContext:
    """Optional campaign details passed through to the analyzer prompts."""

    traffic_source: str | None = None
    campaign_goal: str | None = None
    target_audience: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.traffic_source or self.campaign_goal or self.target_audience)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "traffic_source": self.traffic_source,
            "campaign_goal": self.campaign_goal,
            "target_audience": self.target_audience,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CampaignContext:
        data = data or {}
        return cls(
            traffic_source=data.get("traffic_source"),
            campaign_goal=data.get("campaign_goal"),
            target_audience=data.get("target_audience"),
        )


@dataclass(frozen=True)
class ReportMetadata:
    """Listing projection of a stored report."""

    id: str
    url: str
    total_score: float
    max_total_score: float
    created_at: datetime
    comparison_url: str | None = None
    kind: ReportKind = ReportKind.SINGLE

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "url": self.url,
            "comparison_url": self.comparison_url,
            "total_score": self.total_score,
            "max_total_score": self.max_total_score,
            "created_at": self.created_at.isoformat(),
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class Report:
    """A completed analysis of a single URL."""

    id: str
    url: str
    dimensions: tuple[DimensionResult, ...]
    synthesis: Synthesis
    created_at: datetime
    campaign_context: CampaignContext = field(default_factory=CampaignContext)
    comparison_url: str | None = None

    @property
    def totals(self) -> ScoreTotals:
        return aggregate_scores(self.dimensions)

    @property
    def total_score(self) -> float:
        return self.totals.total_score

    @property
    def max_total_score(self) -> float:
        return self.totals.max_total_score

    def metadata(self) -> ReportMetadata:
        """Listing projection."""
        totals = self.totals
        return ReportMetadata(
            id=self.id,
            url=self.url,
            comparison_url=self.comparison_url,
            total_score=totals.total_score,
            max_total_score=totals.max_total_score,
            created_at=self.created_at,
            kind=ReportKind.SINGLE,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary. Totals are included for consumers but never read back."""
        totals = self.totals
        return {
            "id": self.id,
            "url": self.url,
            "comparison_url": self.comparison_url,
            "campaign_context": self.campaign_context.to_dict(),
            "dimensions": [d.to_dict() for d in self.dimensions],
            "synthesis": self.synthesis.to_dict(),
            "total_score": totals.total_score,
            "max_total_score": totals.max_total_score,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        return cls(
            id=data["id"],
            url=data["url"],
            comparison_url=data.get("comparison_url"),
            campaign_context=CampaignContext.from_dict(data.get("campaign_context")),
            dimensions=tuple(DimensionResult.from_dict(d) for d in data["dimensions"]),
            synthesis=Synthesis.from_dict(data["synthesis"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class ComparisonReport:
    """Two reports analyzed head-to-head under the same campaign context."""

    id: str
    report_a: Report
    report_b: Report
    comparison: Synthesis
    created_at: datetime

    @property
    def reports(self) -> tuple[Report, Report]:
        return (self.report_a, self.report_b)

    def metadata(self) -> ReportMetadata:
        """Listing projection: A's URL, B as the comparison, combined totals."""
        combined = self.report_a.totals + self.report_b.totals
        return ReportMetadata(
            id=self.id,
            url=self.report_a.url,
            comparison_url=self.report_b.url,
            total_score=combined.total_score,
            max_total_score=combined.max_total_score,
            created_at=self.created_at,
            kind=ReportKind.COMPARISON,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "report_a": self.report_a.to_dict(),
            "report_b": self.report_b.to_dict(),
            "comparison": self.comparison.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComparisonReport:
        return cls(
            id=data["id"],
            report_a=Report.from_dict(data["report_a"]),
            report_b=Report.from_dict(data["report_b"]),
            comparison=Synthesis.from_dict(data["comparison"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


AnyReport = Report | ComparisonReport


def report_from_dict(data: dict[str, Any]) -> AnyReport:
    """Load either report kind from its serialized form."""
    if "report_a" in data:
        return ComparisonReport.from_dict(data)
    return Report.from_dict(data)
