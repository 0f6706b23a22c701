"""Head-to-head verdict between the two sides of a comparison.

The verdict is derived on demand from the embedded reports and is never
stored alongside them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from worker.reports.contract import ComparisonReport, Report
from worker.scoring.aggregator import ScoreTotals, category_scores
from worker.scoring.dimensions import DimensionCategory, DimensionId, canonical_index


class Side(StrEnum):
    """Which report leads."""

    A = "A"
    B = "B"


def _leader(score_a: float, score_b: float) -> Side | None:
    if score_a > score_b:
        return Side.A
    if score_b > score_a:
        return Side.B
    return None


@dataclass(frozen=True)
class DimensionMatchup:
    """Per-axis comparison."""

    dimension_id: DimensionId
    dimension_name: str
    score_a: float
    score_b: float
    max_score: float
    leader: Side | None

    @property
    def margin(self) -> float:
        return abs(self.score_a - self.score_b)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "dimension_id": self.dimension_id.value,
            "dimension_name": self.dimension_name,
            "score_a": self.score_a,
            "score_b": self.score_b,
            "max_score": self.max_score,
            "leader": self.leader.value if self.leader else None,
            "margin": self.margin,
        }


@dataclass(frozen=True)
class HeadToHead:
    """Overall verdict plus per-axis and per-category breakdown."""

    url_a: str
    url_b: str
    totals_a: ScoreTotals
    totals_b: ScoreTotals
    winner: Side | None
    dimensions: tuple[DimensionMatchup, ...] = ()
    categories_a: dict[DimensionCategory, ScoreTotals] | None = None
    categories_b: dict[DimensionCategory, ScoreTotals] | None = None

    @property
    def is_tie(self) -> bool:
        return self.winner is None

    @property
    def margin(self) -> float:
        return abs(self.totals_a.total_score - self.totals_b.total_score)

    @property
    def winner_url(self) -> str | None:
        if self.winner is Side.A:
            return self.url_a
        if self.winner is Side.B:
            return self.url_b
        return None

    @property
    def dimension_wins(self) -> dict[str, int]:
        wins = {Side.A.value: 0, Side.B.value: 0, "tie": 0}
        for matchup in self.dimensions:
            wins[matchup.leader.value if matchup.leader else "tie"] += 1
        return wins

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "url_a": self.url_a,
            "url_b": self.url_b,
            "totals_a": self.totals_a.to_dict(),
            "totals_b": self.totals_b.to_dict(),
            "winner": self.winner.value if self.winner else None,
            "winner_url": self.winner_url,
            "is_tie": self.is_tie,
            "margin": self.margin,
            "dimension_wins": self.dimension_wins,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "categories": {
                category.value: {
                    "a": (self.categories_a or {}).get(category, ScoreTotals()).to_dict(),
                    "b": (self.categories_b or {}).get(category, ScoreTotals()).to_dict(),
                }
                for category in DimensionCategory
            },
        }


def _matchups(report_a: Report, report_b: Report) -> tuple[DimensionMatchup, ...]:
    by_id_b = {d.dimension_id: d for d in report_b.dimensions}
    matchups = []
    for dim_a in sorted(report_a.dimensions, key=lambda d: canonical_index(d.dimension_id)):
        dim_b = by_id_b.get(dim_a.dimension_id)
        if dim_b is None:
            continue
        matchups.append(
            DimensionMatchup(
                dimension_id=dim_a.dimension_id,
                dimension_name=dim_a.dimension_name,
                score_a=dim_a.score,
                score_b=dim_b.score,
                max_score=max(dim_a.max_score, dim_b.max_score),
                leader=_leader(dim_a.score, dim_b.score),
            )
        )
    return tuple(matchups)


def head_to_head(report_a: Report, report_b: Report) -> HeadToHead:
    """
    Compare two reports.

    The report with the strictly greater total wins; equal totals are a tie
    with no winner. The margin is always the absolute difference of totals.
    """
    totals_a = report_a.totals
    totals_b = report_b.totals
    return HeadToHead(
        url_a=report_a.url,
        url_b=report_b.url,
        totals_a=totals_a,
        totals_b=totals_b,
        winner=_leader(totals_a.total_score, totals_b.total_score),
        dimensions=_matchups(report_a, report_b),
        categories_a=category_scores(report_a.dimensions),
        categories_b=category_scores(report_b.dimensions),
    )


def comparison_verdict(comparison: ComparisonReport) -> HeadToHead:
    """Head-to-head for a stored comparison."""
    return head_to_head(comparison.report_a, comparison.report_b)
