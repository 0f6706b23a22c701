"""Score aggregation over dimension results.

``aggregate_scores`` is the single definition of report totals. Reports,
comparison listings, category breakdowns and the synthesis prompt all call
it rather than summing on their own.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from worker.scoring.dimensions import DimensionCategory, category_of

if TYPE_CHECKING:
    from worker.reports.contract import DimensionResult


class ScoreBand(StrEnum):
    """Qualitative band for a score ratio."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_WORK = "needs_work"
    POOR = "poor"


# Lower bounds, checked in order
SCORE_BAND_THRESHOLDS: tuple[tuple[float, ScoreBand], ...] = (
    (0.90, ScoreBand.EXCELLENT),
    (0.75, ScoreBand.GOOD),
    (0.60, ScoreBand.FAIR),
    (0.40, ScoreBand.NEEDS_WORK),
)


@dataclass(frozen=True)
class ScoreTotals:
    """Summed score and maximum."""

    total_score: float = 0
    max_total_score: float = 0

    @property
    def ratio(self) -> float:
        return score_ratio(self.total_score, self.max_total_score)

    @property
    def band(self) -> ScoreBand:
        return score_band(self.total_score, self.max_total_score)

    def __add__(self, other: ScoreTotals) -> ScoreTotals:
        return ScoreTotals(
            total_score=self.total_score + other.total_score,
            max_total_score=self.max_total_score + other.max_total_score,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_score": self.total_score,
            "max_total_score": self.max_total_score,
            "ratio": round(self.ratio, 3),
            "band": self.band.value,
        }


def aggregate_scores(dimensions: Iterable[DimensionResult]) -> ScoreTotals:
    """Sum score and max_score across dimension results."""
    total = 0
    maximum = 0
    for dimension in dimensions:
        total += dimension.score
        maximum += dimension.max_score
    return ScoreTotals(total_score=total, max_total_score=maximum)


def category_scores(
    dimensions: Iterable[DimensionResult],
) -> dict[DimensionCategory, ScoreTotals]:
    """Totals per display category (design, conversion)."""
    members: dict[DimensionCategory, list[DimensionResult]] = {c: [] for c in DimensionCategory}
    for dimension in dimensions:
        members[category_of(dimension.dimension_id)].append(dimension)
    return {category: aggregate_scores(dims) for category, dims in members.items()}


def score_ratio(score: float, max_score: float) -> float:
    """score / max_score, with a zero maximum treated as 0."""
    return score / max_score if max_score > 0 else 0.0


def score_band(score: float, max_score: float) -> ScoreBand:
    """Map a score to its qualitative band."""
    ratio = score_ratio(score, max_score)
    for threshold, band in SCORE_BAND_THRESHOLDS:
        if ratio >= threshold:
            return band
    return ScoreBand.POOR
