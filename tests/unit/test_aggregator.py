"""Tests for score aggregation."""

import pytest

from tests.fixtures import full_dimensions, make_dimension
from worker.scoring.aggregator import (
    ScoreBand,
    ScoreTotals,
    aggregate_scores,
    category_scores,
    score_band,
    score_ratio,
)
from worker.scoring.dimensions import DimensionCategory, DimensionId


class TestAggregateScores:
    """Tests for aggregate_scores function."""

    def test_sums_scores_and_maxima(self) -> None:
        dims = [
            make_dimension(DimensionId.VISUAL_HIERARCHY, score=12),
            make_dimension(DimensionId.TYPOGRAPHY, score=7),
        ]
        totals = aggregate_scores(dims)
        assert totals.total_score == 19
        assert totals.max_total_score == 25

    def test_empty_is_zero(self) -> None:
        totals = aggregate_scores([])
        assert totals.total_score == 0
        assert totals.max_total_score == 0
        assert totals.ratio == 0.0

    def test_full_report_maximum(self) -> None:
        totals = aggregate_scores(full_dimensions())
        assert totals.max_total_score == 100
        assert totals.total_score == pytest.approx(60)

    def test_order_independent(self) -> None:
        dims = full_dimensions()
        assert aggregate_scores(dims) == aggregate_scores(list(reversed(dims)))

    def test_totals_add(self) -> None:
        combined = ScoreTotals(10, 20) + ScoreTotals(5, 30)
        assert combined == ScoreTotals(15, 50)


class TestCategoryScores:
    """Tests for category_scores function."""

    def test_splits_by_category(self) -> None:
        scores = {
            DimensionId.VISUAL_HIERARCHY: 15,
            DimensionId.TYPOGRAPHY: 10,
            DimensionId.UI_CONSISTENCY: 10,
            DimensionId.ACCESSIBILITY: 15,
            DimensionId.MESSAGE_CLARITY: 0,
            DimensionId.PERSUASION_TRUST: 0,
            DimensionId.CTA_MECHANICS: 0,
            DimensionId.CONTENT_STRATEGY: 0,
        }
        by_category = category_scores(full_dimensions(scores))
        assert by_category[DimensionCategory.DESIGN] == ScoreTotals(50, 50)
        assert by_category[DimensionCategory.CONVERSION] == ScoreTotals(0, 50)

    def test_missing_category_is_zero(self) -> None:
        by_category = category_scores([make_dimension(DimensionId.TYPOGRAPHY, score=4)])
        assert by_category[DimensionCategory.CONVERSION] == ScoreTotals(0, 0)


class TestBands:
    """Tests for score ratio and band helpers."""

    def test_zero_max_ratio(self) -> None:
        assert score_ratio(0, 0) == 0.0

    @pytest.mark.parametrize(
        ("score", "band"),
        [
            (95, ScoreBand.EXCELLENT),
            (90, ScoreBand.EXCELLENT),
            (80, ScoreBand.GOOD),
            (60, ScoreBand.FAIR),
            (45, ScoreBand.NEEDS_WORK),
            (10, ScoreBand.POOR),
        ],
    )
    def test_band_thresholds(self, score: float, band: ScoreBand) -> None:
        assert score_band(score, 100) == band

    def test_to_dict(self) -> None:
        assert ScoreTotals(62, 80).to_dict() == {
            "total_score": 62,
            "max_total_score": 80,
            "ratio": 0.775,
            "band": "good",
        }
