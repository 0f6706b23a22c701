"""Tests for the scoring axis taxonomy."""

from worker.scoring.dimensions import (
    CANONICAL_ORDER,
    CATEGORY_MEMBERS,
    DIMENSIONS,
    AnalyzerStage,
    DimensionCategory,
    DimensionId,
    canonical_index,
    category_of,
    dimensions_for_stage,
)


class TestTaxonomy:
    """Tests for the fixed axis definitions."""

    def test_eight_axes(self) -> None:
        assert len(DIMENSIONS) == 8
        assert set(DIMENSIONS) == set(DimensionId)

    def test_canonical_order(self) -> None:
        assert [d.value for d in CANONICAL_ORDER] == [
            "A1", "A2", "A3", "A4", "B1", "B2", "B3", "B4",
        ]
        assert canonical_index(DimensionId.VISUAL_HIERARCHY) == 0
        assert canonical_index(DimensionId.CONTENT_STRATEGY) == 7

    def test_max_scores_sum_to_100(self) -> None:
        assert sum(spec.max_score for spec in DIMENSIONS.values()) == 100

    def test_max_scores(self) -> None:
        expected = {"A1": 15, "A2": 10, "A3": 10, "A4": 15, "B1": 15, "B2": 15, "B3": 15, "B4": 5}
        assert {d.value: s.max_score for d, s in DIMENSIONS.items()} == expected


class TestCategories:
    """Tests for category membership."""

    def test_design_axes(self) -> None:
        assert {d.value for d in CATEGORY_MEMBERS[DimensionCategory.DESIGN]} == {
            "A1", "A2", "A3", "A4",
        }

    def test_conversion_axes(self) -> None:
        assert {d.value for d in CATEGORY_MEMBERS[DimensionCategory.CONVERSION]} == {
            "B1", "B2", "B3", "B4",
        }

    def test_category_of(self) -> None:
        assert category_of(DimensionId.ACCESSIBILITY) == DimensionCategory.DESIGN
        assert category_of(DimensionId.PERSUASION_TRUST) == DimensionCategory.CONVERSION


class TestStages:
    """Tests for analyzer stage ownership."""

    def test_visual_stage(self) -> None:
        ids = [s.id.value for s in dimensions_for_stage(AnalyzerStage.VISUAL)]
        assert ids == ["A1", "A2", "A3"]

    def test_structure_stage(self) -> None:
        ids = [s.id.value for s in dimensions_for_stage(AnalyzerStage.STRUCTURE)]
        assert ids == ["A4", "B1", "B3", "B4"]

    def test_trust_stage(self) -> None:
        ids = [s.id.value for s in dimensions_for_stage(AnalyzerStage.TRUST)]
        assert ids == ["B2"]

    def test_stages_partition_axes(self) -> None:
        produced = [s.id for stage in AnalyzerStage for s in dimensions_for_stage(stage)]
        assert sorted(produced) == sorted(DimensionId)
        assert len(produced) == len(set(produced))
