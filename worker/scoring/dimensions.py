"""The eight scoring axes and their fixed category membership.

The taxonomy is closed: every report carries exactly one result per axis,
and display ordering follows ``CANONICAL_ORDER`` regardless of the order in
which analyzer calls returned their results.
"""

from dataclasses import dataclass
from enum import StrEnum


class DimensionId(StrEnum):
    """Stable axis codes."""

    VISUAL_HIERARCHY = "A1"
    TYPOGRAPHY = "A2"
    UI_CONSISTENCY = "A3"
    ACCESSIBILITY = "A4"
    MESSAGE_CLARITY = "B1"
    PERSUASION_TRUST = "B2"
    CTA_MECHANICS = "B3"
    CONTENT_STRATEGY = "B4"


class DimensionCategory(StrEnum):
    """Display categories."""

    DESIGN = "design"
    CONVERSION = "conversion"


class AnalyzerStage(StrEnum):
    """The analyzer call responsible for producing an axis."""

    VISUAL = "visual"
    STRUCTURE = "structure"
    TRUST = "trust"


@dataclass(frozen=True)
class DimensionSpec:
    """Static definition of one axis."""

    id: DimensionId
    name: str
    category: DimensionCategory
    stage: AnalyzerStage
    max_score: int
    description: str


DIMENSIONS: dict[DimensionId, DimensionSpec] = {
    spec.id: spec
    for spec in (
        DimensionSpec(
            id=DimensionId.VISUAL_HIERARCHY,
            name="Visual Hierarchy",
            category=DimensionCategory.DESIGN,
            stage=AnalyzerStage.VISUAL,
            max_score=15,
            description=(
                "How effectively the page guides the eye: F/Z-pattern compliance, "
                "whitespace usage, contrast ratios, size hierarchy, and visual flow."
            ),
        ),
        DimensionSpec(
            id=DimensionId.TYPOGRAPHY,
            name="Typography",
            category=DimensionCategory.DESIGN,
            stage=AnalyzerStage.VISUAL,
            max_score=10,
            description=(
                "Font choices, readability, line-height, letter-spacing, font pairing, "
                "heading hierarchy, and mobile readability."
            ),
        ),
        DimensionSpec(
            id=DimensionId.UI_CONSISTENCY,
            name="UI Consistency",
            category=DimensionCategory.DESIGN,
            stage=AnalyzerStage.VISUAL,
            max_score=10,
            description=(
                "Design system consistency including color palette, spacing rhythm, "
                "component styling, icon consistency, and border treatments."
            ),
        ),
        DimensionSpec(
            id=DimensionId.ACCESSIBILITY,
            name="Accessibility",
            category=DimensionCategory.DESIGN,
            stage=AnalyzerStage.STRUCTURE,
            max_score=15,
            description=(
                "Semantic HTML, ARIA labels, alt text, heading structure, color contrast "
                "indicators, keyboard navigation potential, and form labels."
            ),
        ),
        DimensionSpec(
            id=DimensionId.MESSAGE_CLARITY,
            name="Message Clarity",
            category=DimensionCategory.CONVERSION,
            stage=AnalyzerStage.STRUCTURE,
            max_score=15,
            description=(
                "Headline, subheadline, value proposition clarity, benefit communication, "
                "jargon usage, and reading level."
            ),
        ),
        DimensionSpec(
            id=DimensionId.PERSUASION_TRUST,
            name="Persuasion & Trust Architecture",
            category=DimensionCategory.CONVERSION,
            stage=AnalyzerStage.TRUST,
            max_score=15,
            description=(
                "Social proof (testimonials, logos, reviews, stats), trust signals "
                "(security badges, guarantees, certifications), authority indicators, "
                "reciprocity, scarcity/urgency tactics, and overall trust architecture."
            ),
        ),
        DimensionSpec(
            id=DimensionId.CTA_MECHANICS,
            name="CTA Mechanics",
            category=DimensionCategory.CONVERSION,
            stage=AnalyzerStage.STRUCTURE,
            max_score=15,
            description=(
                "CTA button text, placement, contrast, urgency, specificity, number of "
                "CTAs, and friction reduction."
            ),
        ),
        DimensionSpec(
            id=DimensionId.CONTENT_STRATEGY,
            name="Content Strategy",
            category=DimensionCategory.CONVERSION,
            stage=AnalyzerStage.STRUCTURE,
            max_score=5,
            description=(
                "Content structure, scanability, bullet points, above-the-fold content "
                "density, and information hierarchy."
            ),
        ),
    )
}

CANONICAL_ORDER: tuple[DimensionId, ...] = tuple(DimensionId)

CATEGORY_MEMBERS: dict[DimensionCategory, frozenset[DimensionId]] = {
    category: frozenset(d for d, spec in DIMENSIONS.items() if spec.category == category)
    for category in DimensionCategory
}


def dimensions_for_stage(stage: AnalyzerStage) -> list[DimensionSpec]:
    """Axes produced by one analyzer call, in canonical order."""
    return [DIMENSIONS[d] for d in CANONICAL_ORDER if DIMENSIONS[d].stage == stage]


def canonical_index(dimension_id: DimensionId) -> int:
    """Position of an axis in the canonical display order."""
    return CANONICAL_ORDER.index(dimension_id)


def category_of(dimension_id: DimensionId) -> DimensionCategory:
    """Display category of an axis."""
    return DIMENSIONS[dimension_id].category
