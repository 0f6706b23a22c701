"""Scoring package for landing page evaluation.

Use explicit imports:
    from worker.scoring.dimensions import DimensionId, DIMENSIONS, CANONICAL_ORDER
    from worker.scoring.aggregator import aggregate_scores, category_scores, ScoreTotals
    from worker.scoring.prioritizer import build_action_plan, top_critical, group_dimensions
    from worker.scoring.head_to_head import head_to_head, HeadToHead
"""

__all__ = [
    # Taxonomy
    "DimensionId",
    "DimensionCategory",
    "AnalyzerStage",
    "DIMENSIONS",
    "CANONICAL_ORDER",
    # Aggregation
    "ScoreTotals",
    "ScoreBand",
    "aggregate_scores",
    "category_scores",
    # Prioritization
    "PrioritizedFinding",
    "ActionPlan",
    "build_action_plan",
    "prioritize",
    "top_critical",
    "group_dimensions",
    # Head-to-head
    "HeadToHead",
    "head_to_head",
]
