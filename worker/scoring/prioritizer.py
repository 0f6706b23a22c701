"""Remediation prioritization over a report's dimension results.

Only critical and warning findings are prioritized. Ordering is by priority
tier (P0 first, unknown priorities last) and then by how far the finding
falls short of its maximum, proportionally worst first. Python's sort is
stable, so findings that tie on both keys keep their collection order
(dimension order, then finding order within the dimension).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from worker.reports.contract import DimensionResult, Finding, Priority
from worker.scoring.dimensions import (
    DimensionCategory,
    DimensionId,
    canonical_index,
    category_of,
)

DEFAULT_TOP_CRITICAL = 3


@dataclass(frozen=True)
class RemediationTier:
    """A remediation group covering one or more priority tiers."""

    key: str
    label: str
    priorities: tuple[Priority, ...]


REMEDIATION_TIERS: tuple[RemediationTier, ...] = (
    RemediationTier(key="immediate", label="Immediate", priorities=(Priority.P0,)),
    RemediationTier(key="soon", label="Soon", priorities=(Priority.P1,)),
    RemediationTier(
        key="when_possible",
        label="When possible",
        priorities=(Priority.P2, Priority.P3),
    ),
)


@dataclass(frozen=True)
class PrioritizedFinding:
    """A finding annotated with its dimension and its place in the plan."""

    finding: Finding
    dimension_id: DimensionId
    dimension_name: str
    rank: int = 0  # 1-based "do this first" ordinal; 0 until ranked

    @property
    def sort_key(self) -> tuple[int, float]:
        return (self.finding.priority_rank, self.finding.ratio)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "rank": self.rank,
            "dimension_id": self.dimension_id.value,
            "dimension_name": self.dimension_name,
            **self.finding.to_dict(),
        }


@dataclass(frozen=True)
class TierGroup:
    """Findings in one remediation tier, already sorted and ranked."""

    tier: RemediationTier
    findings: tuple[PrioritizedFinding, ...]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "key": self.tier.key,
            "label": self.tier.label,
            "priorities": [p.value for p in self.tier.priorities],
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass(frozen=True)
class ActionPlan:
    """Tiered remediation plan. Empty tiers are omitted."""

    groups: tuple[TierGroup, ...]

    @property
    def findings(self) -> list[PrioritizedFinding]:
        return [f for group in self.groups for f in group.findings]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_findings": len(self.findings),
            "groups": [g.to_dict() for g in self.groups],
        }


def collect_actionable(dimensions: Iterable[DimensionResult]) -> list[PrioritizedFinding]:
    """Gather critical and warning findings in collection order."""
    return [
        PrioritizedFinding(
            finding=finding,
            dimension_id=dimension.dimension_id,
            dimension_name=dimension.dimension_name,
        )
        for dimension in dimensions
        for finding in dimension.findings
        if finding.is_actionable
    ]


def prioritize(dimensions: Iterable[DimensionResult]) -> list[PrioritizedFinding]:
    """All actionable findings, sorted by priority tier then score ratio."""
    return sorted(collect_actionable(dimensions), key=lambda f: f.sort_key)


def build_action_plan(dimensions: Iterable[DimensionResult]) -> ActionPlan:
    """
    Group prioritized findings into remediation tiers and rank them.

    Ranks run 1..N across all tiers combined. Findings whose priority is not
    a known tier belong to no group and are not ranked.
    """
    ordered = prioritize(dimensions)

    groups: list[TierGroup] = []
    next_rank = 1
    for tier in REMEDIATION_TIERS:
        members = [f for f in ordered if f.finding.priority in tier.priorities]
        if not members:
            continue
        ranked = []
        for item in members:
            ranked.append(replace(item, rank=next_rank))
            next_rank += 1
        groups.append(TierGroup(tier=tier, findings=tuple(ranked)))

    return ActionPlan(groups=tuple(groups))


def top_critical(
    dimensions: Iterable[DimensionResult],
    n: int = DEFAULT_TOP_CRITICAL,
) -> list[PrioritizedFinding]:
    """The first ``n`` findings of the flat prioritized order."""
    ordered = prioritize(dimensions)[: max(n, 0)]
    return [replace(item, rank=i) for i, item in enumerate(ordered, start=1)]


def group_dimensions(
    dimensions: Iterable[DimensionResult],
) -> dict[DimensionCategory, list[DimensionResult]]:
    """Split results into design and conversion groups in canonical axis order."""
    ordered = sorted(dimensions, key=lambda d: canonical_index(d.dimension_id))
    groups: dict[DimensionCategory, list[DimensionResult]] = {c: [] for c in DimensionCategory}
    for dimension in ordered:
        groups[category_of(dimension.dimension_id)].append(dimension)
    return groups
