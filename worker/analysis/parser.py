"""Parsing and validation of analyzer responses.

Model output is JSON, sometimes wrapped in a markdown code fence. Payloads
are validated with pydantic and then converted to the immutable report
entities; any shape or bounds violation raises ``ResponseParseError``.
"""

import json
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from worker.reports.contract import (
    DimensionResult,
    Finding,
    FindingStatus,
    SubScore,
    Synthesis,
)
from worker.scoring.dimensions import DIMENSIONS, DimensionId, canonical_index

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$", re.IGNORECASE)


class ResponseParseError(ValueError):
    """Analyzer output could not be parsed into the expected structure."""


class _Payload(BaseModel):
    """Accepts camelCase keys from the model and snake_case from tests."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SubScorePayload(_Payload):
    id: str = ""
    name: str = ""
    score: float = Field(ge=0)
    max_score: float = Field(ge=0)


class FindingPayload(_Payload):
    id: str = ""
    name: str
    status: FindingStatus
    priority: str | None = None
    score: float = Field(default=0, ge=0)
    max_score: float = Field(default=0, ge=0)
    what_we_found: str = ""
    why_it_matters: str = ""
    what_good_looks_like: str = ""
    suggested_fix: str = ""
    effort: str = ""
    expected_impact: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class DimensionPayload(_Payload):
    dimension_id: str
    dimension_name: str = ""
    score: float = Field(ge=0)
    max_score: float = Field(ge=0)
    sub_scores: list[SubScorePayload] = Field(default_factory=list)
    findings: list[FindingPayload] = Field(default_factory=list)

    @field_validator("dimension_id", mode="before")
    @classmethod
    def normalize_dimension_id(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class SynthesisPayload(_Payload):
    overview: str
    strengths: list[str] = Field(default_factory=list)
    critical_fixes: list[str] = Field(default_factory=list)
    action_plan: list[str] = Field(default_factory=list)


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    cleaned = raw.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_json(raw: str) -> Any:
    """Decode model output as JSON."""
    try:
        return json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Response is not valid JSON: {e.msg} at position {e.pos}") from e


def _dimension_items(data: Any) -> list[Any]:
    # JSON-object response modes wrap the array
    if isinstance(data, dict):
        if isinstance(data.get("dimensions"), list):
            return data["dimensions"]
        if "dimensionId" in data or "dimension_id" in data:
            return [data]
    if isinstance(data, list):
        return data
    raise ResponseParseError("Expected an array of dimension objects")


def _to_dimension(payload: DimensionPayload, dimension_id: DimensionId) -> DimensionResult:
    spec = DIMENSIONS[dimension_id]
    try:
        return DimensionResult(
            dimension_id=dimension_id,
            dimension_name=payload.dimension_name or spec.name,
            score=payload.score,
            max_score=payload.max_score,
            sub_scores=tuple(
                SubScore(
                    id=s.id or f"{dimension_id.value}.{i}",
                    name=s.name,
                    score=s.score,
                    max_score=s.max_score,
                )
                for i, s in enumerate(payload.sub_scores, start=1)
            ),
            findings=tuple(
                Finding(
                    id=f.id or f"{dimension_id.value}-{i}",
                    name=f.name,
                    status=f.status,
                    priority=f.priority or "",
                    score=f.score,
                    max_score=f.max_score,
                    what_we_found=f.what_we_found,
                    why_it_matters=f.why_it_matters,
                    what_good_looks_like=f.what_good_looks_like,
                    suggested_fix=f.suggested_fix,
                    effort=f.effort,
                    expected_impact=f.expected_impact,
                )
                for i, f in enumerate(payload.findings, start=1)
            ),
        )
    except ValueError as e:
        raise ResponseParseError(str(e)) from e


def _duplicate_finding_ids(dimensions: Iterable[DimensionResult]) -> list[str]:
    counts = Counter(f.id for d in dimensions for f in d.findings)
    return [finding_id for finding_id, count in counts.items() if count > 1]


def parse_dimensions(raw: str, expected: Sequence[DimensionId]) -> list[DimensionResult]:
    """
    Parse an analyzer response into dimension results.

    Args:
        raw: Model output text
        expected: Axes this call is responsible for

    Returns:
        One result per expected axis, in canonical order

    Raises:
        ResponseParseError: On invalid JSON, schema violations, score bounds
            violations, or when the axes returned differ from ``expected``,
            or when two findings share an id
    """
    items = _dimension_items(parse_json(raw))

    try:
        payloads = [DimensionPayload.model_validate(item) for item in items]
    except PydanticValidationError as e:
        raise ResponseParseError(f"Invalid dimension payload: {e.error_count()} error(s)") from e

    results: dict[DimensionId, DimensionResult] = {}
    for payload in payloads:
        try:
            dimension_id = DimensionId(payload.dimension_id)
        except ValueError as e:
            raise ResponseParseError(f"Unknown dimension id: {payload.dimension_id}") from e
        if dimension_id not in expected:
            raise ResponseParseError(f"Unexpected dimension {dimension_id.value} in response")
        if dimension_id in results:
            raise ResponseParseError(f"Duplicate dimension {dimension_id.value} in response")
        results[dimension_id] = _to_dimension(payload, dimension_id)

    missing = [d.value for d in expected if d not in results]
    if missing:
        raise ResponseParseError(f"Missing dimension(s) in response: {', '.join(missing)}")

    duplicate_ids = _duplicate_finding_ids(results.values())
    if duplicate_ids:
        raise ResponseParseError(
            f"Duplicate finding id(s) in response: {', '.join(duplicate_ids)}"
        )

    return sorted(results.values(), key=lambda d: canonical_index(d.dimension_id))


def parse_synthesis(raw: str) -> Synthesis:
    """Parse a synthesis response."""
    data = parse_json(raw)
    if not isinstance(data, dict):
        raise ResponseParseError("Expected a synthesis object")
    try:
        payload = SynthesisPayload.model_validate(data)
    except PydanticValidationError as e:
        raise ResponseParseError(f"Invalid synthesis payload: {e.error_count()} error(s)") from e
    return Synthesis(
        overview=payload.overview,
        strengths=tuple(payload.strengths),
        critical_fixes=tuple(payload.critical_fixes),
        action_plan=tuple(payload.action_plan),
    )
