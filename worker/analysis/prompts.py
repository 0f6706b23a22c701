"""Prompt templates for the three analyzer calls and the synthesis call."""

from collections.abc import Sequence

from worker.reports.contract import CampaignContext, DimensionResult
from worker.scoring.aggregator import aggregate_scores
from worker.scoring.dimensions import AnalyzerStage, DimensionSpec, dimensions_for_stage

# Input truncation limits (characters)
STRUCTURE_HTML_LIMIT = 15000
STRUCTURE_TEXT_LIMIT = 5000
TRUST_HTML_LIMIT = 10000

SYSTEM_PREAMBLE = (
    "You are a senior conversion rate optimization and design consultant with 30 years "
    "of experience analyzing landing pages. You combine deep expertise in UX design, "
    "copywriting, behavioral psychology, and web performance to provide actionable, "
    "evidence-based recommendations."
)

DIMENSION_SCHEMA = """{
  "dimensionId": "string",
  "dimensionName": "string",
  "score": number,
  "maxScore": number,
  "subScores": [
    { "id": "string", "name": "string", "score": number, "maxScore": number }
  ],
  "findings": [
    {
      "id": "string",
      "name": "string",
      "status": "critical" | "warning" | "success",
      "priority": "P0" | "P1" | "P2" | "P3",
      "score": number,
      "maxScore": number,
      "whatWeFound": "string",
      "whyItMatters": "string",
      "whatGoodLooksLike": "string",
      "suggestedFix": "string",
      "effort": "string",
      "expectedImpact": "string"
    }
  ]
}"""

SYNTHESIS_SCHEMA = """{
  "overview": "string (2-3 sentence narrative summary)",
  "strengths": ["string", "string", "string"],
  "criticalFixes": ["string", "string", "string"],
  "actionPlan": ["string (prioritized action items)"]
}"""


def context_clause(context: CampaignContext | None) -> str:
    """Campaign context block, or an empty string when nothing was supplied."""
    if context is None:
        return ""
    parts = []
    if context.traffic_source:
        parts.append(f"Traffic source: {context.traffic_source}")
    if context.campaign_goal:
        parts.append(f"Campaign goal: {context.campaign_goal}")
    if context.target_audience:
        parts.append(f"Target audience: {context.target_audience}")
    if not parts:
        return ""
    return "\n\nCampaign Context:\n" + "\n".join(parts)


def _dimension_brief(specs: Sequence[DimensionSpec]) -> str:
    lines = []
    for i, spec in enumerate(specs, start=1):
        lines.append(f"{i}. **{spec.id.value} - {spec.name}** (max score: {spec.max_score})")
        lines.append(f"   Evaluate: {spec.description}")
        lines.append("")
    return "\n".join(lines).rstrip()


def _response_instruction(count: int) -> str:
    if count == 1:
        shape = "an array with 1 dimension object"
    else:
        shape = f"an array of {count} dimension objects"
    return (
        f"Respond ONLY with valid JSON matching this exact schema - {shape}:\n"
        f"[{DIMENSION_SCHEMA}]"
    )


def visual_prompt(context: CampaignContext | None = None) -> str:
    """Prompt for the screenshot-only visual design call (A1-A3)."""
    specs = dimensions_for_stage(AnalyzerStage.VISUAL)
    return (
        f"{SYSTEM_PREAMBLE}\n\n"
        f"Analyze the provided landing page screenshot across these {len(specs)} dimensions:\n\n"
        f"{_dimension_brief(specs)}\n\n"
        "For each dimension, provide 2-4 findings with actionable recommendations."
        f"{context_clause(context)}\n\n"
        f"{_response_instruction(len(specs))}"
    )


def structure_prompt(html: str, text: str, context: CampaignContext | None = None) -> str:
    """Prompt for the markup and text structure call (A4, B1, B3, B4)."""
    specs = dimensions_for_stage(AnalyzerStage.STRUCTURE)
    return (
        f"{SYSTEM_PREAMBLE}\n\n"
        "Analyze the provided landing page HTML and text content across these "
        f"{len(specs)} dimensions:\n\n"
        f"{_dimension_brief(specs)}\n\n"
        "For each dimension, provide 2-4 findings with actionable recommendations.\n\n"
        f"PAGE HTML (truncated):\n{html[:STRUCTURE_HTML_LIMIT]}\n\n"
        f"PAGE TEXT CONTENT (truncated):\n{text[:STRUCTURE_TEXT_LIMIT]}"
        f"{context_clause(context)}\n\n"
        f"{_response_instruction(len(specs))}"
    )


def trust_prompt(html: str, context: CampaignContext | None = None) -> str:
    """Prompt for the screenshot plus markup trust call (B2)."""
    specs = dimensions_for_stage(AnalyzerStage.TRUST)
    return (
        f"{SYSTEM_PREAMBLE}\n\n"
        "Analyze the provided landing page screenshot and HTML for trust and persuasion:\n\n"
        f"{_dimension_brief(specs)}\n\n"
        "Provide 3-5 findings with actionable recommendations.\n\n"
        f"PAGE HTML (truncated):\n{html[:TRUST_HTML_LIMIT]}"
        f"{context_clause(context)}\n\n"
        f"{_response_instruction(len(specs))}"
    )


def _format_score(value: float) -> str:
    return f"{value:g}"


def dimension_summary(dimensions: Sequence[DimensionResult]) -> str:
    """Condensed per-dimension findings used as synthesis input."""
    blocks = []
    for dimension in dimensions:
        findings = "\n".join(
            f"- [{f.status.value}/{f.priority or 'unprioritized'}] {f.name}: {f.what_we_found}"
            for f in dimension.findings
        )
        header = (
            f"## {dimension.dimension_name} "
            f"({_format_score(dimension.score)}/{_format_score(dimension.max_score)})"
        )
        blocks.append(f"{header}\n{findings}" if findings else header)
    return "\n\n".join(blocks)


def synthesis_prompt(
    dimensions: Sequence[DimensionResult],
    context: CampaignContext | None = None,
) -> str:
    """Prompt for the executive summary over a set of dimension results."""
    totals = aggregate_scores(dimensions)
    return (
        f"{SYSTEM_PREAMBLE}\n\n"
        f"You have just completed a {len(dimensions)}-dimension analysis of a landing page. "
        "Here are the results:\n\n"
        f"Overall Score: {_format_score(totals.total_score)}/"
        f"{_format_score(totals.max_total_score)}\n\n"
        f"{dimension_summary(dimensions)}"
        f"{context_clause(context)}\n\n"
        "Synthesize these findings into an executive summary. Identify the 3 most impactful "
        "strengths, the 3 most critical fixes needed, and a prioritized action plan ordered "
        "by expected impact.\n\n"
        f"Respond ONLY with valid JSON matching this exact schema:\n{SYNTHESIS_SCHEMA}"
    )
