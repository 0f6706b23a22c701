"""Dimension analyzer: the three scoring calls plus the synthesis call.

Each method issues exactly one provider call. Transport failures and
responses that fail validation are raised as ``AnalysisError`` (tagged with
the analyzer stage) or ``SynthesisError``; nothing is retried here.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog

from api.config import Settings
from api.exceptions import AnalysisError, SynthesisError
from api.metrics import record_provider_call
from worker.analysis import prompts
from worker.analysis.models import ProviderResponse, ProviderType
from worker.analysis.parser import ResponseParseError, parse_dimensions, parse_synthesis
from worker.analysis.providers import AnalysisProvider, ProviderConfig, get_provider
from worker.reports.contract import CampaignContext, DimensionResult, Synthesis
from worker.scoring.dimensions import AnalyzerStage, dimensions_for_stage

logger = structlog.get_logger(__name__)


class DimensionAnalyzer(ABC):
    """Abstract analysis collaborator used by the pipeline."""

    @abstractmethod
    async def analyze_visual(
        self, screenshot: bytes, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        """Score A1-A3 from the screenshot."""
        ...

    @abstractmethod
    async def analyze_structure(
        self, html: str, text: str, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        """Score A4, B1, B3 and B4 from markup and visible text."""
        ...

    @abstractmethod
    async def analyze_trust(
        self, screenshot: bytes, html: str, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        """Score B2 from the screenshot and markup."""
        ...

    @abstractmethod
    async def synthesize(
        self, dimensions: Sequence[DimensionResult], context: CampaignContext | None = None
    ) -> Synthesis:
        """Produce the executive summary over a set of dimension results."""
        ...


class ProviderAnalyzer(DimensionAnalyzer):
    """Analyzer backed by a generative analysis provider."""

    def __init__(self, provider: AnalysisProvider):
        self.provider = provider

    async def _generate(self, prompt: str, images: Sequence[bytes]) -> ProviderResponse:
        response = await self.provider.generate(prompt, images)
        record_provider_call(self.provider.provider_type.value, response.success)
        return response

    async def _analyze(
        self,
        stage: AnalyzerStage,
        prompt: str,
        images: Sequence[bytes] = (),
    ) -> list[DimensionResult]:
        response = await self._generate(prompt, images)

        if not response.success:
            error = response.error
            logger.warning(
                "analysis_call_failed",
                stage=stage.value,
                provider=self.provider.provider_type.value,
                error=error.to_dict() if error else None,
            )
            raise AnalysisError(
                stage.value,
                error.message if error else "provider call failed",
                kind=error.error_type if error else None,
            )

        expected = [spec.id for spec in dimensions_for_stage(stage)]
        try:
            results = parse_dimensions(response.content, expected)
        except ResponseParseError as e:
            logger.warning("analysis_response_invalid", stage=stage.value, error=str(e))
            raise AnalysisError(stage.value, str(e), kind="schema") from e

        logger.info(
            "analysis_call_completed",
            stage=stage.value,
            dimensions=[d.dimension_id.value for d in results],
            latency_ms=round(response.latency_ms, 2),
            total_tokens=response.usage.total_tokens,
        )
        return results

    async def analyze_visual(
        self, screenshot: bytes, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        return await self._analyze(
            AnalyzerStage.VISUAL,
            prompts.visual_prompt(context),
            [screenshot],
        )

    async def analyze_structure(
        self, html: str, text: str, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        return await self._analyze(
            AnalyzerStage.STRUCTURE,
            prompts.structure_prompt(html, text, context),
        )

    async def analyze_trust(
        self, screenshot: bytes, html: str, context: CampaignContext | None = None
    ) -> list[DimensionResult]:
        return await self._analyze(
            AnalyzerStage.TRUST,
            prompts.trust_prompt(html, context),
            [screenshot],
        )

    async def synthesize(
        self, dimensions: Sequence[DimensionResult], context: CampaignContext | None = None
    ) -> Synthesis:
        response = await self._generate(prompts.synthesis_prompt(dimensions, context), ())

        if not response.success:
            error = response.error
            logger.warning(
                "synthesis_call_failed",
                provider=self.provider.provider_type.value,
                error=error.to_dict() if error else None,
            )
            raise SynthesisError(
                error.message if error else "provider call failed",
                kind=error.error_type if error else None,
            )

        try:
            synthesis = parse_synthesis(response.content)
        except ResponseParseError as e:
            logger.warning("synthesis_response_invalid", error=str(e))
            raise SynthesisError(str(e), kind="schema") from e

        logger.info(
            "synthesis_call_completed",
            dimensions=len(dimensions),
            latency_ms=round(response.latency_ms, 2),
            total_tokens=response.usage.total_tokens,
        )
        return synthesis


def get_analyzer(settings: Settings) -> DimensionAnalyzer:
    """Build the analyzer for the configured provider."""
    provider = get_provider(
        ProviderType(settings.analysis_provider),
        ProviderConfig(
            api_key=settings.analysis_api_key,
            model=settings.analysis_model,
            timeout_seconds=settings.analysis_timeout_seconds,
            temperature=settings.analysis_temperature,
            max_output_tokens=settings.analysis_max_output_tokens,
        ),
    )
    return ProviderAnalyzer(provider)
