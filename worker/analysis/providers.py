"""Analysis providers - unified interface for multimodal generation calls."""

import base64
import json
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from worker.analysis.models import (
    ProviderError,
    ProviderResponse,
    ProviderType,
    UsageStats,
)
from worker.scoring.dimensions import DIMENSIONS, DimensionId

# Upstream error bodies are logged, truncated
ERROR_BODY_LIMIT = 300


@dataclass
class ProviderConfig:
    """Configuration for an analysis provider."""

    api_key: str = ""
    base_url: str = ""
    model: str = "gemini-2.5-flash"
    timeout_seconds: float = 90.0
    temperature: float = 0.2
    max_output_tokens: int = 8192


class AnalysisProvider(ABC):
    """Abstract base class for analysis providers."""

    provider_type: ProviderType

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    async def generate(self, prompt: str, images: Sequence[bytes] = ()) -> ProviderResponse:
        """Run a single generation call with optional PNG images attached."""
        ...

    def _failure(
        self,
        error_type: str,
        message: str,
        latency_ms: float,
        detail: str = "",
    ) -> ProviderResponse:
        return ProviderResponse(
            provider=self.provider_type,
            model=self.config.model,
            content="",
            success=False,
            latency_ms=latency_ms,
            error=ProviderError(
                provider=self.provider_type,
                error_type=error_type,
                message=message,
                detail=detail,
            ),
        )

    def _http_failure(self, response: httpx.Response, latency_ms: float) -> ProviderResponse:
        return self._failure(
            "api_error",
            f"HTTP {response.status_code} from {self.provider_type.value}",
            latency_ms,
            detail=response.text[:ERROR_BODY_LIMIT],
        )


class GeminiProvider(AnalysisProvider):
    """Google Gemini generateContent REST provider - primary analysis provider."""

    provider_type = ProviderType.GEMINI

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.base_url:
            config.base_url = "https://generativelanguage.googleapis.com/v1beta"

    def _payload(self, prompt: str, images: Sequence[bytes]) -> dict:
        parts: list[dict] = [{"text": prompt}]
        for image in images:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": "image/png",
                        "data": base64.b64encode(image).decode("ascii"),
                    }
                }
            )
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    async def generate(self, prompt: str, images: Sequence[bytes] = ()) -> ProviderResponse:
        """Run generation via the Gemini REST API."""
        start_time = time.perf_counter()

        headers = {
            "x-goog-api-key": self.config.api_key,
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                response = await client.post(
                    f"{self.config.base_url}/models/{self.config.model}:generateContent",
                    headers=headers,
                    json=self._payload(prompt, images),
                )

                latency_ms = (time.perf_counter() - start_time) * 1000

                if response.status_code != 200:
                    return self._http_failure(response, latency_ms)

                data = response.json()
                candidates = data.get("candidates") or []
                parts = (candidates[0].get("content") or {}).get("parts", []) if candidates else []
                content = "".join(part.get("text", "") for part in parts)
                if not content:
                    reason = candidates[0].get("finishReason") if candidates else "no candidates"
                    return self._failure(
                        "empty_response",
                        f"Empty response from model ({reason})",
                        latency_ms,
                    )

                usage_data = data.get("usageMetadata", {})
                usage = UsageStats(
                    prompt_tokens=usage_data.get("promptTokenCount", 0),
                    completion_tokens=usage_data.get("candidatesTokenCount", 0),
                    total_tokens=usage_data.get("totalTokenCount", 0),
                )

                return ProviderResponse(
                    provider=self.provider_type,
                    model=self.config.model,
                    content=content,
                    usage=usage,
                    latency_ms=latency_ms,
                    success=True,
                )

        except httpx.TimeoutException:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return self._failure(
                "timeout",
                f"Request timed out after {self.config.timeout_seconds}s",
                latency_ms,
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return self._failure(
                "exception",
                f"Request to {self.provider_type.value} failed",
                latency_ms,
                detail=f"{type(e).__name__}: {e}",
            )


class OpenRouterProvider(AnalysisProvider):
    """OpenRouter chat-completions provider - alternative analysis provider."""

    provider_type = ProviderType.OPENROUTER

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        if not config.base_url:
            config.base_url = "https://openrouter.ai/api/v1"

    def _model_name(self) -> str:
        model = self.config.model
        # Bare Gemini model names are namespaced on OpenRouter
        if "/" not in model and model.startswith("gemini"):
            return f"google/{model}"
        return model

    def _payload(self, prompt: str, images: Sequence[bytes]) -> dict:
        content: list[dict] = [{"type": "text", "text": prompt}]
        for image in images:
            encoded = base64.b64encode(image).decode("ascii")
            content.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/png;base64,{encoded}"},
                }
            )
        return {
            "model": self._model_name(),
            "messages": [{"role": "user", "content": content}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_output_tokens,
            "response_format": {"type": "json_object"},
        }

    async def generate(self, prompt: str, images: Sequence[bytes] = ()) -> ProviderResponse:
        """Run generation via OpenRouter."""
        start_time = time.perf_counter()

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "X-Title": "PageGrade Landing Page Analyzer",
        }

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                response = await client.post(
                    f"{self.config.base_url}/chat/completions",
                    headers=headers,
                    json=self._payload(prompt, images),
                )

                latency_ms = (time.perf_counter() - start_time) * 1000

                if response.status_code != 200:
                    return self._http_failure(response, latency_ms)

                data = response.json()
                content = data["choices"][0]["message"]["content"] or ""
                if not content:
                    return self._failure(
                        "empty_response", "Empty response from model", latency_ms
                    )

                usage_data = data.get("usage", {})
                usage = UsageStats(
                    prompt_tokens=usage_data.get("prompt_tokens", 0),
                    completion_tokens=usage_data.get("completion_tokens", 0),
                    total_tokens=usage_data.get("total_tokens", 0),
                )

                return ProviderResponse(
                    provider=self.provider_type,
                    model=self._model_name(),
                    content=content,
                    usage=usage,
                    latency_ms=latency_ms,
                    success=True,
                )

        except httpx.TimeoutException:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return self._failure(
                "timeout",
                f"Request timed out after {self.config.timeout_seconds}s",
                latency_ms,
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return self._failure(
                "exception",
                f"Request to {self.provider_type.value} failed",
                latency_ms,
                detail=f"{type(e).__name__}: {e}",
            )


_DIMENSION_MARKER = re.compile(r"\*\*([AB][1-4]) - ")


class MockProvider(AnalysisProvider):
    """Mock provider for testing and offline development.

    Without scripted responses it answers every analyzer prompt with valid
    JSON for the dimensions the prompt asks about, scoring each at 60% of
    its maximum, and answers synthesis prompts with a fixed summary.
    """

    provider_type = ProviderType.MOCK

    def __init__(self, config: ProviderConfig | None = None):
        super().__init__(config or ProviderConfig(model="mock"))
        self.responses: dict[str, str] = {}
        self.should_fail: bool = False
        self.fail_count: int = 0
        self.fail_type: str = "mock_failure"
        self.calls: list[tuple[str, int]] = []

    def set_response(self, marker: str, content: str) -> None:
        """Answer any prompt containing ``marker`` with ``content``."""
        self.responses[marker] = content

    def set_failure_mode(
        self,
        should_fail: bool,
        fail_count: int = 1,
        fail_type: str = "mock_failure",
    ) -> None:
        """Configure failure behavior."""
        self.should_fail = should_fail
        self.fail_count = fail_count
        self.fail_type = fail_type

    async def generate(self, prompt: str, images: Sequence[bytes] = ()) -> ProviderResponse:
        """Return a mock generation response."""
        self.calls.append((prompt, len(images)))

        if self.should_fail and self.fail_count > 0:
            self.fail_count -= 1
            return self._failure(self.fail_type, "Simulated failure", 50.0)

        content = next(
            (text for marker, text in self.responses.items() if marker in prompt),
            None,
        )
        if content is None:
            content = self._generate_mock_response(prompt)

        usage = UsageStats(
            prompt_tokens=len(prompt.split()) * 4,
            completion_tokens=len(content.split()) * 4,
        )
        usage.total_tokens = usage.prompt_tokens + usage.completion_tokens

        return ProviderResponse(
            provider=self.provider_type,
            model=self.config.model,
            content=content,
            usage=usage,
            latency_ms=50.0,
            success=True,
        )

    def _generate_mock_response(self, prompt: str) -> str:
        requested = _DIMENSION_MARKER.findall(prompt)
        if not requested:
            return json.dumps(
                {
                    "overview": "The page communicates its offer clearly but under-uses social proof.",
                    "strengths": ["Clear headline", "Consistent palette", "Readable type"],
                    "criticalFixes": ["Add testimonials", "Strengthen the primary CTA", "Fix alt text"],
                    "actionPlan": ["Add social proof above the fold", "Rewrite CTA copy"],
                }
            )

        dimensions = []
        for code in requested:
            spec = DIMENSIONS[DimensionId(code)]
            score = round(spec.max_score * 0.6, 1)
            dimensions.append(
                {
                    "dimensionId": code,
                    "dimensionName": spec.name,
                    "score": score,
                    "maxScore": spec.max_score,
                    "subScores": [],
                    "findings": [
                        {
                            "id": f"{code}-1",
                            "name": f"{spec.name} gap",
                            "status": "warning",
                            "priority": "P1",
                            "score": score,
                            "maxScore": spec.max_score,
                            "whatWeFound": f"{spec.name} is adequate but inconsistent.",
                            "whyItMatters": "Inconsistency lowers conversion.",
                            "whatGoodLooksLike": "A consistent, deliberate treatment.",
                            "suggestedFix": f"Tighten {spec.name.lower()}.",
                            "effort": "Low",
                            "expectedImpact": "Moderate",
                        }
                    ],
                }
            )
        return json.dumps(dimensions)


def get_provider(
    provider_type: ProviderType,
    config: ProviderConfig | None = None,
) -> AnalysisProvider:
    """Factory function to get an analysis provider."""
    if config is None:
        config = ProviderConfig()

    providers: dict[ProviderType, type[AnalysisProvider]] = {
        ProviderType.GEMINI: GeminiProvider,
        ProviderType.OPENROUTER: OpenRouterProvider,
        ProviderType.MOCK: MockProvider,
    }

    provider_class = providers.get(provider_type)
    if provider_class is None:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return provider_class(config)
