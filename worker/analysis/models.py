"""Data models for the analysis provider layer."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class ProviderType(StrEnum):
    """Supported analysis providers."""

    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    MOCK = "mock"


@dataclass
class UsageStats:
    """Token usage tracking."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ProviderError:
    """Error from a provider.

    ``message`` is safe to show callers. ``detail`` carries the upstream
    body or exception text and only goes to logs.
    """

    provider: ProviderType
    error_type: str  # api_error | timeout | exception | empty_response | mock_failure
    message: str
    detail: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "provider": self.provider.value,
            "error_type": self.error_type,
            "message": self.message,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ProviderResponse:
    """Response from a single generation call."""

    provider: ProviderType
    model: str

    content: str

    usage: UsageStats = field(default_factory=UsageStats)
    latency_ms: float = 0.0

    success: bool = True
    error: ProviderError | None = None
