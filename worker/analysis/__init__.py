"""Analysis provider layer for landing page scoring.

This package sends the captured page to a generative analysis provider in
three scoring calls (visual, structure, trust) and one synthesis call, and
validates each response into report entities.

Use explicit imports:
    from worker.analysis.analyzer import DimensionAnalyzer, ProviderAnalyzer, get_analyzer
    from worker.analysis.providers import AnalysisProvider, MockProvider, get_provider
    from worker.analysis.parser import parse_dimensions, parse_synthesis
"""

__all__ = [
    # Analyzer
    "DimensionAnalyzer",
    "ProviderAnalyzer",
    "get_analyzer",
    # Providers
    "AnalysisProvider",
    "GeminiProvider",
    "OpenRouterProvider",
    "MockProvider",
    "ProviderConfig",
    "get_provider",
    # Models
    "ProviderError",
    "ProviderResponse",
    "ProviderType",
    "UsageStats",
    # Parsing
    "ResponseParseError",
    "parse_dimensions",
    "parse_synthesis",
    "strip_code_fences",
]
