"""Pipeline orchestration for landing page analysis.

Use explicit imports:
    from worker.pipeline.orchestrator import AnalysisPipeline, PipelineResult, ComparisonResult
    from worker.pipeline.concurrency import gather_or_abort
"""

__all__ = [
    "AnalysisPipeline",
    "PipelineResult",
    "ComparisonResult",
    "check_dimension_coverage",
    "get_pipeline",
    "gather_or_abort",
]
