"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from api.config import Settings, get_settings
from worker.pipeline.orchestrator import AnalysisPipeline, get_pipeline
from worker.reports.storage import ReportStorage

__all__ = ["SettingsDep", "StorageDep", "PipelineDep"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_storage(settings: SettingsDep) -> ReportStorage:
    """Get report storage rooted at the configured data directory."""
    return ReportStorage(settings.data_dir)


StorageDep = Annotated[ReportStorage, Depends(get_storage)]


def get_analysis_pipeline(settings: SettingsDep) -> AnalysisPipeline:
    """Get an analysis pipeline for the configured capture and provider."""
    return get_pipeline(settings)


PipelineDep = Annotated[AnalysisPipeline, Depends(get_analysis_pipeline)]
