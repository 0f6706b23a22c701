"""Report assembly, JSON contract and storage.

This package provides the immutable report entities, the builder that
assembles them from analysis results, and the filesystem storage that
persists them with their screenshots.

Use explicit imports:
    from worker.reports.contract import Report, ComparisonReport, report_from_dict
    from worker.reports.builder import ReportBuilder
    from worker.reports.storage import ReportStorage
"""

__all__ = [
    # Contract
    "SubScore",
    "Finding",
    "FindingStatus",
    "Priority",
    "DimensionResult",
    "Synthesis",
    "CampaignContext",
    "Report",
    "ComparisonReport",
    "ReportMetadata",
    "ReportKind",
    "report_from_dict",
    # Builder
    "ReportBuilder",
    "ReportBuilderConfig",
    # Storage
    "ReportStorage",
]
