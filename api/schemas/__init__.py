"""Pydantic schemas package.

Use explicit imports:
    from api.schemas.analyze import AnalyzeRequest, ReportSummary
    from api.schemas.responses import ErrorResponse, SuccessResponse
"""
