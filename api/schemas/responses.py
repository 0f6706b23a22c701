"""Envelopes shared by every /v1 endpoint.

Payloads are returned as ``{"data": ..., "meta": {...}}``. Failures are
rendered by the app's exception handlers as ``{"error": {...}}``.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ErrorDetail(BaseModel):
    """One failure, identified by a stable code."""

    code: str = Field(..., examples=["not_found", "capture_timeout", "analysis_error"])
    message: str
    field: str | None = Field(None, description="Request field at fault")
    details: dict[str, Any] | None = Field(
        None, description="Failure context such as stage, kind, url or id"
    )


class ErrorResponse(BaseModel):
    error: ErrorDetail


class SuccessResponse(BaseModel, Generic[DataT]):
    """Payload plus report id, kind or listing total in ``meta``."""

    data: DataT
    meta: dict[str, Any] = Field(default_factory=dict)
