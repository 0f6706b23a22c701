"""Custom exceptions and error handling."""

from enum import StrEnum
from typing import Any

from fastapi import status


class PageGradeError(Exception):
    """Base exception for PageGrade application."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(PageGradeError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            message=message,
            code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ValidationError(PageGradeError):
    """Malformed or disallowed input (URL, identifier). Raised before any external call."""

    def __init__(self, message: str, field: str | None = None, code: str = "validation_error"):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class CaptureKind(StrEnum):
    """Sub-kinds of capture failure."""

    CAPTURE = "capture"
    NETWORK = "network"
    TIMEOUT = "timeout"


class CaptureError(PageGradeError):
    """Page capture failed (unreachable host, navigation timeout, browser crash)."""

    _codes = {
        CaptureKind.CAPTURE: ("capture_error", status.HTTP_502_BAD_GATEWAY),
        CaptureKind.NETWORK: ("capture_network_error", status.HTTP_502_BAD_GATEWAY),
        CaptureKind.TIMEOUT: ("capture_timeout", status.HTTP_504_GATEWAY_TIMEOUT),
    }

    def __init__(self, message: str, url: str, kind: CaptureKind = CaptureKind.CAPTURE):
        code, status_code = self._codes.get(kind, self._codes[CaptureKind.CAPTURE])
        self.kind = kind
        self.url = url
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details={"url": url, "kind": kind.value},
        )

    @classmethod
    def network(cls, url: str) -> "CaptureError":
        return cls(
            f"Network error: could not reach {url}. Please check the URL and try again.",
            url=url,
            kind=CaptureKind.NETWORK,
        )

    @classmethod
    def timeout(cls, url: str, timeout_ms: int) -> "CaptureError":
        return cls(
            f"Timeout: the page at {url} took too long to load ({timeout_ms // 1000}s limit).",
            url=url,
            kind=CaptureKind.TIMEOUT,
        )


class AnalysisError(PageGradeError):
    """A dimension-analysis call failed or returned content that fails validation."""

    def __init__(self, stage: str, message: str, kind: str | None = None):
        self.stage = stage
        details: dict[str, Any] = {"stage": stage}
        if kind:
            details["kind"] = kind
        super().__init__(
            message=f"{stage} analysis failed: {message}",
            code="analysis_error",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
        )


class SynthesisError(PageGradeError):
    """The synthesis call failed or returned invalid content."""

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(
            message=f"Synthesis failed: {message}",
            code="synthesis_error",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"kind": kind} if kind else {},
        )


class PersistenceError(PageGradeError):
    """Report or screenshot storage failed."""

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(
            message=message,
            code="persistence_error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"id": identifier} if identifier else {},
        )
