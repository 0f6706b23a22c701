"""Optional Sentry error tracking.

Only server-side and upstream failures are reported: client errors (4xx)
are dropped, and analysis failures are tagged with their stage so capture,
provider and storage problems can be told apart.
"""

from __future__ import annotations

import sentry_sdk
import structlog
from fastapi import HTTPException
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from api.config import get_settings
from api.exceptions import PageGradeError

logger = structlog.get_logger(__name__)

RELEASE = "pagegrade@0.1.0"

SCRUBBED_HEADERS = ("authorization", "cookie", "x-api-key", "x-goog-api-key")
IGNORED_TRANSACTIONS = frozenset(["/api/health", "/api/ready", "/metrics"])

# Error details promoted to searchable tags
TAGGED_DETAILS = ("stage", "kind")

_sentry_initialized = False


def init_sentry() -> bool:
    """Initialize Sentry when SENTRY_DSN is set. Returns whether it is active."""
    global _sentry_initialized

    settings = get_settings()
    if not settings.sentry_dsn:
        logger.info("sentry_skipped", reason="dsn_not_configured")
        return False
    if _sentry_initialized:
        return True

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            release=RELEASE,
            sample_rate=1.0,
            traces_sample_rate=0.1 if settings.is_production else 1.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
                HttpxIntegration(),
                AsyncioIntegration(),
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=_before_send,
            before_send_transaction=_before_send_transaction,
        )
        sentry_sdk.set_tag("analysis_provider", settings.analysis_provider)
    except Exception as e:
        logger.error("sentry_init_failed", error=str(e))
        return False

    _sentry_initialized = True
    logger.info("sentry_initialized", environment=settings.env)
    return True


def _is_client_error(exc: BaseException) -> bool:
    if isinstance(exc, HTTPException | PageGradeError):
        return 400 <= exc.status_code < 500
    return False


def _before_send(event: dict, hint: dict) -> dict | None:
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        if _is_client_error(exc_value):
            return None

    headers = (event.get("request") or {}).get("headers")
    if headers:
        for header in SCRUBBED_HEADERS:
            if header in headers:
                headers[header] = "[Filtered]"
    return event


def _before_send_transaction(event: dict, hint: dict) -> dict | None:  # noqa: ARG001
    if event.get("transaction") in IGNORED_TRANSACTIONS:
        return None
    return event


def error_tags(exception: BaseException) -> dict[str, str]:
    """Tags describing an application error: its code plus stage/kind when present."""
    if not isinstance(exception, PageGradeError):
        return {}
    tags = {"error_code": exception.code}
    for key in TAGGED_DETAILS:
        value = exception.details.get(key)
        if value:
            tags[key] = str(value)
    return tags


def capture_exception(exception: Exception) -> str | None:
    """Report an exception. Returns the event id, or None when Sentry is off."""
    if not _sentry_initialized:
        return None
    with sentry_sdk.new_scope() as scope:
        for key, value in error_tags(exception).items():
            scope.set_tag(key, value)
        event_id: str | None = sentry_sdk.capture_exception(exception)
    return event_id
