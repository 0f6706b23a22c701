"""Structured logging for the API and the CLI.

Both entrypoints call ``setup_logging`` once. Events are snake_case names
with key/value context; request ids are merged in from contextvars.
"""

import logging
import sys
from typing import Any, TextIO

import structlog

from api.config import Settings, get_settings

SERVICE_NAME = "pagegrade"

# Third-party loggers that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _renderer(settings: Settings) -> Any:
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=not settings.is_test,
        exception_formatter=structlog.dev.plain_traceback,
    )


def setup_logging(stream: TextIO | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        stream: Destination for log lines. Defaults to stdout; the CLI
            passes stderr so its own output stays machine-readable.
    """
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    stream = stream or sys.stdout

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_service,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.is_production:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(settings))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=stream, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
