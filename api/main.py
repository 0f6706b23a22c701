"""PageGrade HTTP API: app factory, middleware stack and error envelopes.

Run with `uvicorn api.main:app`.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from api.config import get_settings
from api.exceptions import PageGradeError
from api.logging import setup_logging
from api.schemas.responses import ErrorDetail, ErrorResponse
from api.sentry import capture_exception, init_sentry

# Initialize logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup, warn about missing provider credentials, enable Sentry."""
    settings = get_settings()
    logger.info(
        "Starting PageGrade API",
        env=settings.env,
        debug=settings.debug,
        provider=settings.analysis_provider,
        version="0.1.0",
    )
    if not settings.analysis_enabled:
        logger.warning("analysis_provider_unconfigured", provider=settings.analysis_provider)

    init_sentry()

    yield

    logger.info("Shutting down PageGrade API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PageGrade Landing Page Analyzer",
        description="Score landing pages on eight conversion dimensions",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Middleware (order matters - first added = last executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from api.metrics import MetricsMiddleware
    from api.middleware import LoggingMiddleware, RequestIDMiddleware

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    from api.metrics import get_metrics, get_metrics_content_type
    from api.routers import health, v1

    app.include_router(health.router, prefix="/api")
    app.include_router(v1.router, prefix="/v1")

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus scrape endpoint."""
        return Response(content=get_metrics(), media_type=get_metrics_content_type())

    return app


def _error_body(
    code: str,
    message: str,
    field: str | None = None,
    details: dict | None = None,
) -> dict:
    error = ErrorResponse(
        error=ErrorDetail(code=code, message=message, field=field, details=details or None)
    )
    return error.model_dump(exclude_none=True)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as `{"error": {code, message, field?, details?}}`."""

    @app.exception_handler(PageGradeError)
    async def pagegrade_error_handler(request: Request, exc: PageGradeError) -> ORJSONResponse:
        """Handle application errors with their own status and code."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Application error",
            error_code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        if exc.status_code >= 500:
            capture_exception(exc)
        return ORJSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, details=jsonable_encoder(exc.details)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Malformed request bodies and query parameters (422)."""
        errors = jsonable_encoder(exc.errors())
        first_error = errors[0] if errors else {"msg": "Validation error"}

        # Extract field path
        field = ".".join(str(loc) for loc in first_error.get("loc", [])[1:])

        logger.warning(
            "Validation error",
            path=request.url.path,
            errors=errors,
        )
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                "validation_error",
                first_error.get("msg", "Validation error"),
                field=field or None,
                details={"errors": errors},
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        """Anything unexpected becomes a 500 without leaking internals."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )
        capture_exception(exc)
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("internal_error", "An unexpected error occurred"),
        )


app = create_app()
