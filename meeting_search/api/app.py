"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics and
health checks, and owns the search context for the life of the process.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from meeting_search import __version__
from meeting_search.api.routes import router
from meeting_search.config import Settings, get_settings
from meeting_search.context import SearchContext
from meeting_search.documents.sources import (
    InMemoryRecordSource,
    JSONFileRecordSource,
    RecordSource,
)
from meeting_search.exceptions import ErrorCode, MeetingSearchError
from meeting_search.logging_config import get_logger, setup_logging
from meeting_search.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)

logger = get_logger(__name__)

SEARCH_UNAVAILABLE_MESSAGE = "Search is temporarily unavailable"
SERVICE_UNAVAILABLE_MESSAGE = "Service is temporarily unavailable"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def build_record_source(settings: Settings) -> RecordSource:
    """Load the configured record export, or start with an empty source."""
    if settings.search.records_path is not None:
        return JSONFileRecordSource(settings.search.records_path)
    return InMemoryRecordSource()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the search context unless one was injected, and validates the
    vector index configuration before serving traffic.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting Meeting Search",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    owns_context = getattr(app.state, "search_context", None) is None
    if owns_context:
        app.state.search_context = SearchContext.from_settings(settings)
        await app.state.search_context.vector_store.connect()

    if getattr(app.state, "record_source", None) is None:
        app.state.record_source = build_record_source(settings)

    yield

    if owns_context:
        await app.state.search_context.close()
    logger.info("Shutting down Meeting Search")


def create_app(
    context: SearchContext | None = None,
    record_source: RecordSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Pre-built search context (tests, embedding in other apps).
        record_source: Pre-built system-of-record adapter.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Meeting Search",
        description="Semantic indexing and search over meeting transcripts",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.search_context = context
    app.state.record_source = record_source

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(MeetingSearchError, meeting_search_exception_handler)

    app.include_router(router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Metrics"])

    return app


async def meeting_search_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert MeetingSearchError into a structured JSON response.

    Server-side failures are reported with a generic message; the internal
    error text only goes to the log.
    """
    if not isinstance(exc, MeetingSearchError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": INTERNAL_ERROR_MESSAGE,
                    "details": {},
                }
            },
        )

    logger.error(
        f"Request failed: {exc.message}",
        extra={
            "error_code": exc.code.value,
            "path": request.url.path,
            "details": exc.details,
        },
    )

    status_code = _get_status_code(exc.code)
    if status_code < 500:
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    if status_code == 503:
        message = (
            SEARCH_UNAVAILABLE_MESSAGE
            if request.url.path.endswith("/search")
            else SERVICE_UNAVAILABLE_MESSAGE
        )
    else:
        message = INTERNAL_ERROR_MESSAGE

    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code.value, "message": message, "details": {}}},
    )


def _get_status_code(code: ErrorCode) -> int:
    """Map error code to HTTP status code."""
    if code in (ErrorCode.VALIDATION_ERROR, ErrorCode.INVALID_QUERY):
        return 400

    if code in (ErrorCode.DOCUMENT_NOT_FOUND, ErrorCode.COLLECTION_NOT_FOUND):
        return 404

    if code is ErrorCode.COLLECTION_EXISTS:
        return 409

    # Dependencies (model, vector index) are down or degraded
    if code in (
        ErrorCode.EMBEDDING_SERVICE_ERROR,
        ErrorCode.EMBEDDING_MODEL_UNAVAILABLE,
        ErrorCode.VECTOR_STORE_ERROR,
        ErrorCode.VECTOR_STORE_TIMEOUT,
        ErrorCode.RETRIEVAL_ERROR,
    ):
        return 503

    return 500


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint.

    Returns:
        Health status with version and timestamp.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness probe.

    The model loads lazily, so a cold model still counts as ready; only a
    missing context does not.
    """
    context: SearchContext | None = getattr(request.app.state, "search_context", None)
    checks: dict[str, str] = {"config": "ok"}
    if context is None:
        checks["search_context"] = "missing"
    else:
        checks["search_context"] = "ok"
        checks.update(context.readiness())

    ready = checks["search_context"] == "ok"

    return {
        "status": "ready" if ready else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe.

    Returns:
        Liveness status.
    """
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


app = create_app()
