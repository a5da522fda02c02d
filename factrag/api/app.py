"""FastAPI application entry point.

Configures the application with logging, exception handling, metrics and
health checks. Service handles are built once in the lifespan.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from factrag import __version__
from factrag.api.routes import router
from factrag.config import get_settings
from factrag.exceptions import ErrorCode, FactRAGError
from factrag.logging_config import get_logger, setup_logging
from factrag.observability.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
)
from factrag.services import Services

logger = get_logger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.EMBEDDING_INPUT_TOO_LONG: 400,
    ErrorCode.LLM_CONTEXT_LENGTH: 400,
    ErrorCode.COLLECTION_NOT_FOUND: 404,
    ErrorCode.COLLECTION_EXISTS: 409,
    ErrorCode.DIMENSION_MISMATCH: 409,
    ErrorCode.EMBEDDING_RATE_LIMIT: 429,
    ErrorCode.LLM_RATE_LIMIT: 429,
    ErrorCode.EMBEDDING_SERVICE_ERROR: 502,
    ErrorCode.EMBEDDING_AUTH_ERROR: 502,
    ErrorCode.EMBEDDING_DIMENSION_MISMATCH: 502,
    ErrorCode.LLM_SERVICE_ERROR: 502,
    ErrorCode.LLM_AUTH_ERROR: 502,
    ErrorCode.VECTOR_STORE_ERROR: 502,
    ErrorCode.WRITE_NOT_ACKNOWLEDGED: 502,
    ErrorCode.LLM_TIMEOUT: 504,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the services and makes sure the collection exists. A store that
    is down at startup leaves the app running; readiness reports it.
    """
    settings = get_settings()
    setup_logging(level=settings.log_level)
    logger.info(
        "Starting factrag",
        extra={
            "version": __version__,
            "environment": settings.environment.value,
        },
    )

    services = Services.from_settings(settings)
    app.state.services = services
    try:
        await services.ensure_collection()
    except FactRAGError as e:
        logger.warning(
            f"Collection not ready at startup: {e.message}",
            extra={"error_code": e.code.value},
        )

    yield

    logger.info("Shutting down factrag")
    await services.close()
    app.state.services = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="factrag",
        description="Store facts as embeddings and answer questions from them",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.services = None

    app.add_middleware(MetricsMiddleware)
    app.add_exception_handler(FactRAGError, factrag_exception_handler)

    app.add_api_route("/health", health_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/ready", readiness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/health/live", liveness_check, methods=["GET"], tags=["Health"])
    app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["Metrics"])
    app.include_router(router)

    return app


async def factrag_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert FactRAGError into a structured JSON response."""
    if not isinstance(exc, FactRAGError):
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": str(exc),
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

    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 500),
        content=exc.to_dict(),
    )


async def health_check() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def readiness_check(request: Request) -> dict[str, Any]:
    """Readiness probe: the services exist and the collection is there."""
    checks: dict[str, str] = {"config": "ok"}

    services: Services | None = request.app.state.services
    if services is None:
        checks["vector_store"] = "not_configured"
    else:
        try:
            exists = await services.vector_store.collection_exists(services.collection)
            checks["vector_store"] = "ok" if exists else "collection_missing"
        except FactRAGError as e:
            checks["vector_store"] = f"unavailable: {e.code.value}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def liveness_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}


async def metrics_endpoint() -> Response:
    """Prometheus exposition."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


app = create_app()
