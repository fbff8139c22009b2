"""DevPath API application.

Wires the v1 routes (public analysis and roadmaps, per-user profile,
project and sync endpoints) behind CORS, request ids and Prometheus
timings. DevPathError subclasses become the JSON error envelope.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from app.config import get_settings
from app.exceptions import DevPathError
from app.logging_config import get_logger, setup_logging
from app.metrics import APP_INFO, HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and open the shared Redis pool for the app lifetime."""
    settings = get_settings()

    setup_logging()
    APP_INFO.info(
        {
            "version": settings.app_version,
            "environment": settings.environment.value,
        }
    )
    logger.info(
        "application_starting",
        version=settings.app_version,
        environment=settings.environment.value,
    )

    from app.dependencies import close_redis, init_redis

    await init_redis()
    logger.info("redis_connected")

    yield

    logger.info("application_shutting_down")
    await close_redis()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the DevPath API. Docs are served only in development."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Rule-based GitHub portfolio analysis, career readiness scoring "
            "and skill-gap roadmaps"
        ),
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    if settings.metrics_enabled:
        metrics_app = make_asgi_app()
        app.mount("/metrics", metrics_app)

    @app.middleware("http")
    async def request_middleware(request: Request, call_next) -> Response:
        """Tag each request with an id and record its timing per route."""
        request_id = str(uuid.uuid4())
        start_time = time.perf_counter()

        # Every log line of this request carries the id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response: Response = await call_next(request)

        duration = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.4f}"

        # Label by route template so user ids never become label values
        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        HTTP_REQUESTS_TOTAL.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response

    @app.exception_handler(DevPathError)
    async def devpath_error_handler(_request: Request, exc: DevPathError) -> JSONResponse:
        """Render domain errors as {"error": {code, message, details}}."""
        logger.warning(
            "devpath_error",
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Anything else is logged and answered with a bare INTERNAL_ERROR."""
        logger.exception("unhandled_error", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred.",
                }
            },
        )

    from api.v1.router import api_v1_router

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check() -> dict:
        """Liveness check for the container platform."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment.value,
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,
    )
