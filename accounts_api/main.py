"""
Main FastAPI application entry point.
Configures the application, middleware, and routes.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from accounts_api.api.errors import register_error_handlers
from accounts_api.api.middleware import SecurityHeadersMiddleware
from accounts_api.api.routes import health, users
from accounts_api.core.config import Settings, get_settings
from accounts_api.core.logging import get_logger, setup_logging
from accounts_api.db.database import BootstrapState, DatabaseManager
from accounts_api.services.health_service import HealthService, HostMetrics

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[DatabaseManager] = None,
    metrics: Optional[HostMetrics] = None,
) -> FastAPI:
    """
    Build the application around one settings object.

    Args:
        settings: Application settings (read from the environment if omitted)
        database: Database manager (a MongoClient-backed one if omitted)
        metrics: Host metrics source for the health check (psutil if omitted)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(settings)
    database = database or DatabaseManager(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan handler.
        Connects to the database on startup and closes it on shutdown.
        """
        logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

        if await database.connect() is BootstrapState.FAILED:
            logger.error(
                f"Giving up on the database after {database.attempts} attempts, exiting"
            )
            raise SystemExit(1)

        logger.info("Application startup complete")

        yield

        logger.info("Shutting down application...")
        database.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.health_service = HealthService(settings, database, metrics)

    # Middleware added later wraps the earlier ones; the catch-all from
    # register_error_handlers sits innermost so every request gets logged.
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["content-type", "accept"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"-> {request.method} {request.url.path} {response.status_code} - {elapsed_ms:.1f} ms"
        )
        return response

    app.add_middleware(
        SecurityHeadersMiddleware,
        csp_exempt_paths=(app.docs_url, app.redoc_url),
    )
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    app.include_router(health.router, prefix=settings.API_V1_PREFIX)
    app.include_router(users.router, prefix=settings.API_V1_PREFIX)

    return app


def run() -> None:
    """Serve the application with uvicorn on the configured port."""
    settings = get_settings()
    uvicorn.run(
        "accounts_api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.PORT,
    )


if __name__ == "__main__":
    run()
