"""
FastAPI application main module.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

import core.logging  # noqa: F401  Ensure logging is configured
from api.config.settings import settings
from api.controllers.contingency_controller import router as contingency_router
from api.controllers.document_controller import router as document_router
from api.controllers.health_controller import router as health_router
from api.controllers.tracking_controller import router as tracking_router
from api.dependencies import ServiceContainer
from api.middleware import (
    APITokenMiddleware,
    add_metrics_endpoint,
    add_observability_middleware,
)
from api.models.responses import ErrorResponse


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create the FastAPI application. A prebuilt container replaces the default wiring."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting DTE Contingency API...")
        app.state.container = container or ServiceContainer.from_settings(settings)
        await app.state.container.startup()
        logger.info("DTE Contingency API started successfully")

        yield

        logger.info("Shutting down DTE Contingency API...")
        await app.state.container.shutdown()
        app.state.container = None
        logger.info("DTE Contingency API shutdown complete")

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Add API token middleware first (before observability)
    app.add_middleware(APITokenMiddleware)
    logger.info("API token authentication middleware enabled")

    add_observability_middleware(app)
    add_metrics_endpoint(app)
    logger.info("Observability middleware and metrics endpoint enabled")

    # Add trusted host middleware in production (without HTTPS redirect)
    if settings.is_production():
        app.add_middleware(
            TrustedHostMiddleware, allowed_hosts=settings.get_allowed_hosts()
        )
        logger.info(
            f"Production security middleware enabled: trusted hosts {settings.get_allowed_hosts()}"
        )

    app.include_router(document_router)
    app.include_router(contingency_router)
    app.include_router(tracking_router)
    app.include_router(health_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception in {request.url.path}: {exc}")
        error_response = ErrorResponse(
            error="InternalServerError", message="An unexpected error occurred"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response.model_dump(mode="json"),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info",
    )
