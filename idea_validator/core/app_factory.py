"""Application factory for the FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated apps with injected services.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from idea_validator.api.routes import health_router, ideas_router, quota_router
from idea_validator.core.config import settings
from idea_validator.core.container import ServiceContainer
from idea_validator.core.exception_handlers import setup_exception_handlers
from idea_validator.core.logging import configure_logging
from idea_validator.core.middleware import request_id_middleware
from idea_validator.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        container: Pre-built services; built from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container = container or ServiceContainer(settings)
        logger.info("app.started", extra={"app_env": settings.app_env})
        try:
            yield
        finally:
            await app.state.container.aclose()
            logger.info("app.stopped")

    app = FastAPI(
        title="Idea Validator API",
        description=(
            "Validates business ideas: extracts keywords, gathers related news, "
            "returns a structured market analysis and answers follow-up questions. "
            "Each idea and each follow-up question consumes one question credit."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(ideas_router, prefix="/v1")
    app.include_router(quota_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
