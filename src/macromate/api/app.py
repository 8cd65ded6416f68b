"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from macromate.api.analytics import router as analytics_router
from macromate.api.auth import router as auth_router
from macromate.api.errors import register_error_handlers
from macromate.api.foods import router as foods_router
from macromate.api.meals import router as meals_router
from macromate.api.profile import router as profile_router
from macromate.app_logging import configure_logging
from macromate.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting in %s environment", container.settings.environment)
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="MacroMate", lifespan=lifespan)
    app.state.container = container
    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(meals_router)
    app.include_router(foods_router)
    app.include_router(analytics_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
