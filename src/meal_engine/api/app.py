"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from meal_engine.api.accounts import router as accounts_router
from meal_engine.api.admin import router as admin_router
from meal_engine.api.errors import register_error_handlers
from meal_engine.api.subscriptions import router as subscriptions_router
from meal_engine.app_logging import configure_logging
from meal_engine.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        scheduler = app.state.container.scheduler
        if scheduler is not None:
            scheduler.start()
            logger.info("Settlement sweep enabled")
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Meal Subscription Engine", lifespan=lifespan)
    app.state.container = container
    register_error_handlers(app)

    app.include_router(admin_router)
    app.include_router(subscriptions_router)
    app.include_router(accounts_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
