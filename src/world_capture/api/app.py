"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from world_capture.api.gateway import router as gateway_router
from world_capture.api.records import router as records_router
from world_capture.app_logging import configure_logging
from world_capture.containers import AppContainer
from world_capture.domain.records import CloneRecord


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    def log_transition(record: CloneRecord) -> None:
        logger.info("Record %s is now %s", record.id, record.status.value)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        unsubscribe = app.state.container.generation_service.subscribe(
            log_transition
        )
        yield
        unsubscribe()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(gateway_router)
    app.include_router(records_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
