"""Lifecycle management for the application."""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from cache_service.core.config import settings
from cache_service.core.logging import get_logger
from cache_service.core.container import ServiceContainer, set_container

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("Starting cache service...")

    container = ServiceContainer()

    try:
        await container.initialize(settings)

        # Set global container for module-level access
        set_container(container)

        # Store container in app state for route access
        app.state.container = container

        logger.info("Cache service started successfully")

    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        raise

    yield

    logger.info("Shutting down cache service...")
    await container.shutdown()
    set_container(None)
    logger.info("Cache service shut down")
