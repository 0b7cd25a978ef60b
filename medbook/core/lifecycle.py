"""
Application lifecycle management using the FastAPI lifespan pattern.

Startup verifies configuration; shutdown closes collaborator clients and
disposes the database engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from medbook.core.container import SchedulingContainer
from medbook.database.async_db import dispose_async_engine

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup checks and graceful shutdown for one application.
    """

    def __init__(self, container: SchedulingContainer) -> None:
        self._container = container
        self._initialized = False

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")
        self._verify_configurations()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")
        await self._container.close()
        await dispose_async_engine()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        settings = self._container.settings
        logger.info(f"Operating timezone: {settings.OPERATING_TIMEZONE}")

        if self._container.payment_gateway is None:
            logger.warning("PAYMENT_SERVICE_URL not configured - payment orders will not be created")
        if self._container.notification_sender is None:
            logger.warning("NOTIFICATION_SERVICE_URL not configured - notifications are disabled")
        if not settings.SENTRY_DSN:
            logger.info("SENTRY_DSN not configured - error tracking disabled")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
        app.state.container = container
    """
    lifecycle = LifecycleManager(app.state.container)

    # Startup
    await lifecycle.startup()

    yield  # Application runs here

    # Shutdown
    await lifecycle.shutdown()
