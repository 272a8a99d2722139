"""Application startup and shutdown events."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from prometheus_client import Counter

from locator.core.config import settings
from locator.core.logging import configure_logging
from locator.location.service import get_location_service, reset_location_service

# Prometheus metrics
REQUESTS_TOTAL = Counter(
    "locator_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "path"],
)

RESPONSES_TOTAL = Counter(
    "locator_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

logger: logging.Logger = logging.getLogger("locator.core.events")


def create_start_app_handler(app: Any) -> Callable[[], Awaitable[None]]:
    """Create startup event handler.

    Args:
        app: FastAPI application instance

    Returns:
        Startup handler function
    """

    async def start_app() -> None:
        configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)

        # Build the service eagerly so the gazetteer is loaded once at startup
        service = get_location_service()
        app.state.location_service = service

        logger.info(
            "Application startup complete - "
            f"Gazetteer: {len(service.gazetteer)} places, "
            f"Reverse proxy: {settings.LOCATION_REVERSE_PROXY_URL}, "
            f"Cache: {settings.LOCATION_CACHE_BACKEND if settings.LOCATION_CACHE_ENABLED else 'disabled'}"
        )

    return start_app


def create_stop_app_handler(app: Any) -> Callable[[], Awaitable[None]]:
    """Create shutdown event handler.

    Args:
        app: FastAPI application instance

    Returns:
        Shutdown handler function
    """

    async def stop_app() -> None:
        try:
            await reset_location_service()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
            raise

    return stop_app


@asynccontextmanager
async def lifespan(app: Any) -> AsyncIterator[None]:
    """Run startup and shutdown handlers around the application lifetime.

    Args:
        app: FastAPI application instance
    """
    await create_start_app_handler(app)()
    try:
        yield
    finally:
        await create_stop_app_handler(app)()
