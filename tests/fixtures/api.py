"""API test fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Timeout

from locator.core.config import settings
from locator.location.gazetteer import Gazetteer
from locator.location.resolver import AddressResolver
from locator.location.service import LocationService, get_location_service
from locator.location.upstream import get_upstream_geocoder
from locator.main import app as locator_app

DEFAULT_TIMEOUT: Timeout = Timeout(timeout=5.0, connect=2.0)

ProxyHandler = Callable[[httpx.Request], httpx.Response]


def proxy_returning(display_name: str | None, status_code: int = 200) -> ProxyHandler:
    """Build a mock proxy handler answering every request the same way."""

    def handler(request: httpx.Request) -> httpx.Response:
        if status_code != 200:
            return httpx.Response(status_code, json={"detail": "upstream failed"})
        return httpx.Response(200, json={"display_name": display_name})

    return handler


@pytest.fixture
def proxy_requests() -> list[httpx.Request]:
    """Requests seen by the mocked reverse geocoding proxy."""
    return []


@pytest.fixture
def proxy_handler() -> ProxyHandler:
    """Default proxy behaviour, override in tests that need another answer."""
    return proxy_returning("Al Wahat Street, Some District, Libya")


@pytest_asyncio.fixture
async def location_service(
    proxy_handler: ProxyHandler, proxy_requests: list[httpx.Request]
) -> AsyncGenerator[LocationService, None]:
    """Location service wired to a mocked proxy and no cache.

    Yields:
        LocationService instance
    """

    def recording_handler(request: httpx.Request) -> httpx.Response:
        proxy_requests.append(request)
        return proxy_handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    resolver = AddressResolver.from_settings(
        settings, Gazetteer.default(), cache=None, http_client=http_client
    )
    service = LocationService(resolver)
    yield service
    await http_client.aclose()


@pytest.fixture
def upstream_geocoder() -> Any:
    """Stand-in for the upstream reverse geocoder, configured per test."""
    return MagicMock()


@pytest.fixture
def test_app(
    location_service: LocationService, upstream_geocoder: Any
) -> Generator[FastAPI, None, None]:
    """Get the application with external collaborators overridden.

    Yields:
        FastAPI application for testing
    """
    locator_app.dependency_overrides[get_location_service] = lambda: location_service
    locator_app.dependency_overrides[get_upstream_geocoder] = lambda: upstream_geocoder
    yield locator_app
    locator_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Get async test client.

    Args:
        test_app: FastAPI application for testing

    Yields:
        Test client for making requests
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        timeout=DEFAULT_TIMEOUT,
        headers={"X-Request-ID": "test-request-id"},
    ) as client:
        yield client
