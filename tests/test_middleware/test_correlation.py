"""Correlation ID middleware tests."""

from collections.abc import AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from locator.middleware.correlation import (
    HEADER_NAME,
    CorrelationMiddleware,
    is_valid_correlation_id,
)


@pytest.fixture
def correlation_app() -> FastAPI:
    """Get test application with correlation ID middleware.

    Returns:
        FastAPI application for testing
    """
    app = FastAPI()

    @app.get("/test")
    async def test_endpoint(request: Request) -> JSONResponse:
        context = structlog.contextvars.get_contextvars()
        return JSONResponse(
            {
                "correlation_id": request.state.correlation_id,
                "logged_id": context.get("correlation_id"),
            }
        )

    app.add_middleware(CorrelationMiddleware)
    return app


@pytest_asyncio.fixture
async def correlation_client(
    correlation_app: FastAPI,
) -> AsyncGenerator[AsyncClient, None]:
    """Get test client for correlation tests.

    Yields:
        Test client for making requests
    """
    async with AsyncClient(
        transport=ASGITransport(app=correlation_app), base_url="http://test"
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_generates_id_when_missing(correlation_client: AsyncClient) -> None:
    response = await correlation_client.get("/test")

    correlation_id = response.headers[HEADER_NAME]
    UUID(correlation_id)
    assert response.json()["correlation_id"] == correlation_id
    assert response.json()["logged_id"] == correlation_id


@pytest.mark.asyncio
async def test_reuses_valid_incoming_id(correlation_client: AsyncClient) -> None:
    incoming = str(uuid4())

    response = await correlation_client.get("/test", headers={HEADER_NAME: incoming})

    assert response.headers[HEADER_NAME] == incoming


@pytest.mark.asyncio
async def test_replaces_invalid_incoming_id(correlation_client: AsyncClient) -> None:
    response = await correlation_client.get(
        "/test", headers={HEADER_NAME: "<script>alert(1)</script>"}
    )

    assert response.headers[HEADER_NAME] != "<script>alert(1)</script>"
    UUID(response.headers[HEADER_NAME])


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, False),
        ("", False),
        ("test-abc", True),
        ("not-a-uuid", False),
        ("0b9a6c4e-5f8a-4c3e-9a0b-1f2e3d4c5b6a", True),
    ],
)
def test_is_valid_correlation_id(value, expected) -> None:
    assert is_valid_correlation_id(value) is expected
