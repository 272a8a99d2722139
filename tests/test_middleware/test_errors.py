"""Tests for error handling middleware."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI, HTTPException, Query
from httpx import ASGITransport, AsyncClient
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from structlog.testing import LogCapture

from locator.core.logging import configure_logging
from locator.middleware.correlation import CorrelationMiddleware
from locator.middleware.errors import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)


class TeapotError(Exception):
    status_code = 418


@pytest.fixture
def error_app() -> FastAPI:
    """Get application with routes that raise errors.

    Returns:
        FastAPI application for testing
    """
    app = FastAPI()
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    register_exception_handlers(app)

    @app.get("/http-error")
    async def _http_error() -> None:
        raise HTTPException(status_code=400, detail="Test error")

    @app.get("/value-error")
    async def _value_error() -> None:
        raise ValueError("Invalid value")

    @app.get("/key-error")
    async def _key_error() -> None:
        raise KeyError("Missing key")

    @app.get("/runtime-error")
    async def _runtime_error() -> None:
        raise RuntimeError("database password is hunter2")

    @app.get("/teapot")
    async def _teapot() -> None:
        raise TeapotError("short and stout")

    @app.get("/validated")
    async def _validated(count: int = Query(...)) -> dict[str, int]:
        return {"count": count}

    return app


@pytest_asyncio.fixture
async def error_client(error_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Get test client for error handling tests.

    Yields:
        Test client for making requests
    """
    async with AsyncClient(
        transport=ASGITransport(app=error_app),
        base_url="http://test",
        headers={"X-Request-ID": "test-errors"},
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_http_exception_handling(error_client: AsyncClient) -> None:
    response = await error_client.get("/http-error")

    assert response.status_code == 400
    assert response.json() == {
        "error": "HTTPException",
        "message": "Test error",
        "status_code": 400,
        "correlation_id": "test-errors",
    }


@pytest.mark.asyncio
async def test_value_error_is_unprocessable(error_client: AsyncClient) -> None:
    response = await error_client.get("/value-error")

    assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["message"] == "Invalid value"


@pytest.mark.asyncio
async def test_key_error_is_not_found(error_client: AsyncClient) -> None:
    response = await error_client.get("/key-error")

    assert response.status_code == HTTP_404_NOT_FOUND
    assert response.json()["message"] == "'Missing key'"


@pytest.mark.asyncio
async def test_unexpected_error_hides_details(error_client: AsyncClient) -> None:
    response = await error_client.get("/runtime-error")

    assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body["error"] == "RuntimeError"
    assert body["message"] == "Internal Server Error"
    assert "hunter2" not in response.text
    assert response.headers["X-Request-ID"] == "test-errors"


@pytest.mark.asyncio
async def test_status_code_attribute_is_respected(error_client: AsyncClient) -> None:
    response = await error_client.get("/teapot")

    assert response.status_code == 418
    assert response.json()["message"] == "short and stout"


@pytest.mark.asyncio
async def test_request_validation_error(error_client: AsyncClient) -> None:
    response = await error_client.get("/validated", params={"count": "many"})

    assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
    body = response.json()
    assert body["error"] == "RequestValidationError"
    assert body["message"].startswith("query.count:")


@pytest.mark.asyncio
async def test_unknown_route(error_client: AsyncClient) -> None:
    response = await error_client.get("/nowhere")

    assert response.status_code == HTTP_404_NOT_FOUND
    assert response.json()["error"] == "HTTPException"


@pytest.mark.asyncio
async def test_custom_error_mapping() -> None:
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware, error_mapping={RuntimeError: 503})

    @app.get("/busy")
    async def _busy() -> None:
        raise RuntimeError("try later")

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/busy")

    assert response.status_code == 503
    assert response.json()["correlation_id"] == "unknown"


@pytest.mark.asyncio
async def test_error_log_carries_request_id(error_client: AsyncClient) -> None:
    capture = LogCapture()
    structlog.configure(processors=[capture])
    try:
        await error_client.get("/value-error")
    finally:
        configure_logging(testing=True)

    entry = next(e for e in capture.entries if e["event"] == "request_error")
    assert entry["request_id"] == "test-errors"
    assert entry["status_code"] == HTTP_422_UNPROCESSABLE_ENTITY
