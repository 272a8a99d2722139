"""Tests for the metrics middleware."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from locator.middleware.metrics import MetricsMiddleware


def sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_counts_requests_and_responses() -> None:
    app = FastAPI()
    app.add_middleware(MetricsMiddleware)

    @app.get("/ping/")
    async def _ping() -> dict[str, str]:
        return {"pong": "ok"}

    requests_before = sample(
        "locator_http_requests_total", {"method": "GET", "path": "/ping"}
    )
    responses_before = sample("locator_http_responses_total", {"status_code": "200"})

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        response = await client.get("/ping/")

    assert response.status_code == 200
    assert (
        sample("locator_http_requests_total", {"method": "GET", "path": "/ping"})
        == requests_before + 1
    )
    assert (
        sample("locator_http_responses_total", {"status_code": "200"})
        == responses_before + 1
    )
