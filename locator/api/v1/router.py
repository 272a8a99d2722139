"""API v1 router module."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from locator.api.v1.geo import router as geo_router
from locator.core.config import settings
from locator.location.gazetteer import get_gazetteer

router = APIRouter(default_response_class=JSONResponse)

router.include_router(geo_router)


@router.get("/")
async def get_api_metadata() -> dict[str, str]:
    """Get API metadata."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "openapi_url": "/openapi.json",
        "documentation_url": "/docs",
        "api_status": "healthy",
    }


@router.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    Returns
    -------
        Dict containing health status information
    """
    return {
        "status": "healthy",
        "version": settings.version,
        "gazetteer_places": str(len(get_gazetteer())),
        "correlation_id": request.state.correlation_id,
    }
