"""Geolocation API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from locator.core.config import settings
from locator.location.accuracy import PROFILES, classify, describe_tier, get_profile
from locator.location.formatting import build_share_links, format_location_address
from locator.location.models import (
    AccuracyTier,
    Coordinate,
    Profile,
    ResolutionSource,
    ResolvedLocation,
)
from locator.location.service import LocationService, get_location_service
from locator.location.upstream import (
    UpstreamGeocoderError,
    UpstreamReverseGeocoder,
    get_upstream_geocoder,
)

router = APIRouter(prefix="/geo", tags=["geo"])


class LocationResponse(BaseModel):
    """A resolved location as returned to clients."""

    latitude: float
    longitude: float
    display_address: str
    formatted_address: str
    precision_meters: float | None = None
    accuracy_tier: AccuracyTier | None = None
    source: ResolutionSource
    links: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_resolved(cls, resolved: ResolvedLocation) -> "LocationResponse":
        return cls(
            latitude=resolved.coordinate.latitude,
            longitude=resolved.coordinate.longitude,
            display_address=resolved.display_address,
            formatted_address=format_location_address(resolved),
            precision_meters=resolved.precision_meters,
            accuracy_tier=resolved.accuracy_tier,
            source=resolved.source,
            links=build_share_links(resolved.coordinate),
        )


class ClassificationResponse(BaseModel):
    """Accuracy tier of a precision radius under a profile."""

    profile: str
    precision_meters: float
    tier: AccuracyTier
    label: str


@router.get("/reverse")
def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude"),
    lang: str = Query(settings.LOCATION_LANGUAGE, min_length=2, max_length=10),
    zoom: int = Query(settings.LOCATION_ZOOM, ge=0, le=18),
    geocoder: UpstreamReverseGeocoder = Depends(get_upstream_geocoder),
) -> dict[str, Any]:
    """
    Trusted reverse geocoding proxy.

    Forwards the lookup to the upstream geocoder from the server so that
    clients never contact it directly.
    """
    try:
        result = geocoder.reverse(lat, lng, language=lang, zoom=zoom)
    except UpstreamGeocoderError as e:
        raise HTTPException(status_code=502, detail=f"Upstream geocoder failed: {e}")
    if result is None:
        raise HTTPException(status_code=404, detail="No address found for coordinates")
    return result


@router.get("/resolve", response_model=LocationResponse)
async def resolve_location(
    lat: float = Query(..., description="Latitude"),
    lng: float = Query(..., description="Longitude"),
    service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    """Resolve a coordinate picked on the map to a display address."""
    coordinate = Coordinate(latitude=lat, longitude=lng)
    resolved = await service.resolve_manual(coordinate)
    return LocationResponse.from_resolved(resolved)


@router.get("/places", response_model=list[LocationResponse])
async def search_places(
    q: str = Query(..., min_length=1, description="Place name or region"),
    service: LocationService = Depends(get_location_service),
) -> list[LocationResponse]:
    """Search known places by name or region."""
    return [LocationResponse.from_resolved(place) for place in service.search_places(q)]


@router.get("/profiles", response_model=list[Profile])
async def list_profiles() -> list[Profile]:
    """List the built-in acquisition profiles."""
    return list(PROFILES.values())


@router.get("/profiles/{name}", response_model=Profile)
async def read_profile(name: str) -> Profile:
    """Get one acquisition profile by name."""
    return get_profile(name)


@router.get("/classify", response_model=ClassificationResponse)
async def classify_precision(
    precision: float = Query(..., description="Reported precision radius in meters"),
    profile: str = Query("precise", description="Profile name"),
) -> ClassificationResponse:
    """Classify a precision radius into an accuracy tier."""
    selected = get_profile(profile)
    tier = classify(precision, selected)
    return ClassificationResponse(
        profile=selected.name,
        precision_meters=precision,
        tier=tier,
        label=describe_tier(tier),
    )
