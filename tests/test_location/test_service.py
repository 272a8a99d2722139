"""Tests for the location service entry points."""

import httpx
import pytest

from locator.core.config import Settings
from locator.location.cache import InMemoryResolutionCache, RedisResolutionCache
from locator.location.models import (
    AccuracyTier,
    AcquisitionError,
    AcquisitionErrorKind,
    Coordinate,
    ResolutionSource,
)
from locator.location.service import (
    build_cache,
    create_location_service,
    get_location_service,
    reset_location_service,
)


class TestAcquire:
    """Tests for acquire_fast and acquire_precise."""

    @pytest.mark.asyncio
    async def test_fast_acquisition_in_tripoli(
        self, location_service, scripted_capability, reading_factory, proxy_requests
    ):
        capability = scripted_capability([reading_factory(500, 32.88, 13.19)])

        resolved = await location_service.acquire_fast(capability)

        assert resolved.display_address == "Tripoli, Western Region, Libya"
        assert resolved.accuracy_tier == AccuracyTier.POOR
        assert resolved.precision_meters == 500
        assert resolved.source == ResolutionSource.GAZETTEER
        assert len(capability.calls) == 1
        assert proxy_requests == []

    @pytest.mark.asyncio
    async def test_precise_acquisition_uses_reverse_geocoder(
        self, location_service, scripted_capability, reading_factory
    ):
        capability = scripted_capability([reading_factory(15, 28.0, 19.0)])

        resolved = await location_service.acquire_precise(capability)

        assert resolved.accuracy_tier == AccuracyTier.GOOD
        assert resolved.source == ResolutionSource.REVERSE_GEOCODER
        assert resolved.display_address == "Al Wahat Street, Some District, Libya"

    @pytest.mark.asyncio
    async def test_progress_callback_receives_events(
        self, location_service, scripted_capability, reading_factory
    ):
        events = []
        capability = scripted_capability([reading_factory(10, 32.88, 13.19)])

        await location_service.acquire_fast(capability, on_progress=events.append)

        assert events
        assert events[-1].profile == "fast"

    @pytest.mark.asyncio
    async def test_acquisition_failure_propagates(
        self, location_service, scripted_capability
    ):
        capability = scripted_capability([AcquisitionErrorKind.PERMISSION_DENIED])

        with pytest.raises(AcquisitionError) as exc_info:
            await location_service.acquire_precise(capability)

        assert exc_info.value.kind == AcquisitionErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_no_capability(self, location_service):
        with pytest.raises(AcquisitionError) as exc_info:
            await location_service.acquire_fast()

        assert exc_info.value.kind == AcquisitionErrorKind.CAPABILITY_ABSENT


class TestResolveManual:
    """Tests for resolving caller-supplied coordinates."""

    @pytest.mark.asyncio
    async def test_map_pin_near_city(self, location_service):
        resolved = await location_service.resolve_manual(
            Coordinate(latitude=32.12, longitude=20.07)
        )

        assert resolved.display_address == "Benghazi, Eastern Region, Libya"
        assert resolved.accuracy_tier is None
        assert resolved.precision_meters is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "proxy_handler",
        [lambda request: httpx.Response(502)],
    )
    async def test_manual_lookup_never_fails(self, location_service, proxy_handler):
        resolved = await location_service.resolve_manual(
            Coordinate(latitude=28.0, longitude=19.0)
        )

        assert resolved.display_address == "28.0000, 19.0000 (Central Libya)"
        assert resolved.source == ResolutionSource.COORDINATE_BAND


@pytest.mark.asyncio
async def test_search_places(location_service):
    results = location_service.search_places("sab")

    assert [r.display_address for r in results] == [
        "Sabratha, Western Region, Libya",
        "Sabha, Southern Region, Libya",
    ]
    assert all(r.source == ResolutionSource.GAZETTEER for r in results)


class TestWiring:
    """Tests for building services from configuration."""

    def test_build_cache_disabled(self):
        assert build_cache(Settings(LOCATION_CACHE_ENABLED=False)) is None

    def test_build_memory_cache(self):
        assert isinstance(build_cache(Settings()), InMemoryResolutionCache)

    def test_build_redis_cache(self):
        cache = build_cache(
            Settings(LOCATION_CACHE_BACKEND="redis", REDIS_URL="redis://localhost:6379/1")
        )
        assert isinstance(cache, RedisResolutionCache)

    def test_create_location_service_uses_configured_profiles(self):
        service = create_location_service(Settings(PRECISE_MAX_ATTEMPTS=4))
        assert service.precise_profile.max_attempts == 4
        assert service.fast_profile.name == "fast"

    @pytest.mark.asyncio
    async def test_singleton_lifecycle(self):
        first = get_location_service()
        assert get_location_service() is first

        await reset_location_service()

        assert get_location_service() is not first
        await reset_location_service()
