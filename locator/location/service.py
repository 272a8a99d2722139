"""Location service used by the marketplace screens.

This module exposes the public entry points for location pickers:
- Fast lookup: one quick device attempt, then address resolution
- Precise lookup: full retry policy, then address resolution
- Manual lookup: resolve a coordinate supplied by the caller (map pin)
- Place search over the gazetteer
"""

from locator.core.config import Settings, settings
from locator.core.logging import get_logger
from locator.location.accuracy import FAST_PROFILE, PRECISE_PROFILE, build_profiles
from locator.location.acquirer import (
    LocationAcquirer,
    LocationCapability,
    ProgressCallback,
)
from locator.location.cache import (
    InMemoryResolutionCache,
    RedisResolutionCache,
    ResolutionCache,
)
from locator.location.gazetteer import Gazetteer, get_gazetteer
from locator.location.models import (
    Coordinate,
    Profile,
    ResolutionSource,
    ResolvedLocation,
)
from locator.location.resolver import AddressResolver

logger = get_logger(__name__)


class LocationService:
    """Orchestrates acquisition and address resolution.

    Each call is independent: it runs sequentially and shares only the
    read-only gazetteer and profiles with other calls.
    """

    def __init__(
        self,
        resolver: AddressResolver,
        capability: LocationCapability | None = None,
        fast_profile: Profile = FAST_PROFILE,
        precise_profile: Profile = PRECISE_PROFILE,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.resolver = resolver
        self.capability = capability
        self.fast_profile = fast_profile
        self.precise_profile = precise_profile
        self.on_progress = on_progress

    @property
    def gazetteer(self) -> Gazetteer:
        return self.resolver.gazetteer

    async def _acquire(
        self,
        profile: Profile,
        capability: LocationCapability | None,
        on_progress: ProgressCallback | None,
    ) -> ResolvedLocation:
        acquirer = LocationAcquirer(
            capability if capability is not None else self.capability,
            on_progress=on_progress or self.on_progress,
        )
        acquisition = await acquirer.acquire(profile)
        coordinate = acquisition.reading.coordinate
        if not self.gazetteer.covers(coordinate):
            logger.warning(
                "reading_outside_gazetteer",
                latitude=coordinate.latitude,
                longitude=coordinate.longitude,
            )
        resolution = await self.resolver.resolve(coordinate)
        return ResolvedLocation(
            coordinate=coordinate,
            display_address=resolution.address,
            precision_meters=acquisition.reading.precision_meters,
            accuracy_tier=acquisition.tier,
            source=resolution.source,
        )

    async def acquire_fast(
        self,
        capability: LocationCapability | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ResolvedLocation:
        """Locate the device with a single quick attempt.

        Single-attempt profiles accept the first reading whatever its tier.

        Raises:
            AcquisitionError: If no reading could be obtained
        """
        return await self._acquire(self.fast_profile, capability, on_progress)

    async def acquire_precise(
        self,
        capability: LocationCapability | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ResolvedLocation:
        """Locate the device using the full retry policy.

        Raises:
            AcquisitionError: If no reading could be obtained
        """
        return await self._acquire(self.precise_profile, capability, on_progress)

    async def resolve_manual(self, coordinate: Coordinate) -> ResolvedLocation:
        """Resolve a caller-supplied coordinate. Always succeeds."""
        resolution = await self.resolver.resolve(coordinate)
        return ResolvedLocation(
            coordinate=coordinate,
            display_address=resolution.address,
            source=resolution.source,
        )

    def search_places(self, query: str) -> list[ResolvedLocation]:
        """Search gazetteer places by name or region."""
        return [
            ResolvedLocation(
                coordinate=place.coordinate,
                display_address=self.resolver.canonical(place),
                source=ResolutionSource.GAZETTEER,
            )
            for place in self.gazetteer.search(query)
        ]

    async def aclose(self) -> None:
        await self.resolver.aclose()
        cache = self.resolver.cache
        if isinstance(cache, RedisResolutionCache):
            await cache.close()


def build_cache(config: Settings) -> ResolutionCache | None:
    """Create the resolution cache selected by configuration."""
    if not config.LOCATION_CACHE_ENABLED:
        return None
    if config.LOCATION_CACHE_BACKEND == "redis":
        logger.info("Redis caching enabled for address resolution")
        return RedisResolutionCache.from_url(config.REDIS_URL, config.LOCATION_CACHE_TTL)
    return InMemoryResolutionCache()


def create_location_service(
    config: Settings = settings,
    capability: LocationCapability | None = None,
    gazetteer: Gazetteer | None = None,
) -> LocationService:
    """Build a service wired from configuration."""
    profiles = build_profiles(config)
    resolver = AddressResolver.from_settings(
        config, gazetteer or get_gazetteer(), cache=build_cache(config)
    )
    return LocationService(
        resolver,
        capability=capability,
        fast_profile=profiles["fast"],
        precise_profile=profiles["precise"],
    )


# Singleton instance
_location_service: LocationService | None = None


def get_location_service() -> LocationService:
    """Get or create the singleton location service instance.

    Returns:
        LocationService instance
    """
    global _location_service
    if _location_service is None:
        _location_service = create_location_service()
    return _location_service


async def reset_location_service() -> None:
    """Close and drop the singleton, e.g. on application shutdown."""
    global _location_service
    if _location_service is not None:
        await _location_service.aclose()
        _location_service = None
