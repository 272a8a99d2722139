"""Coordinate to display-address resolution.

Resolution walks an ordered fallback chain and stops at the first success:

1. Gazetteer proximity match (offline, no network round trip)
2. Reverse geocoding through the trusted proxy endpoint
3. Coordinate-band description

Step 2 failures are logged and swallowed, so :meth:`AddressResolver.resolve`
always returns a non-empty address.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from locator.core.config import Settings
from locator.core.logging import get_logger
from locator.location.cache import ResolutionCache, cache_key
from locator.location.gazetteer import Gazetteer
from locator.location.metrics import RESOLUTIONS, REVERSE_GEOCODER_FAILURES
from locator.location.models import Coordinate, PlaceCandidate, ResolutionSource

logger = get_logger(__name__)

# Upstream display names are trimmed to this many meaningful parts
MAX_ADDRESS_PARTS = 3
MIN_PART_LENGTH = 3


class ReverseGeocodingError(Exception):
    """Raised when the proxy does not return a usable display name."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class ReverseGeocodingClient:
    """Client for the internal reverse geocoding proxy."""

    def __init__(
        self,
        proxy_url: str,
        language: str = "en",
        zoom: int = 10,
        timeout: float = 5.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.proxy_url = proxy_url
        self.language = language
        self.zoom = zoom
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def display_name(self, coordinate: Coordinate) -> str:
        """Fetch the upstream display name for a coordinate.

        Raises:
            ReverseGeocodingError: On transport errors, non-2xx responses,
                invalid JSON or a missing ``display_name``
        """
        params = {
            "lat": coordinate.latitude,
            "lng": coordinate.longitude,
            "lang": self.language,
            "zoom": self.zoom,
        }
        try:
            response = await self.http_client.get(
                self.proxy_url, params=params, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise ReverseGeocodingError("http_error", str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ReverseGeocodingError(
                "status", f"proxy answered HTTP {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ReverseGeocodingError("invalid_payload", str(e)) from e

        name = data.get("display_name") if isinstance(data, dict) else None
        if not isinstance(name, str) or not name.strip():
            raise ReverseGeocodingError("empty", "response has no display_name")
        return name.strip()

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


@dataclass(frozen=True)
class Resolution:
    """An address together with the chain step that produced it."""

    address: str
    source: ResolutionSource


class AddressResolver:
    """Turn coordinates into human-presentable addresses."""

    def __init__(
        self,
        gazetteer: Gazetteer,
        client: ReverseGeocodingClient | None,
        country_name: str = "Libya",
        country_aliases: Sequence[str] = ("Libya",),
        threshold: float = 0.5,
        latitude_bands: Sequence[tuple[float, str]] = (
            (32.0, "Northern Libya"),
            (27.0, "Central Libya"),
        ),
        default_band: str = "Southern Libya",
        cache: ResolutionCache | None = None,
        cache_max_age: float = 86400,
    ) -> None:
        self.gazetteer = gazetteer
        self.client = client
        self.country_name = country_name
        self.country_tokens = tuple(
            dict.fromkeys([country_name, *country_aliases])
        )
        self.threshold = threshold
        self.latitude_bands = sorted(latitude_bands, key=lambda band: -band[0])
        self.default_band = default_band
        self.cache = cache
        self.cache_max_age = cache_max_age

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        gazetteer: Gazetteer,
        cache: ResolutionCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AddressResolver":
        client = ReverseGeocodingClient(
            config.LOCATION_REVERSE_PROXY_URL,
            language=config.LOCATION_LANGUAGE,
            zoom=config.LOCATION_ZOOM,
            timeout=config.LOCATION_REVERSE_TIMEOUT,
            http_client=http_client,
        )
        return cls(
            gazetteer,
            client,
            country_name=config.LOCATION_COUNTRY_NAME,
            country_aliases=config.LOCATION_COUNTRY_ALIASES,
            threshold=config.LOCATION_GAZETTEER_THRESHOLD,
            latitude_bands=config.LOCATION_LATITUDE_BANDS,
            default_band=config.LOCATION_DEFAULT_BAND,
            cache=cache,
            cache_max_age=config.LOCATION_CACHE_TTL,
        )

    def canonical(self, place: PlaceCandidate) -> str:
        return f"{place.name}, {place.region}, {self.country_name}"

    def _mentions_country(self, text: str) -> bool:
        folded = text.casefold()
        return any(token.casefold() in folded for token in self.country_tokens)

    def normalize_display_name(self, display_name: str) -> str:
        """Clean up an upstream display name.

        Names inside the country are mapped to the gazetteer's canonical form
        when any part matches a known place; otherwise they are trimmed to
        the first few meaningful parts followed by the country name. Names
        outside the country are returned unchanged.
        """
        if not self._mentions_country(display_name):
            return display_name

        parts = [part.strip() for part in display_name.split(",")]
        place = self.gazetteer.match_name(parts, ignore=self.country_tokens)
        if place is not None:
            return self.canonical(place)

        relevant = [
            part
            for part in parts
            if len(part) >= MIN_PART_LENGTH and not self._mentions_country(part)
        ][:MAX_ADDRESS_PARTS]
        if not relevant:
            return display_name
        return f"{', '.join(relevant)}, {self.country_name}"

    def band_label(self, coordinate: Coordinate) -> str:
        for breakpoint, label in self.latitude_bands:
            if coordinate.latitude > breakpoint:
                return label
        return self.default_band

    def coordinate_fallback(self, coordinate: Coordinate) -> str:
        return (
            f"{coordinate.latitude:.4f}, {coordinate.longitude:.4f} "
            f"({self.band_label(coordinate)})"
        )

    async def _from_network(self, coordinate: Coordinate) -> str | None:
        if self.client is None:
            return None
        try:
            display_name = await self.client.display_name(coordinate)
        except ReverseGeocodingError as e:
            REVERSE_GEOCODER_FAILURES.labels(reason=e.reason).inc()
            logger.warning(
                "reverse_geocoding_failed",
                latitude=coordinate.latitude,
                longitude=coordinate.longitude,
                reason=e.reason,
                error=str(e),
            )
            return None
        except Exception as e:
            REVERSE_GEOCODER_FAILURES.labels(reason="unexpected").inc()
            logger.error(
                "reverse_geocoding_unexpected_error",
                latitude=coordinate.latitude,
                longitude=coordinate.longitude,
                error=str(e),
            )
            return None
        return self.normalize_display_name(display_name)

    async def resolve(self, coordinate: Coordinate) -> Resolution:
        """Resolve a coordinate to a display address. Never raises.

        Args:
            coordinate: Point to describe

        Returns:
            Resolution with a non-empty address and its source
        """
        place = self.gazetteer.nearest_within(coordinate, self.threshold)
        if place is not None:
            return self._record(self.canonical(place), ResolutionSource.GAZETTEER)

        key = cache_key(coordinate)
        cached = await self._cache_get(key)
        if cached:
            return self._record(cached, ResolutionSource.CACHE)

        address = await self._from_network(coordinate)
        if address:
            await self._cache_put(key, address)
            return self._record(address, ResolutionSource.REVERSE_GEOCODER)

        return self._record(
            self.coordinate_fallback(coordinate), ResolutionSource.COORDINATE_BAND
        )

    async def _cache_get(self, key: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(key, self.cache_max_age)
        except Exception as e:
            logger.warning("cache_error", operation="get", key=key, error=str(e))
            return None

    async def _cache_put(self, key: str, address: str) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.put(key, address)
        except Exception as e:
            logger.warning("cache_error", operation="put", key=key, error=str(e))

    def _record(self, address: str, source: ResolutionSource) -> Resolution:
        RESOLUTIONS.labels(source=source.value).inc()
        logger.debug("address_resolved", source=source.value, address=address)
        return Resolution(address=address, source=source)

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
