"""Upstream reverse geocoder behind the trusted proxy endpoint.

Clients never call the public geocoding service directly. The proxy route
uses this module so that the caller's coordinates and any provider
credentials stay on the server.
"""

from typing import Any

from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from locator.core.config import Settings, settings
from locator.core.logging import get_logger

logger = get_logger(__name__)


class UpstreamGeocoderError(Exception):
    """Raised when the upstream geocoding service fails."""


class UpstreamReverseGeocoder:
    """Rate limited Nominatim reverse geocoder."""

    def __init__(
        self,
        user_agent: str = "marketplace-locator",
        rate_limit: float = 1.1,
        timeout: int = 5,
        max_retries: int = 2,
    ) -> None:
        # Nominatim usage policy: at most one request per second
        self.nominatim = Nominatim(user_agent=user_agent, timeout=timeout)
        self.nominatim_reverse = RateLimiter(
            self.nominatim.reverse,
            min_delay_seconds=rate_limit,
            max_retries=max_retries,
            error_wait_seconds=2,
            swallow_exceptions=False,
        )
        logger.info(
            "upstream_geocoder_initialized",
            provider="nominatim",
            rate_limit=rate_limit,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "UpstreamReverseGeocoder":
        return cls(
            user_agent=config.NOMINATIM_USER_AGENT,
            rate_limit=config.NOMINATIM_RATE_LIMIT,
            timeout=config.NOMINATIM_TIMEOUT,
        )

    def reverse(
        self, latitude: float, longitude: float, language: str, zoom: int
    ) -> dict[str, Any] | None:
        """Reverse geocode a point.

        Args:
            latitude: Latitude coordinate
            longitude: Longitude coordinate
            language: Preferred language of the display name
            zoom: Nominatim detail level (3 country .. 18 building)

        Returns:
            Dict with ``display_name``, ``lat`` and ``lng``, or None if nothing
            was found

        Raises:
            UpstreamGeocoderError: If the upstream service fails
        """
        try:
            location = self.nominatim_reverse(
                (latitude, longitude),
                language=language,
                zoom=zoom,
                exactly_one=True,
            )
        except (GeocoderTimedOut, GeocoderUnavailable, GeocoderServiceError) as e:
            logger.warning(
                "upstream_reverse_failed",
                latitude=latitude,
                longitude=longitude,
                error=str(e),
            )
            raise UpstreamGeocoderError(str(e)) from e

        if location is None or not location.address:
            return None
        return {
            "display_name": location.address,
            "lat": location.latitude,
            "lng": location.longitude,
        }


_upstream_geocoder: UpstreamReverseGeocoder | None = None


def get_upstream_geocoder() -> UpstreamReverseGeocoder:
    """Get or create the singleton upstream geocoder."""
    global _upstream_geocoder
    if _upstream_geocoder is None:
        _upstream_geocoder = UpstreamReverseGeocoder.from_settings(settings)
    return _upstream_geocoder
