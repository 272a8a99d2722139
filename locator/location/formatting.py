"""Presentation helpers for resolved locations and acquisition errors."""

from urllib.parse import urlencode

from locator.location.models import (
    AccuracyTier,
    AcquisitionError,
    AcquisitionErrorKind,
    Coordinate,
    ResolvedLocation,
)

ERROR_MESSAGES: dict[AcquisitionErrorKind, str] = {
    AcquisitionErrorKind.PERMISSION_DENIED: (
        "Location permission denied. Enable location access for this site "
        "and try again."
    ),
    AcquisitionErrorKind.POSITION_UNAVAILABLE: (
        "Your position is currently unavailable. Move to an open area or "
        "check that GPS is switched on."
    ),
    AcquisitionErrorKind.TIMEOUT: (
        "Locating took too long. Check your signal and try again, or pick "
        "the location on the map."
    ),
    AcquisitionErrorKind.CAPABILITY_ABSENT: (
        "This device or browser does not support location services. Pick "
        "the location on the map instead."
    ),
}

# Half-width in degrees of the embedded map viewport
EMBED_SPAN = 0.01


def format_location_address(resolved: ResolvedLocation) -> str:
    """Append the precision radius to an address.

    A POOR reading carries a low precision caveat. The caveat is advisory
    only. Manual lookups have no precision and are returned as-is.
    """
    precision = resolved.precision_meters
    if precision is None or precision < 0:
        if resolved.accuracy_tier is AccuracyTier.POOR:
            return f"{resolved.display_address} (low precision)"
        return resolved.display_address
    meters = round(precision)
    if resolved.accuracy_tier is AccuracyTier.POOR:
        return f"{resolved.display_address} (low precision: ±{meters} m)"
    return f"{resolved.display_address} (±{meters} m)"


def format_error_message(error: AcquisitionError, max_attempts: int | None = None) -> str:
    """Render an acquisition failure as an actionable message."""
    message = ERROR_MESSAGES[error.kind]
    if error.retryable and error.attempts > 1:
        total = max_attempts or error.attempts
        message = f"{message} (gave up after {error.attempts} of {total} attempts)"
    return message


def build_share_links(coordinate: Coordinate) -> dict[str, str]:
    """Build links for viewing, navigating to and embedding a location."""
    lat, lng = coordinate.latitude, coordinate.longitude
    point = f"{lat:.6f},{lng:.6f}"
    bbox = ",".join(
        f"{value:.6f}"
        for value in (lng - EMBED_SPAN, lat - EMBED_SPAN, lng + EMBED_SPAN, lat + EMBED_SPAN)
    )
    return {
        "view": "https://maps.google.com/?" + urlencode({"q": point}),
        "directions": "https://www.google.com/maps/dir/?"
        + urlencode({"api": 1, "destination": point}),
        "embed": "https://www.openstreetmap.org/export/embed.html?"
        + urlencode({"bbox": bbox, "layer": "mapnik", "marker": point}),
    }
