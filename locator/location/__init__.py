"""Location acquisition and address resolution.

This package provides:
- Accuracy tiers and the fast/precise acquisition profiles
- A bounded retry loop over the device location capability
- Address resolution through gazetteer, reverse geocoding and coordinate bands
- The LocationService entry points consumed by the marketplace screens
"""

from locator.location.accuracy import (
    FAST_PROFILE,
    PRECISE_PROFILE,
    classify,
    get_profile,
)
from locator.location.acquirer import (
    CallbackLocationCapability,
    LocationAcquirer,
    LocationCapability,
    ProgressEvent,
)
from locator.location.gazetteer import Gazetteer, get_gazetteer
from locator.location.models import (
    AccuracyTier,
    AcquisitionError,
    AcquisitionErrorKind,
    Coordinate,
    PlaceCandidate,
    Profile,
    Reading,
    ResolvedLocation,
)
from locator.location.resolver import AddressResolver, ReverseGeocodingClient
from locator.location.service import LocationService, get_location_service

__all__ = [
    "FAST_PROFILE",
    "PRECISE_PROFILE",
    "classify",
    "get_profile",
    "CallbackLocationCapability",
    "LocationAcquirer",
    "LocationCapability",
    "ProgressEvent",
    "Gazetteer",
    "get_gazetteer",
    "AccuracyTier",
    "AcquisitionError",
    "AcquisitionErrorKind",
    "Coordinate",
    "PlaceCandidate",
    "Profile",
    "Reading",
    "ResolvedLocation",
    "AddressResolver",
    "ReverseGeocodingClient",
    "LocationService",
    "get_location_service",
]
