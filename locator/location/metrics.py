"""Prometheus metrics for location acquisition and resolution."""

from prometheus_client import Counter

# Acquisition attempts
ACQUISITION_ATTEMPTS = Counter(
    "locator_acquisition_attempts_total",
    "Total number of device location attempts",
    ["profile", "outcome"],  # good, acceptable, poor, or an error kind
)

ACQUISITION_RESULTS = Counter(
    "locator_acquisitions_total",
    "Total number of completed acquisitions",
    ["profile", "status"],  # succeeded, failed
)

# Address resolution
RESOLUTIONS = Counter(
    "locator_resolutions_total",
    "Total number of addresses resolved",
    ["source"],  # gazetteer, reverse_geocoder, coordinate_band, cache
)

REVERSE_GEOCODER_FAILURES = Counter(
    "locator_reverse_geocoder_failures_total",
    "Total number of failed reverse geocoding proxy calls",
    ["reason"],  # http_error, status, invalid_payload, empty
)
