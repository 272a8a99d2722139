"""Value types shared by the location acquisition and resolution pipeline."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinate(BaseModel):
    """A WGS84 point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(
        ..., ge=-180, le=180, description="Longitude in decimal degrees"
    )

    def __str__(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


class AccuracyTier(str, Enum):
    """Categorical bucket derived from a reading's precision radius."""

    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


class Reading(BaseModel):
    """One raw sample returned by the device location capability.

    ``precision_meters`` is the reported radius of uncertainty. It may be
    missing or negative when the device does not report a usable value.
    """

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    precision_meters: float | None = None
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Profile(BaseModel):
    """Named timeout, retry and accuracy configuration."""

    model_config = ConfigDict(frozen=True)

    name: str
    timeout: float = Field(..., gt=0, description="Per-attempt timeout in seconds")
    max_attempts: int = Field(..., ge=1)
    retry_delay: float = Field(0.0, ge=0, description="Seconds between attempts")
    acceptable_radius_meters: float = Field(..., ge=0)
    good_radius_meters: float = Field(..., ge=0)
    maximum_age: float = Field(
        0.0, ge=0, description="Oldest cached device reading accepted, in seconds"
    )
    high_accuracy: bool = False

    @model_validator(mode="after")
    def check_radii(self) -> "Profile":
        """Good radius must sit inside the acceptable radius."""
        if self.good_radius_meters > self.acceptable_radius_meters:
            raise ValueError(
                "good_radius_meters must not exceed acceptable_radius_meters"
            )
        return self


class PlaceCandidate(BaseModel):
    """A named place known to the gazetteer."""

    model_config = ConfigDict(frozen=True)

    name: str
    region: str
    coordinate: Coordinate


class ResolutionSource(str, Enum):
    """Which step of the resolution chain produced an address."""

    GAZETTEER = "gazetteer"
    REVERSE_GEOCODER = "reverse_geocoder"
    COORDINATE_BAND = "coordinate_band"
    CACHE = "cache"


class ResolvedLocation(BaseModel):
    """Final result handed to a caller."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    display_address: str
    precision_meters: float | None = None
    accuracy_tier: AccuracyTier | None = None
    source: ResolutionSource


class AcquisitionErrorKind(str, Enum):
    """Device-classified failure reasons."""

    TIMEOUT = "timeout"
    POSITION_UNAVAILABLE = "position_unavailable"
    PERMISSION_DENIED = "permission_denied"
    CAPABILITY_ABSENT = "capability_absent"

    @property
    def retryable(self) -> bool:
        return self in (
            AcquisitionErrorKind.TIMEOUT,
            AcquisitionErrorKind.POSITION_UNAVAILABLE,
        )


class AcquisitionError(Exception):
    """Raised when no reading could be obtained from the device."""

    def __init__(
        self, kind: AcquisitionErrorKind, message: str | None = None, attempts: int = 0
    ) -> None:
        self.kind = kind
        self.attempts = attempts
        super().__init__(message or kind.value.replace("_", " "))

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def __repr__(self) -> str:
        return f"AcquisitionError(kind={self.kind.value!r}, attempts={self.attempts})"
