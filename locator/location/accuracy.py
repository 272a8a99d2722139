"""Accuracy tiers and the built-in acquisition profiles."""

from locator.core.config import Settings, settings
from locator.location.models import AccuracyTier, Profile

TIER_LABELS: dict[AccuracyTier, str] = {
    AccuracyTier.GOOD: "high precision",
    AccuracyTier.ACCEPTABLE: "acceptable precision",
    AccuracyTier.POOR: "low precision",
}


def classify(precision_meters: float | None, profile: Profile) -> AccuracyTier:
    """Map a reported precision radius to an accuracy tier.

    A radius of zero is a perfect reading. A missing or negative radius
    cannot be trusted and is always POOR.

    Args:
        precision_meters: Reported radius of uncertainty in meters
        profile: Profile supplying the good and acceptable radii

    Returns:
        The accuracy tier for the reading
    """
    if precision_meters is None or precision_meters < 0:
        return AccuracyTier.POOR
    if precision_meters <= profile.good_radius_meters:
        return AccuracyTier.GOOD
    if precision_meters <= profile.acceptable_radius_meters:
        return AccuracyTier.ACCEPTABLE
    return AccuracyTier.POOR


def describe_tier(tier: AccuracyTier) -> str:
    return TIER_LABELS[tier]


def build_profiles(config: Settings) -> dict[str, Profile]:
    """Build the fast and precise profiles from configuration."""
    fast = Profile(
        name="fast",
        timeout=config.FAST_TIMEOUT,
        max_attempts=config.FAST_MAX_ATTEMPTS,
        retry_delay=config.FAST_RETRY_DELAY,
        good_radius_meters=config.FAST_GOOD_RADIUS,
        acceptable_radius_meters=config.FAST_ACCEPTABLE_RADIUS,
        maximum_age=config.FAST_MAXIMUM_AGE,
        high_accuracy=False,
    )
    precise = Profile(
        name="precise",
        timeout=config.PRECISE_TIMEOUT,
        max_attempts=config.PRECISE_MAX_ATTEMPTS,
        retry_delay=config.PRECISE_RETRY_DELAY,
        good_radius_meters=config.PRECISE_GOOD_RADIUS,
        acceptable_radius_meters=config.PRECISE_ACCEPTABLE_RADIUS,
        maximum_age=config.PRECISE_MAXIMUM_AGE,
        high_accuracy=True,
    )
    return {fast.name: fast, precise.name: precise}


PROFILES: dict[str, Profile] = build_profiles(settings)
FAST_PROFILE: Profile = PROFILES["fast"]
PRECISE_PROFILE: Profile = PROFILES["precise"]


def get_profile(name: str) -> Profile:
    """Look up a built-in profile by name.

    Raises:
        KeyError: If no profile has that name
    """
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown location profile: {name}") from None
