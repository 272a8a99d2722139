"""Test configuration."""

import os
from collections.abc import Callable
from typing import List

import pytest
from pytest import Config

# Must be set before locator.core.config builds its settings
os.environ.setdefault("TESTING", "true")

from locator.core.logging import configure_logging
from locator.location.acquirer import AttemptOptions
from locator.location.gazetteer import Gazetteer
from locator.location.models import (
    AcquisitionError,
    AcquisitionErrorKind,
    Coordinate,
    Profile,
    Reading,
)

pytest_plugins: List[str] = [
    "tests.fixtures.api",
]


def pytest_configure(config: Config) -> None:
    """Configure test environment.

    Args:
        config: Pytest configuration object
    """
    configure_logging(testing=True)


Outcome = Reading | AcquisitionErrorKind | Exception


class ScriptedCapability:
    """Location capability that replays a fixed list of outcomes.

    Each entry is a reading to return, an error kind to raise as
    :class:`AcquisitionError`, or any other exception to raise as-is.
    The last entry repeats once the script runs out.
    """

    def __init__(self, outcomes: list[Outcome], available: bool = True) -> None:
        self.outcomes = list(outcomes)
        self.available = available
        self.calls: list[AttemptOptions] = []

    def is_available(self) -> bool:
        return self.available

    async def get_current_position(self, options: AttemptOptions) -> Reading:
        self.calls.append(options)
        index = min(len(self.calls), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, AcquisitionErrorKind):
            raise AcquisitionError(outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_reading(
    precision: float | None, latitude: float = 32.8872, longitude: float = 13.1913
) -> Reading:
    return Reading(
        coordinate=Coordinate(latitude=latitude, longitude=longitude),
        precision_meters=precision,
    )


@pytest.fixture
def reading_factory() -> Callable[..., Reading]:
    """Build readings with a given precision radius."""
    return make_reading


@pytest.fixture
def scripted_capability() -> Callable[..., ScriptedCapability]:
    """Build a capability that replays the given outcomes."""
    return ScriptedCapability


@pytest.fixture
def no_sleep() -> Callable[[float], object]:
    """Sleep replacement that records requested delays without waiting."""
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays  # type: ignore[attr-defined]
    return sleep


@pytest.fixture
def precise_profile() -> Profile:
    """Precise profile with a short timeout for tests."""
    return Profile(
        name="precise",
        timeout=0.5,
        max_attempts=3,
        retry_delay=2.0,
        good_radius_meters=20,
        acceptable_radius_meters=50,
        maximum_age=0,
        high_accuracy=True,
    )


@pytest.fixture
def fast_profile() -> Profile:
    """Fast single-attempt profile."""
    return Profile(
        name="fast",
        timeout=0.5,
        max_attempts=1,
        retry_delay=0,
        good_radius_meters=50,
        acceptable_radius_meters=100,
        maximum_age=60,
        high_accuracy=False,
    )


@pytest.fixture
def gazetteer() -> Gazetteer:
    """Gazetteer of bundled Libyan cities."""
    return Gazetteer.default()
