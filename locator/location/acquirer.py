"""Bounded retry loop over the device location capability.

One call to :meth:`LocationAcquirer.acquire` walks the state machine

    Idle -> Requesting(n) -> Succeeded | Retrying | Failed

Attempts are strictly sequential. The only suspension points are the
device request, bounded by the profile timeout, and the fixed delay
between attempts.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from locator.core.logging import get_logger
from locator.location.accuracy import classify
from locator.location.metrics import ACQUISITION_ATTEMPTS, ACQUISITION_RESULTS
from locator.location.models import (
    AccuracyTier,
    AcquisitionError,
    AcquisitionErrorKind,
    Profile,
    Reading,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttemptOptions:
    """Options passed to the device for a single attempt."""

    attempt: int
    timeout: float
    maximum_age: float
    high_accuracy: bool


def attempt_options(profile: Profile, attempt: int) -> AttemptOptions:
    """Build device options for an attempt.

    Only the first attempt may be served from the device's cached reading;
    retries always ask for a fresh fix.
    """
    return AttemptOptions(
        attempt=attempt,
        timeout=profile.timeout,
        maximum_age=profile.maximum_age if attempt == 1 else 0.0,
        high_accuracy=profile.high_accuracy,
    )


class LocationCapability(Protocol):
    """Contract of the platform location service."""

    def is_available(self) -> bool: ...

    async def get_current_position(self, options: AttemptOptions) -> Reading:
        """Return one reading or raise :class:`AcquisitionError`."""
        ...


SuccessCallback = Callable[[Reading], None]
ErrorCallback = Callable[[AcquisitionErrorKind], None]
PositionRequest = Callable[[SuccessCallback, ErrorCallback, AttemptOptions], None]


class CallbackLocationCapability:
    """Adapt a callback-style position API to :class:`LocationCapability`.

    ``request_position`` is called with a success callback, an error callback
    and the attempt options, and must eventually invoke exactly one of the
    callbacks. The callbacks may be invoked from any thread. Whatever
    arrives after the first outcome is ignored.
    """

    def __init__(self, request_position: PositionRequest | None) -> None:
        self._request_position = request_position

    def is_available(self) -> bool:
        return self._request_position is not None

    async def get_current_position(self, options: AttemptOptions) -> Reading:
        if self._request_position is None:
            raise AcquisitionError(AcquisitionErrorKind.CAPABILITY_ABSENT)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Reading] = loop.create_future()

        def settle(outcome: Reading | AcquisitionError) -> None:
            if future.done():
                return
            if isinstance(outcome, AcquisitionError):
                future.set_exception(outcome)
            else:
                future.set_result(outcome)

        def on_success(reading: Reading) -> None:
            loop.call_soon_threadsafe(settle, reading)

        def on_error(kind: AcquisitionErrorKind) -> None:
            loop.call_soon_threadsafe(settle, AcquisitionError(kind))

        self._request_position(on_success, on_error, options)
        return await future


class Stage(str, Enum):
    """Progress stages reported while acquiring."""

    REQUESTING = "requesting"
    READING = "reading"
    ERROR = "error"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Diagnostic event for presentation layers. Not needed for correctness."""

    profile: str
    attempt: int
    max_attempts: int
    stage: Stage
    precision_meters: float | None = None
    tier: AccuracyTier | None = None
    error: AcquisitionErrorKind | None = None


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass(frozen=True)
class Acquisition:
    """Successful outcome of :meth:`LocationAcquirer.acquire`."""

    reading: Reading
    tier: AccuracyTier
    attempts: int


def _rank(reading: Reading) -> float:
    precision = reading.precision_meters
    if precision is None or precision < 0:
        return float("inf")
    return precision


def _consume_result(task: "asyncio.Future[Any]") -> None:
    # Results of abandoned requests are discarded
    if not task.cancelled():
        task.exception()


class LocationAcquirer:
    """Obtain one reading that satisfies a profile's accuracy bar."""

    def __init__(
        self,
        capability: LocationCapability | None,
        on_progress: ProgressCallback | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.capability = capability
        self.on_progress = on_progress
        self._sleep = sleep

    def _emit(self, event: ProgressEvent) -> None:
        logger.debug(
            "location_progress",
            profile=event.profile,
            attempt=event.attempt,
            max_attempts=event.max_attempts,
            stage=event.stage.value,
            precision_meters=event.precision_meters,
            tier=event.tier.value if event.tier else None,
            error=event.error.value if event.error else None,
        )
        if self.on_progress is None:
            return
        try:
            self.on_progress(event)
        except Exception as e:
            logger.warning("progress_callback_failed", error=str(e))

    async def _request(
        self, capability: LocationCapability, options: AttemptOptions
    ) -> Reading:
        """Run one device request bounded by the attempt timeout.

        The request runs in its own task so that neither a timeout nor a
        cancelled caller kills it; its late result is simply dropped.
        """
        task = asyncio.ensure_future(capability.get_current_position(options))
        task.add_done_callback(_consume_result)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=options.timeout)
        except asyncio.TimeoutError:
            raise AcquisitionError(
                AcquisitionErrorKind.TIMEOUT,
                f"no position within {options.timeout:g}s",
            ) from None
        except AcquisitionError:
            raise
        except Exception as e:
            logger.warning(
                "location_capability_error", attempt=options.attempt, error=str(e)
            )
            raise AcquisitionError(
                AcquisitionErrorKind.POSITION_UNAVAILABLE, str(e)
            ) from e

    def _fail(
        self, profile: Profile, kind: AcquisitionErrorKind, attempts: int, message: str
    ) -> AcquisitionError:
        self._emit(
            ProgressEvent(
                profile=profile.name,
                attempt=attempts,
                max_attempts=profile.max_attempts,
                stage=Stage.FAILED,
                error=kind,
            )
        )
        ACQUISITION_RESULTS.labels(profile=profile.name, status="failed").inc()
        logger.warning(
            "location_acquisition_failed",
            profile=profile.name,
            attempts=attempts,
            error=kind.value,
        )
        return AcquisitionError(kind, message, attempts=attempts)

    def _succeed(
        self, profile: Profile, reading: Reading, tier: AccuracyTier, attempts: int
    ) -> Acquisition:
        self._emit(
            ProgressEvent(
                profile=profile.name,
                attempt=attempts,
                max_attempts=profile.max_attempts,
                stage=Stage.SUCCEEDED,
                precision_meters=reading.precision_meters,
                tier=tier,
            )
        )
        ACQUISITION_RESULTS.labels(profile=profile.name, status="succeeded").inc()
        logger.info(
            "location_acquired",
            profile=profile.name,
            attempts=attempts,
            precision_meters=reading.precision_meters,
            tier=tier.value,
        )
        return Acquisition(reading=reading, tier=tier, attempts=attempts)

    async def acquire(self, profile: Profile) -> Acquisition:
        """Acquire a reading using the profile's retry policy.

        Args:
            profile: Timeout, attempt and accuracy configuration

        Returns:
            The accepted reading with its tier and the number of attempts used

        Raises:
            AcquisitionError: If the capability is absent, access is denied,
                or every attempt failed without producing a reading
        """
        capability = self.capability
        if capability is None or not capability.is_available():
            raise self._fail(
                profile,
                AcquisitionErrorKind.CAPABILITY_ABSENT,
                0,
                "location services are not available on this device",
            )

        best: Reading | None = None
        last_error: AcquisitionError | None = None

        for attempt in range(1, profile.max_attempts + 1):
            if attempt > 1:
                self._emit(
                    ProgressEvent(
                        profile=profile.name,
                        attempt=attempt,
                        max_attempts=profile.max_attempts,
                        stage=Stage.RETRYING,
                    )
                )
                await self._sleep(profile.retry_delay)

            options = attempt_options(profile, attempt)
            self._emit(
                ProgressEvent(
                    profile=profile.name,
                    attempt=attempt,
                    max_attempts=profile.max_attempts,
                    stage=Stage.REQUESTING,
                )
            )

            try:
                reading = await self._request(capability, options)
            except AcquisitionError as e:
                last_error = e
                ACQUISITION_ATTEMPTS.labels(
                    profile=profile.name, outcome=e.kind.value
                ).inc()
                self._emit(
                    ProgressEvent(
                        profile=profile.name,
                        attempt=attempt,
                        max_attempts=profile.max_attempts,
                        stage=Stage.ERROR,
                        error=e.kind,
                    )
                )
                if not e.retryable:
                    raise self._fail(profile, e.kind, attempt, str(e)) from e
                continue

            tier = classify(reading.precision_meters, profile)
            ACQUISITION_ATTEMPTS.labels(profile=profile.name, outcome=tier.value).inc()
            self._emit(
                ProgressEvent(
                    profile=profile.name,
                    attempt=attempt,
                    max_attempts=profile.max_attempts,
                    stage=Stage.READING,
                    precision_meters=reading.precision_meters,
                    tier=tier,
                )
            )
            if best is None or _rank(reading) <= _rank(best):
                best = reading

            if tier is not AccuracyTier.POOR:
                return self._succeed(profile, reading, tier, attempt)

        # Attempts exhausted: settle for the best reading seen, if any
        if best is not None:
            return self._succeed(
                profile,
                best,
                classify(best.precision_meters, profile),
                profile.max_attempts,
            )

        # Every attempt ended in a retryable error
        kind = (
            last_error.kind if last_error else AcquisitionErrorKind.POSITION_UNAVAILABLE
        )
        raise self._fail(
            profile, kind, profile.max_attempts, str(last_error or kind.value)
        ) from last_error
