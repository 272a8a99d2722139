"""Caches for resolved addresses.

The resolver never touches global state: a cache is injected and used only
through ``get(key, max_age)`` and ``put(key, value)``. Cache failures are
logged and treated as misses.
"""

import json
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from locator.core.logging import get_logger
from locator.location.models import Coordinate

logger = get_logger(__name__)


def cache_key(coordinate: Coordinate) -> str:
    """Generate cache key for a coordinate, rounded to roughly 11 meters."""
    return f"location:address:{coordinate.latitude:.4f},{coordinate.longitude:.4f}"


class ResolutionCache(Protocol):
    """Contract for address caches."""

    async def get(self, key: str, max_age: float) -> str | None: ...

    async def put(self, key: str, value: str) -> None: ...


class InMemoryResolutionCache:
    """Process-local cache bounded by entry count."""

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[str, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str, max_age: float) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at > max_age:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    async def put(self, key: str, value: str) -> None:
        self._entries[key] = (value, self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


class RedisResolutionCache:
    """Redis-backed cache shared between processes."""

    def __init__(self, client: Redis, ttl: int) -> None:
        self.client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, redis_url: str, ttl: int) -> "RedisResolutionCache":
        return cls(Redis.from_url(redis_url, decode_responses=True), ttl)

    async def get(self, key: str, max_age: float) -> str | None:
        try:
            cached = await self.client.get(key)
        except RedisError as e:
            logger.warning("cache_retrieval_error", key=key, error=str(e))
            return None
        if not cached:
            return None
        try:
            payload = json.loads(cached)
            address = payload["address"]
            stored_at = float(payload["stored_at"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("cache_payload_invalid", key=key, error=str(e))
            return None
        if time.time() - stored_at > max_age:
            return None
        logger.debug("cache_hit", key=key)
        return str(address)

    async def put(self, key: str, value: str) -> None:
        payload = json.dumps({"address": value, "stored_at": time.time()})
        try:
            if self.ttl > 0:
                await self.client.setex(key, self.ttl, payload)
            else:
                await self.client.set(key, payload)
        except RedisError as e:
            logger.warning("cache_storage_error", key=key, error=str(e))

    async def close(self) -> None:
        await self.client.aclose()
