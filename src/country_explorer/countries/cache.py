"""Result cache for computed country responses.

Two interchangeable backends:

* ``MemoryResultCache``: per-process dict with passive TTL expiry (checked on
  read, expired entries also pruned opportunistically on write).
* ``RedisResultCache``: ``SETEX`` under a key prefix, so Redis expires entries
  and ``invalidate_all`` deletes everything under the prefix.

Payloads are plain JSON-able dicts: the fully computed response body.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Any, Protocol

import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 3600


class ResultCache(Protocol):
    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, payload: dict[str, Any]) -> None: ...

    async def invalidate_all(self) -> None: ...


class MemoryResultCache:
    """In-process TTL cache. ``clock`` is injectable for tests."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[dict[str, Any], float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, inserted_at: float, now: float) -> bool:
        return now >= inserted_at + self.ttl_seconds

    async def get(self, key: str) -> dict[str, Any] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, inserted_at = entry
        if self._expired(inserted_at, self._clock()):
            del self._entries[key]
            return None
        return payload

    async def set(self, key: str, payload: dict[str, Any]) -> None:
        now = self._clock()
        for stale in [k for k, (_, ts) in self._entries.items() if self._expired(ts, now)]:
            del self._entries[stale]
        self._entries[key] = (payload, now)

    async def invalidate_all(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info("result_cache_cleared", backend="memory", entries=count)


class RedisResultCache:
    """Redis-backed cache shared by every worker process."""

    def __init__(
        self,
        redis: aioredis.Redis,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        prefix: str = "cexp:cache:",
    ) -> None:
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    async def get(self, key: str) -> dict[str, Any] | None:
        cached = await self._redis.get(self.prefix + key)
        if cached is None:
            return None
        return json.loads(cached)

    async def set(self, key: str, payload: dict[str, Any]) -> None:
        await self._redis.setex(self.prefix + key, self.ttl_seconds, json.dumps(payload))

    async def invalidate_all(self) -> None:
        keys = [key async for key in self._redis.scan_iter(match=self.prefix + "*")]
        if keys:
            await self._redis.delete(*keys)
        logger.info("result_cache_cleared", backend="redis", entries=len(keys))
