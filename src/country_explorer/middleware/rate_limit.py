"""Fixed-window rate limiting middleware.

Each rule counts requests per client IP per window. Counters live in Redis when
configured (shared by every worker) or in process memory otherwise.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from country_explorer.errors import error_body

logger = structlog.get_logger()

# Paths exempt from rate limiting
_EXEMPT_PATHS = frozenset({"/health", "/ready"})

GENERAL_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
AUTH_LIMIT_MESSAGE = "Too many authentication attempts, please try again later"

AUTH_CREDENTIAL_PATHS = frozenset(
    {
        "/api/v1/auth/register",
        "/api/v1/auth/login",
        "/api/v1/auth/refresh",
        "/api/v1/auth/change-password",
    }
)


class RateLimitStore(Protocol):
    async def hit(self, key: str, ttl_seconds: int) -> int:
        """Increment ``key`` and return the new count. The key expires after ``ttl_seconds``."""
        ...


class MemoryRateLimitStore:
    """Per-process counters. Expired windows are pruned lazily."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._counters: dict[str, tuple[int, float]] = {}
        self._next_prune = 0.0

    async def hit(self, key: str, ttl_seconds: int) -> int:
        now = self._clock()
        if now >= self._next_prune:
            self._counters = {k: v for k, v in self._counters.items() if v[1] > now}
            self._next_prune = now + 60

        count, expires_at = self._counters.get(key, (0, now + ttl_seconds))
        if expires_at <= now:
            count, expires_at = 0, now + ttl_seconds
        count += 1
        self._counters[key] = (count, expires_at)
        return count


class RedisRateLimitStore:
    """Redis counters shared across processes."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def hit(self, key: str, ttl_seconds: int) -> int:
        pipe = self._redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, ttl_seconds + 1)
        results: list[Any] = await pipe.execute()
        return int(results[0])


@dataclass(frozen=True)
class RateLimitRule:
    """A request budget. ``paths`` of None means every non-exempt path."""

    name: str
    limit: int
    window_seconds: int
    message: str = GENERAL_LIMIT_MESSAGE
    paths: frozenset[str] | None = None

    def applies_to(self, path: str) -> bool:
        return self.paths is None or path.rstrip("/") in self.paths


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests per IP against every applicable rule."""

    def __init__(self, app: Any, store: RateLimitStore, rules: list[RateLimitRule]) -> None:  # noqa: ANN401
        super().__init__(app)
        self.store = store
        self.rules = rules

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check every applicable budget, return 429 if any is exceeded."""
        path = request.url.path
        if path in _EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = int(time.time())
        tightest: tuple[int, RateLimitRule] | None = None

        try:
            for rule in self.rules:
                if not rule.applies_to(path):
                    continue
                window = now // rule.window_seconds
                count = await self.store.hit(f"ratelimit:{rule.name}:{client_ip}:{window}", rule.window_seconds)
                if count > rule.limit:
                    logger.warning("rate_limit_exceeded", rule=rule.name, client_ip=client_ip, path=path)
                    return JSONResponse(
                        status_code=429,
                        content=error_body(429, rule.message),
                        headers={
                            "Retry-After": str(rule.window_seconds - now % rule.window_seconds),
                            "X-RateLimit-Remaining": "0",
                            "X-RateLimit-Limit": str(rule.limit),
                        },
                    )
                remaining = rule.limit - count
                if tightest is None or remaining < tightest[0]:
                    tightest = (remaining, rule)
        except RedisError as e:
            # Counters unavailable: let the request through without rate limiting
            logger.warning("rate_limit_store_unavailable", error=str(e))
            return await call_next(request)

        response = await call_next(request)
        if tightest is not None:
            response.headers["X-RateLimit-Remaining"] = str(tightest[0])
            response.headers["X-RateLimit-Limit"] = str(tightest[1].limit)
        return response
