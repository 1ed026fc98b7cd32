"""FastAPI application factory."""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from country_explorer.auth.router import router as auth_router
from country_explorer.config import Settings, get_settings
from country_explorer.countries.cache import MemoryResultCache, RedisResultCache, ResultCache
from country_explorer.countries.router import router as countries_router
from country_explorer.countries.upstream import CountryUpstream, RestCountriesClient
from country_explorer.database import Database
from country_explorer.health.router import router as health_router
from country_explorer.middleware import setup_middleware
from country_explorer.middleware.rate_limit import MemoryRateLimitStore, RateLimitStore, RedisRateLimitStore
from country_explorer.redis_client import close_redis, create_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    if settings.database_auto_create:
        await app.state.database.create_all()
    logger.info("app_started", environment=settings.environment, version=settings.app_version)

    yield

    upstream = app.state.upstream
    if isinstance(upstream, RestCountriesClient):
        await upstream.aclose()
    await app.state.database.dispose()
    await close_redis(app.state.redis)


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    upstream: CountryUpstream | None = None,
    result_cache: ResultCache | None = None,
    rate_limit_store: RateLimitStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from ``settings`` and stored on
    ``app.state``; nothing is shared between two apps.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Country Explorer API",
        description="Cached country data with user accounts and favorites",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    redis = create_redis(settings.redis_url) if settings.redis_url else None

    if result_cache is None:
        if settings.cache_backend == "redis" and redis is not None:
            result_cache = RedisResultCache(redis, ttl_seconds=settings.cache_ttl_seconds)
        else:
            result_cache = MemoryResultCache(ttl_seconds=settings.cache_ttl_seconds)

    if rate_limit_store is None:
        rate_limit_store = RedisRateLimitStore(redis) if redis is not None else MemoryRateLimitStore()

    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.redis = redis
    app.state.database = database or Database(settings.database_url)
    app.state.result_cache = result_cache
    app.state.upstream = upstream or RestCountriesClient(
        base_url=settings.upstream_base_url,
        timeout=settings.upstream_timeout_seconds,
        retry_attempts=settings.upstream_retry_attempts,
    )

    setup_middleware(app, settings, rate_limit_store)
    app.include_router(health_router, tags=["Health"])
    app.include_router(countries_router)
    app.include_router(auth_router)

    return app
