"""Middleware registration."""

from fastapi import FastAPI

from country_explorer.config import Settings
from country_explorer.middleware.cors import SecurityHeadersMiddleware, setup_cors
from country_explorer.middleware.error_handler import setup_error_handlers
from country_explorer.middleware.logging import setup_logging
from country_explorer.middleware.rate_limit import (
    AUTH_CREDENTIAL_PATHS,
    AUTH_LIMIT_MESSAGE,
    GENERAL_LIMIT_MESSAGE,
    RateLimitMiddleware,
    RateLimitRule,
    RateLimitStore,
)
from country_explorer.middleware.request_id import RequestIdMiddleware


def rate_limit_rules(settings: Settings) -> list[RateLimitRule]:
    """Stricter credential-endpoint budget first, then the whole-API budget."""
    return [
        RateLimitRule(
            name="auth",
            limit=settings.rate_limit_auth,
            window_seconds=settings.rate_limit_window_seconds,
            message=AUTH_LIMIT_MESSAGE,
            paths=AUTH_CREDENTIAL_PATHS,
        ),
        RateLimitRule(
            name="api",
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
            message=GENERAL_LIMIT_MESSAGE,
        ),
    ]


def setup_middleware(app: FastAPI, settings: Settings, rate_limit_store: RateLimitStore) -> None:
    """Register all middleware in the correct order.

    FastAPI/Starlette executes middleware in reverse-add order (last added = outermost).
    CORS must be outermost so it wraps error responses from inner middleware (e.g. 429).
    """
    setup_logging(settings)
    setup_error_handlers(app, settings)
    app.add_middleware(
        RateLimitMiddleware,
        store=rate_limit_store,
        rules=rate_limit_rules(settings),
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)  # added last → outermost → wraps 429 responses
