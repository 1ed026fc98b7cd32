"""Health, readiness, and API index endpoints."""

import time
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Liveness probe. Returns 200 while the process is up."""
    settings = request.app.state.settings
    return {
        "success": True,
        "message": "Country Explorer API is healthy",
        "status": "healthy",
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness(request: Request) -> dict[str, object]:
    """Readiness probe: database and, when configured, Redis connectivity."""
    checks: dict[str, object] = {}

    try:
        await request.app.state.database.ping()
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"

    redis = request.app.state.redis
    if redis is not None:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"success": all_ok, "status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/api/v1")
async def api_index(request: Request) -> dict[str, Any]:
    """List the available endpoints."""
    return {
        "success": True,
        "message": "Welcome to Country Explorer API v1",
        "version": request.app.state.settings.app_version,
        "endpoints": {
            "countries": {
                "GET /api/v1/countries": "Get all countries with pagination",
                "GET /api/v1/countries/search": "Search countries by name",
                "GET /api/v1/countries/stats": "Country statistics",
                "GET /api/v1/countries/:id": "Get country by name",
                "POST /api/v1/countries/sync": "Clear the country cache",
            },
            "auth": {
                "POST /api/v1/auth/register": "Register new user",
                "POST /api/v1/auth/login": "Login user",
                "POST /api/v1/auth/refresh": "Refresh tokens",
                "POST /api/v1/auth/logout": "Logout (client discards tokens)",
                "GET /api/v1/auth/profile": "Get user profile (protected)",
                "PUT /api/v1/auth/profile": "Update user profile (protected)",
                "POST /api/v1/auth/change-password": "Change password (protected)",
                "POST /api/v1/auth/favorites/:countryId": "Add country to favorites (protected)",
                "DELETE /api/v1/auth/favorites/:countryId": "Remove country from favorites (protected)",
            },
        },
    }
