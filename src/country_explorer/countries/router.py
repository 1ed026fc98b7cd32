"""Countries router for /api/v1/countries/* endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from country_explorer.countries.schemas import CountryQuery, SortField, SortOrder
from country_explorer.countries.service import CountryService
from country_explorer.dependencies import get_country_service

router = APIRouter(prefix="/api/v1/countries", tags=["Countries"])


@router.get("")
async def list_countries(
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    search: str | None = Query(None, max_length=100),
    region: str | None = Query(None, max_length=50),
    sort_by: SortField = Query("name", alias="sortBy"),
    sort_order: SortOrder = Query("asc", alias="sortOrder"),
    service: CountryService = Depends(get_country_service),  # noqa: B008
) -> JSONResponse:
    """Paginated, filterable, sortable country list (cached per query)."""
    query = CountryQuery(
        page=page,
        limit=limit,
        search=search or None,
        region=region or None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return JSONResponse(await service.list_countries(query))


@router.get("/search")
async def search_countries(
    q: str | None = Query(None, max_length=100),
    service: CountryService = Depends(get_country_service),  # noqa: B008
) -> dict[str, Any]:
    """Free-text search by country name."""
    return await service.search(q)


@router.get("/stats")
async def country_stats(
    service: CountryService = Depends(get_country_service),  # noqa: B008
) -> dict[str, Any]:
    """Country count, per-region breakdown and population aggregates."""
    return await service.stats()


@router.post("/sync")
async def sync_countries(
    service: CountryService = Depends(get_country_service),  # noqa: B008
) -> dict[str, Any]:
    """Clear the result cache so the next request refetches from the provider."""
    return await service.sync()


@router.get("/{country_id}")
async def get_country(
    country_id: str,
    service: CountryService = Depends(get_country_service),  # noqa: B008
) -> dict[str, Any]:
    """Look up a single country by name."""
    return {"success": True, "data": await service.get_country(country_id)}
