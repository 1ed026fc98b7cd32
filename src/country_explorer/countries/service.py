"""
Country listing, lookup, search and statistics.

Results are cached per query; on an upstream failure the built-in sample set
is used so callers always get a usable response.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

import structlog

from country_explorer.countries.cache import ResultCache
from country_explorer.countries.pipeline import paginate, parse_countries
from country_explorer.countries.sample_data import SAMPLE_COUNTRIES
from country_explorer.countries.schemas import (
    Country,
    CountryQuery,
    CountryStats,
    PopulationStats,
    RegionStats,
)
from country_explorer.countries.upstream import CountryUpstream
from country_explorer.errors import NotFound, UpstreamUnavailable, ValidationError

logger = structlog.get_logger()

STATS_CACHE_KEY = "stats"
SEARCH_CACHE_KEY = "search:{term}"


def sample_countries() -> list[Country]:
    countries, _ = parse_countries(SAMPLE_COUNTRIES)
    return countries


class CountryService:
    """Request-independent country operations over an upstream and a cache."""

    def __init__(self, upstream: CountryUpstream, cache: ResultCache) -> None:
        self.upstream = upstream
        self.cache = cache

    async def _load_all(self) -> tuple[list[Country], bool]:
        """Fetch and validate the full country set.

        Returns:
            Tuple of (countries, from_fallback).
        """
        try:
            raw = await self.upstream.fetch_all()
        except UpstreamUnavailable as e:
            logger.warning("upstream_fetch_failed_using_sample_data", error=str(e))
            return sample_countries(), True

        countries, dropped = parse_countries(raw)
        if dropped:
            logger.warning("upstream_records_dropped", dropped=dropped, kept=len(countries))
        return countries, False

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_countries(self, query: CountryQuery) -> dict[str, Any]:
        """Paginated listing. Identical queries within the TTL return the cached body unchanged."""
        cache_key = query.cache_key()
        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.debug("countries_cache_hit", key=cache_key)
            return cached

        countries, from_fallback = await self._load_all()
        page = paginate(countries, query)
        payload: dict[str, Any] = {
            "success": True,
            "data": [c.to_payload() for c in page.items],
            "pagination": page.pagination.model_dump(by_alias=True),
        }
        if from_fallback:
            payload["message"] = "Country provider unavailable, serving sample data"

        await self.cache.set(cache_key, payload)
        return payload

    # ------------------------------------------------------------------
    # Single country
    # ------------------------------------------------------------------

    async def get_country(self, name: str) -> dict[str, Any]:
        """Look a country up by its name. Raises NotFound when unknown."""
        try:
            record = await self.upstream.fetch_by_name(name)
        except UpstreamUnavailable as e:
            logger.warning("upstream_lookup_failed_using_sample_data", name=name, error=str(e))
            needle = name.lower()
            for country in sample_countries():
                if needle in (country.name.common.lower(), (country.name.official or "").lower()):
                    return country.to_payload()
            raise NotFound("Country not found") from None

        if record is None:
            raise NotFound("Country not found")
        return record

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, term: str | None) -> dict[str, Any]:
        """Free-text name search. No matches is a successful, empty result."""
        term = (term or "").strip()
        if not term:
            raise ValidationError("Search query is required")

        cache_key = SEARCH_CACHE_KEY.format(term=term.lower())
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return {**cached, "message": _search_message(term, len(cached["data"]))}

        try:
            results = await self.upstream.search(term)
        except UpstreamUnavailable as e:
            logger.warning("upstream_search_failed_using_sample_data", term=term, error=str(e))
            needle = term.lower()
            results = [
                c.to_payload()
                for c in sample_countries()
                if needle in c.name.common.lower() or needle in (c.name.official or "").lower()
            ]

        # The message echoes each caller's own term, so only the results are cached
        await self.cache.set(cache_key, {"success": True, "data": results})
        return {"success": True, "data": results, "message": _search_message(term, len(results))}

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def stats(self) -> dict[str, Any]:
        """Country count, per-region breakdown and population aggregates."""
        cached = await self.cache.get(STATS_CACHE_KEY)
        if cached is not None:
            return cached

        countries, _ = await self._load_all()
        payload = {"success": True, "data": compute_stats(countries).model_dump(by_alias=True)}
        await self.cache.set(STATS_CACHE_KEY, payload)
        return payload

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync(self) -> dict[str, Any]:
        """Drop every cached response so the next request refetches from upstream."""
        await self.cache.invalidate_all()
        logger.info("countries_synced")
        return {"success": True, "message": "Countries data synced successfully (cache cleared)"}


def _search_message(term: str, count: int) -> str:
    if count:
        return f'Found {count} countries matching "{term}"'
    return f'No countries found matching "{term}"'


def compute_stats(countries: list[Country]) -> CountryStats:
    counts: dict[str, int] = defaultdict(int)
    populations: dict[str, int] = defaultdict(int)
    for country in countries:
        counts[country.region] += 1
        populations[country.region] += country.population

    regions = sorted(
        (RegionStats(region=r, count=counts[r], total_population=populations[r]) for r in counts),
        key=lambda s: s.count,
        reverse=True,
    )

    if countries:
        values = [c.population for c in countries]
        population = PopulationStats(
            total_population=sum(values),
            avg_population=sum(values) / len(values),
            max_population=max(values),
            min_population=min(values),
        )
    else:
        population = PopulationStats()

    return CountryStats(
        total_countries=len(countries),
        region_stats=regions,
        population_stats=population,
    )
