"""Offset pagination, filtering and sorting over an in-memory country list.

The upstream provider returns the full country set in one response, so all
query handling happens here rather than in a database.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import ValidationError

from country_explorer.countries.schemas import Country, CountryPage, CountryQuery, Pagination, SortField


def matches_search(country: Country, term: str) -> bool:
    """Case-insensitive substring match on the common name or the first capital."""
    needle = term.lower()
    if needle in country.name.common.lower():
        return True
    return bool(country.capital) and needle in country.capital[0].lower()


def matches_region(country: Country, region: str) -> bool:
    """Case-insensitive exact match on the region."""
    return country.region.lower() == region.lower()


def filter_countries(
    countries: Iterable[Country],
    search: str | None = None,
    region: str | None = None,
) -> list[Country]:
    result = list(countries)
    if search:
        result = [c for c in result if matches_search(c, search)]
    if region:
        result = [c for c in result if matches_region(c, region)]
    return result


_SORT_KEYS: dict[str, Callable[[Country], Any]] = {
    "name": lambda c: c.name.common,
    "population": lambda c: c.population,
    "area": lambda c: c.area or 0,
}


def sort_countries(countries: list[Country], sort_by: SortField = "name", sort_order: str = "asc") -> list[Country]:
    """Stable sort. Equal keys keep their input order in both directions."""
    return sorted(countries, key=_SORT_KEYS[sort_by], reverse=sort_order == "desc")


def paginate(countries: list[Country], query: CountryQuery) -> CountryPage:
    """Filter, sort and slice ``countries`` according to ``query``.

    Pages past the end yield an empty slice; ``total`` counts the filtered set.
    """
    filtered = filter_countries(countries, search=query.search, region=query.region)
    ordered = sort_countries(filtered, query.sort_by, query.sort_order)

    start = (query.page - 1) * query.limit
    items = ordered[start : start + query.limit]

    total = len(ordered)
    return CountryPage(
        items=items,
        pagination=Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=math.ceil(total / query.limit),
        ),
    )


def parse_countries(raw: Iterable[Any]) -> tuple[list[Country], int]:
    """Validate raw upstream records.

    Returns:
        Tuple of (valid countries, number of malformed records dropped).
    """
    valid: list[Country] = []
    dropped = 0
    for record in raw:
        try:
            valid.append(Country.model_validate(record))
        except ValidationError:
            dropped += 1
    return valid, dropped
