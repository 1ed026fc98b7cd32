"""Country records and query/response schemas."""

from __future__ import annotations

from typing import Any, Literal
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SortField = Literal["name", "population", "area"]
SortOrder = Literal["asc", "desc"]


# ---------------------------------------------------------------------------
# Country (as served by the upstream provider)
# ---------------------------------------------------------------------------


class CountryName(BaseModel):
    model_config = ConfigDict(extra="allow")

    common: str = Field(..., min_length=1)
    official: str | None = None


class CountryFlags(BaseModel):
    model_config = ConfigDict(extra="allow")

    png: str = ""
    svg: str = ""
    alt: str | None = None


class Country(BaseModel):
    """A country record. Records missing ``name.common`` or ``population`` fail validation."""

    model_config = ConfigDict(extra="ignore")

    name: CountryName
    region: str = ""
    subregion: str | None = None
    capital: list[str] = Field(default_factory=list)
    population: int = Field(..., ge=0)
    area: float | None = Field(None, ge=0)
    flags: CountryFlags = Field(default_factory=CountryFlags)
    languages: dict[str, str] | None = None
    currencies: dict[str, Any] | None = None
    timezones: list[str] | None = None
    borders: list[str] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize for a response body, leaving out fields the upstream did not send."""
        return self.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class CountryQuery(BaseModel):
    """Validated query parameters for the paginated listing."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(1, ge=1)
    limit: int = Field(25, ge=1, le=100)
    search: str | None = None
    region: str | None = None
    sort_by: SortField = "name"
    sort_order: SortOrder = "asc"

    def cache_key(self) -> str:
        """Deterministic key over every parameter; any difference yields a different key.

        Free-text values are percent-encoded so a ``:`` inside them cannot shift fields.
        """
        return ":".join(
            [
                "countries",
                str(self.page),
                str(self.limit),
                quote(self.search or "", safe=""),
                quote(self.region or "", safe=""),
                self.sort_by,
                self.sort_order,
            ]
        )


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class CountryPage(BaseModel):
    items: list[Country]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class RegionStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    region: str
    count: int
    total_population: int


class PopulationStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_population: int = 0
    avg_population: float = 0.0
    max_population: int = 0
    min_population: int = 0


class CountryStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_countries: int
    region_stats: list[RegionStats]
    population_stats: PopulationStats
