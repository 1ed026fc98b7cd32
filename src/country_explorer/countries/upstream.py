"""
HTTP adapter for the restcountries.com v3.1 API.

Every call is time-bounded by the client timeout. Transient errors
(network, timeout) are retried with exponential backoff via tenacity; anything
the caller cannot use is raised as ``UpstreamUnavailable`` so the service layer
can fall back to the built-in sample data.
"""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from country_explorer.errors import UpstreamUnavailable

logger = structlog.get_logger()

LIST_FIELDS = "name,capital,region,subregion,population,area,flags"
DETAIL_FIELDS = "name,capital,population,flags,region,subregion,area,languages,currencies,timezones,borders"
SEARCH_FIELDS = "name,capital,population,flags,region"

_TRANSIENT = (httpx.TimeoutException, httpx.NetworkError)


class CountryUpstream(Protocol):
    async def fetch_all(self) -> list[dict[str, Any]]: ...

    async def fetch_by_name(self, name: str) -> dict[str, Any] | None: ...

    async def search(self, term: str) -> list[dict[str, Any]]: ...


class RestCountriesClient:
    """Async client for the public country provider."""

    def __init__(
        self,
        base_url: str = "https://restcountries.com/v3.1",
        timeout: float = 10.0,
        retry_attempts: int = 2,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retry_attempts = max(1, retry_attempts)
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str]) -> httpx.Response:
        """GET with retry on transient errors. Raises UpstreamUnavailable once retries are spent."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(_TRANSIENT),
                reraise=True,
            ):
                with attempt:
                    return await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning("upstream_request_failed", path=path, error=str(e) or type(e).__name__)
            msg = f"Upstream request failed: {type(e).__name__}"
            raise UpstreamUnavailable(msg) from e
        msg = "Upstream request was not attempted"
        raise UpstreamUnavailable(msg)

    @staticmethod
    def _json_list(response: httpx.Response) -> list[dict[str, Any]]:
        if response.status_code >= 400:
            msg = f"Upstream returned HTTP {response.status_code}"
            raise UpstreamUnavailable(msg)
        try:
            data = response.json()
        except ValueError as e:
            msg = "Upstream returned a non-JSON body"
            raise UpstreamUnavailable(msg) from e
        if not isinstance(data, list):
            msg = "Upstream returned an unexpected payload shape"
            raise UpstreamUnavailable(msg)
        return data

    async def fetch_all(self) -> list[dict[str, Any]]:
        """Fetch every country with the fields the listing needs."""
        response = await self._get("/all", {"fields": LIST_FIELDS})
        countries = self._json_list(response)
        logger.info("upstream_fetch_all", count=len(countries))
        return countries

    async def fetch_by_name(self, name: str) -> dict[str, Any] | None:
        """Full-text name lookup. Returns None when the provider has no match."""
        response = await self._get(
            f"/name/{quote(name, safe='')}",
            {"fullText": "true", "fields": DETAIL_FIELDS},
        )
        if response.status_code == 404:
            return None
        countries = self._json_list(response)
        return countries[0] if countries else None

    async def search(self, term: str) -> list[dict[str, Any]]:
        """Partial name search. An upstream 404 means no matches."""
        response = await self._get(f"/name/{quote(term, safe='')}", {"fields": SEARCH_FIELDS})
        if response.status_code == 404:
            return []
        return self._json_list(response)
