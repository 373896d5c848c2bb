from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError
from typing_extensions import Annotated

from .config import DEFAULT_BASE_URL
from .errors import ApiError, NetworkError
from .requests import EndpointRequest

logger = logging.getLogger(__name__)


class PageResponse(BaseModel):
    count: Annotated[Optional[int], Field(description="Total items in the collection")] = None
    next: Annotated[Optional[str], Field(description="URL of the next page")] = None
    previous: Annotated[Optional[str], Field(description="URL of the previous page")] = None
    results: Annotated[list[dict], Field(description="Items on this page")] = []


class SwapiApi:
    BASE_URL = DEFAULT_BASE_URL

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        base = base_url or self.BASE_URL
        self.base_url = base if base.endswith("/") else base + "/"
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout,
            follow_redirects=True,
        )

    @staticmethod
    async def _get(client: httpx.AsyncClient, url: str) -> Any:
        try:
            response = await client.get(url)
        except httpx.TransportError as exc:
            raise NetworkError(url, f"Request to {url} failed: {exc}") from exc
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(exc.response.status_code, url) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                response.status_code, url, f"Invalid JSON from {url}"
            ) from exc

    async def get_json(self, url: str) -> dict:
        """Fetch a single resource document."""
        async with self._client() as client:
            data = await self._get(client, url)
        if not isinstance(data, dict):
            raise ApiError(200, url, f"Expected an object from {url}")
        return data

    async def fetch_all(self, endpoint: str) -> list[dict]:
        """Follow ``next`` cursors from the first page and return every result in order."""
        url: str | None = EndpointRequest(endpoint=endpoint, base_url=self.base_url).url()
        results: list[dict] = []
        pages = 0
        async with self._client() as client:
            while url:
                data = await self._get(client, url)
                try:
                    page = PageResponse.model_validate(data)
                except ValidationError as exc:
                    raise ApiError(200, url, f"Malformed page from {url}") from exc
                results.extend(page.results)
                pages += 1
                url = page.next
        logger.debug("Fetched %d items from %s in %d pages", len(results), endpoint, pages)
        return results
