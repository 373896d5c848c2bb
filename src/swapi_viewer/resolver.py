from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

import httpx

from .cache import ExpiringCache
from .errors import SwapiError
from .requests import NameQueryContext
from .swapi_api import SwapiApi

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
ERROR_LOADING = "Error loading"


class ReferenceResolver:
    """Turns reference URLs into display names, caching each name per URL."""

    def __init__(self, api: SwapiApi, cache: ExpiringCache):
        self._api = api
        self._cache = cache

    async def resolve_name(self, url: Any) -> str:
        if not url or not isinstance(url, str):
            return UNKNOWN

        cache_key = NameQueryContext(url).key()
        cached = self._cache.get(cache_key)
        if cached:
            return cached

        try:
            data = await self._api.get_json(url)
        except (SwapiError, httpx.HTTPError) as exc:
            logger.error("Could not resolve name for %s: %s", url, exc)
            return ERROR_LOADING

        name = data.get("name") or data.get("title") or UNKNOWN
        name = str(name)
        self._cache.set(cache_key, name)
        return name

    async def resolve_many(self, urls: Iterable[Any]) -> list[str]:
        """Resolve all urls concurrently; the result keeps the input order."""
        return list(await asyncio.gather(*(self.resolve_name(url) for url in urls)))
