from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from .cache import CacheContext, CacheStore
from .requests import EndpointQueryContext
from .swapi_api import SwapiApi

logger = logging.getLogger(__name__)

Ctx = TypeVar("Ctx", bound=CacheContext)
Resp = TypeVar("Resp")


class CachedFetcher(ABC, Generic[Ctx, Resp]):
    """Cache-or-fetch template: hydrate from the store, else hit the network and record."""

    def __init__(self, *, ctx: Ctx, cache_store: CacheStore[Ctx] | None = None):
        self._ctx = ctx
        self._cache_store = cache_store
        self._response: Resp | None = None
        self._last_response_source: str = "uninitialized"

        if self._cache_store is not None:
            cached = self._cache_store.get(self._ctx)
            if cached is not None:
                self._response = self._hydrate(cached)
                if self._response is None:
                    logger.warning("Discarding unusable cache entry %s", ctx.key())

    @property
    def last_response_source(self) -> str:
        return self._last_response_source

    @property
    def ctx(self) -> Ctx:
        return self._ctx

    async def fetch(self, *, use_cache: bool = True) -> Resp:
        if use_cache and self._response is not None:
            self._last_response_source = "cache"
            logger.debug("Serving %s from cache", self._ctx.key())
            return self._response

        logger.debug("Fetching %s from the network", self._ctx.key())
        self._response = await self._fetch_remote()
        self._record(self._response)
        self._last_response_source = "network"
        return self._response

    def _record(self, response: Resp) -> Resp:
        """Persist response to cache store if present."""
        if self._cache_store is not None:
            self._cache_store.put(self._serialize(response), self._ctx)
        return response

    @abstractmethod
    async def _fetch_remote(self) -> Resp:
        raise NotImplementedError

    @abstractmethod
    def _hydrate(self, payload: Any) -> Resp | None:
        """Convert cached payload into a response object, or None if unusable."""
        raise NotImplementedError

    @abstractmethod
    def _serialize(self, response: Resp) -> Any:
        """Convert response into cacheable payload."""
        raise NotImplementedError


class EndpointListFetcher(CachedFetcher[EndpointQueryContext, list[dict]]):
    """Every item of one collection endpoint, cached under the endpoint name."""

    def __init__(
        self,
        endpoint: str,
        api: SwapiApi,
        cache_store: CacheStore[EndpointQueryContext] | None = None,
    ):
        self._api = api
        super().__init__(ctx=EndpointQueryContext(endpoint), cache_store=cache_store)

    async def _fetch_remote(self) -> list[dict]:
        return await self._api.fetch_all(self._ctx.endpoint)

    def _hydrate(self, payload: Any) -> list[dict] | None:
        if not isinstance(payload, list):
            return None
        return [dict(item) for item in payload if isinstance(item, dict)]

    def _serialize(self, response: list[dict]) -> Any:
        return list(response)
