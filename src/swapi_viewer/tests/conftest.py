from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from swapi_viewer.cache import ExpiringCache, MemoryKeyValueStore
from swapi_viewer.swapi_api import SwapiApi

BASE_URL = "https://swapi.test/api/"


@pytest.fixture(autouse=True)
def isolate_cache_db(tmp_path, monkeypatch):
    """Force each test onto its own DuckDB file and default settings."""
    monkeypatch.setenv("SWAPI_VIEWER_CACHE_DB", str(tmp_path / "cache.duckdb"))
    for name in (
        "SWAPI_VIEWER_BASE_URL",
        "SWAPI_VIEWER_CACHE_EXPIRY",
        "SWAPI_VIEWER_CACHE_MAX_ENTRIES",
        "SWAPI_VIEWER_SEARCH_DEBOUNCE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSwapi:
    """Canned upstream: maps URLs to (status, json, delay) and records every request."""

    def __init__(self):
        self.routes: dict[str, tuple[int, Any, float]] = {}
        self.requests: list[str] = []
        self.broken: set[str] = set()

    def add(self, url: str, payload: Any, *, status: int = 200, delay: float = 0.0):
        self.routes[url] = (status, payload, delay)

    def break_connection(self, url: str) -> None:
        self.broken.add(url)

    def add_pages(self, endpoint: str, pages: list[list[dict]]) -> None:
        for index, results in enumerate(pages, start=1):
            url = f"{BASE_URL}{endpoint}/" if index == 1 else f"{BASE_URL}{endpoint}/?page={index}"
            next_url = (
                f"{BASE_URL}{endpoint}/?page={index + 1}" if index < len(pages) else None
            )
            self.add(url, {"count": None, "next": next_url, "results": results})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if url not in self.routes:
            return httpx.Response(404, json={"detail": "Not found"})
        status, payload, delay = self.routes[url]
        if delay:
            await asyncio.sleep(delay)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def api(self) -> SwapiApi:
        return SwapiApi(BASE_URL, transport=self.transport)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock) -> ExpiringCache:
    return ExpiringCache(MemoryKeyValueStore(), clock=clock)


@pytest.fixture
def fake_swapi() -> FakeSwapi:
    return FakeSwapi()
