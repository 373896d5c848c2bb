from __future__ import annotations

import logging

import pytest

from swapi_viewer.resolver import ERROR_LOADING, UNKNOWN, ReferenceResolver

BASE_URL = "https://swapi.test/api/"


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [None, 42, "", ["x"]])
async def test_non_string_input_is_unknown_without_request(fake_swapi, memory_cache, value):
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    assert await resolver.resolve_name(value) == UNKNOWN
    assert fake_swapi.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"name": "Tatooine", "title": "ignored"}, "Tatooine"),
        ({"title": "A New Hope"}, "A New Hope"),
        ({"name": "", "title": ""}, UNKNOWN),
        ({"climate": "arid"}, UNKNOWN),
    ],
)
async def test_name_title_fallback(fake_swapi, memory_cache, payload, expected):
    url = f"{BASE_URL}planets/1/"
    fake_swapi.add(url, payload)
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    assert await resolver.resolve_name(url) == expected


@pytest.mark.asyncio
async def test_resolved_names_are_cached(fake_swapi, memory_cache):
    url = f"{BASE_URL}planets/1/"
    fake_swapi.add(url, {"name": "Tatooine"})
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    assert await resolver.resolve_name(url) == "Tatooine"
    assert await resolver.resolve_name(url) == "Tatooine"

    assert fake_swapi.requests == [url]
    assert memory_cache.get(f"name_{url}") == "Tatooine"


@pytest.mark.asyncio
async def test_expired_name_is_fetched_again(fake_swapi, memory_cache, clock):
    url = f"{BASE_URL}planets/1/"
    fake_swapi.add(url, {"name": "Tatooine"})
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    await resolver.resolve_name(url)
    clock.advance(3600)
    await resolver.resolve_name(url)

    assert fake_swapi.requests == [url, url]


@pytest.mark.asyncio
async def test_http_failure_returns_sentinel(fake_swapi, memory_cache, caplog):
    url = f"{BASE_URL}planets/404/"
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    with caplog.at_level(logging.ERROR, logger="swapi_viewer.resolver"):
        assert await resolver.resolve_name(url) == ERROR_LOADING

    assert memory_cache.get(f"name_{url}") is None
    assert any(url in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_connection_failure_returns_sentinel(fake_swapi, memory_cache):
    url = f"{BASE_URL}planets/2/"
    fake_swapi.break_connection(url)
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    assert await resolver.resolve_name(url) == ERROR_LOADING


@pytest.mark.asyncio
async def test_resolve_many_keeps_input_order(fake_swapi, memory_cache):
    slow = f"{BASE_URL}planets/1/"
    fast = f"{BASE_URL}planets/2/"
    fake_swapi.add(slow, {"name": "Tatooine"}, delay=0.05)
    fake_swapi.add(fast, {"name": "Alderaan"})
    resolver = ReferenceResolver(fake_swapi.api(), memory_cache)

    names = await resolver.resolve_many([slow, fast])

    assert names == ["Tatooine", "Alderaan"]
