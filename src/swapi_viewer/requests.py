from __future__ import annotations

import hashlib
from dataclasses import dataclass


KNOWN_ENDPOINTS = ("people", "films", "planets", "species", "starships", "vehicles")

DEFAULT_NAME_KEYS = {"films": "title"}


def default_name_key(endpoint: str) -> str:
    return DEFAULT_NAME_KEYS.get(endpoint, "name")


def _stable_hash(key: str) -> int:
    hash_bytes = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(hash_bytes, byteorder="big")


@dataclass(frozen=True)
class EndpointRequest:
    endpoint: str
    base_url: str

    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}/"


@dataclass(frozen=True)
class EndpointQueryContext:
    """Cache context for a whole paginated collection."""

    endpoint: str

    def key(self) -> str:
        return self.endpoint

    def __hash__(self) -> int:
        return _stable_hash(self.key())


@dataclass(frozen=True)
class NameQueryContext:
    """Cache context for the display name behind a reference URL."""

    url: str

    def key(self) -> str:
        return f"name_{self.url}"

    def __hash__(self) -> int:
        return _stable_hash(self.key())
