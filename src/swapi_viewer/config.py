from __future__ import annotations

import os
from dataclasses import dataclass, field


DEFAULT_BASE_URL = "https://swapi.dev/api/"
DEFAULT_CACHE_DB = "~/.swapi_viewer.db"
CACHE_DB_ENV = "SWAPI_VIEWER_CACHE_DB"


def _env_int(name: str, default: int | None, minimum: int | None = None) -> int | None:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    return os.getenv(name) or default


@dataclass(frozen=True)
class Config:
    base_url: str = field(
        default_factory=lambda: _env_str("SWAPI_VIEWER_BASE_URL", DEFAULT_BASE_URL)
    )
    cache_db_default: str = DEFAULT_CACHE_DB
    cache_db_env: str = CACHE_DB_ENV
    cache_expiry_seconds: float = field(
        default_factory=lambda: _env_float("SWAPI_VIEWER_CACHE_EXPIRY", 3600.0)
    )
    cache_max_entries: int | None = field(
        default_factory=lambda: _env_int("SWAPI_VIEWER_CACHE_MAX_ENTRIES", None, minimum=1)
    )
    search_debounce_seconds: float = field(
        default_factory=lambda: _env_float("SWAPI_VIEWER_SEARCH_DEBOUNCE", 0.2)
    )
    http_timeout: float = 10.0
