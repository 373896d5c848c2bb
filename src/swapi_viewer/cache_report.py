from __future__ import annotations

import time
from datetime import datetime, timezone

from pydantic import ValidationError

from .cache import CacheEntry, ExpiringCache
from .db import DuckDb, DuckDbKeyValueStore


def _key_kind(key: str) -> str:
    return "reference_name" if key.startswith("name_") else "collection"


def build_report(db: DuckDb, expiry_seconds: float, now: float | None = None) -> dict:
    """Count fresh, expired and unreadable entries without touching their recency."""
    now = time.time() if now is None else now
    counts = {"fresh": 0, "expired": 0, "malformed": 0}
    kinds: dict[str, int] = {}
    oldest_age: float | None = None
    for key in db.keys():
        kinds[_key_kind(key)] = kinds.get(_key_kind(key), 0) + 1
        payload = db.get_payload(key, touch=False)
        if payload is None:
            continue
        try:
            entry = CacheEntry.model_validate_json(payload)
        except ValidationError:
            counts["malformed"] += 1
            continue
        age = entry.age(now)
        oldest_age = age if oldest_age is None else max(oldest_age, age)
        counts["expired" if age >= expiry_seconds else "fresh"] += 1
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "db_path": db.db_path,
        "expiry_seconds": expiry_seconds,
        "total_entries": db.count(),
        "status_counts": counts,
        "kind_counts": kinds,
        "oldest_age_sec": oldest_age,
    }


def purge(db: DuckDb, expiry_seconds: float, now: float | None = None) -> int:
    clock = time.time if now is None else (lambda: now)
    cache = ExpiringCache(DuckDbKeyValueStore(db), expiry_seconds=expiry_seconds, clock=clock)
    return cache.purge_expired()
