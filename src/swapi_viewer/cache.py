from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field, ValidationError

from .errors import CacheParseError, StorageQuotaError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 60 * 60


@runtime_checkable
class CacheContext(Protocol):
    """Represents a hashable cache lookup context."""

    def key(self) -> str: ...

    def __hash__(self) -> int: ...


TContext = TypeVar("TContext", bound=CacheContext)


class CacheStore(Protocol[TContext]):
    """Abstract cache store interface to support dependency inversion."""

    def get(self, ctx: TContext) -> Any | None: ...

    def put(self, payload: Any, ctx: TContext) -> None: ...


class KeyValueStore(Protocol):
    """String-keyed, string-valued persistent storage (the localStorage shape)."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, payload: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...

    def least_recent_keys(self, count: int) -> list[str]: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class CacheEntry(BaseModel):
    value: Any = Field(..., description="JSON-serializable cached value")
    written_at: float = Field(..., description="Write time in epoch seconds")

    def age(self, now: float) -> float:
        return now - self.written_at


class MemoryKeyValueStore:
    """In-process store with optional byte quota, mirroring a browser origin limit."""

    def __init__(self, quota_bytes: int | None = None):
        self.quota_bytes = quota_bytes
        self._items: OrderedDict[str, str] = OrderedDict()
        self._size = 0

    @property
    def size_bytes(self) -> int:
        return self._size

    def _entry_size(self, key: str) -> int:
        payload = self._items.get(key)
        return 0 if payload is None else len(key) + len(payload)

    def get_item(self, key: str) -> str | None:
        payload = self._items.get(key)
        if payload is not None:
            self._items.move_to_end(key)
        return payload

    def set_item(self, key: str, payload: str) -> None:
        new_size = self._size - self._entry_size(key) + len(key) + len(payload)
        if self.quota_bytes is not None and new_size > self.quota_bytes:
            raise StorageQuotaError(key, f"Quota of {self.quota_bytes} bytes exceeded")
        self._items[key] = payload
        self._size = new_size
        self._items.move_to_end(key)

    def remove_item(self, key: str) -> None:
        self._size -= self._entry_size(key)
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def least_recent_keys(self, count: int) -> list[str]:
        return list(self._items)[: max(0, count)]

    def clear(self) -> None:
        self._items.clear()
        self._size = 0

    def __len__(self) -> int:
        return len(self._items)


class ExpiringCache:
    """Time-expiring JSON cache on top of a KeyValueStore.

    Entries older than ``expiry_seconds`` read as misses and are removed.
    Corrupt payloads are logged and removed. Write failures are logged and
    leave the store untouched. With ``max_entries`` set, the least recently
    used keys are evicted after each write.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1 when provided")
        self.store = store
        self.expiry_seconds = expiry_seconds
        self.max_entries = max_entries
        self._clock = clock

    def _load_entry(self, key: str, payload: str) -> CacheEntry:
        try:
            return CacheEntry.model_validate_json(payload)
        except ValidationError as exc:
            raise CacheParseError(key) from exc

    def get(self, key: str) -> Any | None:
        payload = self.store.get_item(key)
        if payload is None:
            return None
        try:
            entry = self._load_entry(key, payload)
        except CacheParseError as exc:
            logger.warning("Invalid cache entry, removing %s: %s", key, exc.__cause__)
            self.store.remove_item(key)
            return None
        if entry.age(self._clock()) >= self.expiry_seconds:
            logger.debug("Cache entry %s expired", key)
            self.store.remove_item(key)
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps({"value": value, "written_at": self._clock()})
        except (TypeError, ValueError) as exc:
            logger.warning("Could not serialize cache entry %s: %s", key, exc)
            return
        try:
            self.store.set_item(key, payload)
        except StorageQuotaError as exc:
            logger.warning("Could not save cache entry %s: %s", key, exc)
            return
        self._enforce_capacity()

    def _enforce_capacity(self) -> None:
        if self.max_entries is None:
            return
        overflow = len(self.store) - self.max_entries
        if overflow <= 0:
            return
        for key in self.store.least_recent_keys(overflow):
            logger.debug("Evicting least recently used cache entry %s", key)
            self.store.remove_item(key)

    def purge_expired(self) -> int:
        """Remove every expired or unreadable entry; return how many went."""
        now = self._clock()
        removed = 0
        for key in self.store.keys():
            payload = self.store.get_item(key)
            if payload is None:
                continue
            try:
                entry = self._load_entry(key, payload)
            except CacheParseError:
                stale = True
            else:
                stale = entry.age(now) >= self.expiry_seconds
            if stale:
                self.store.remove_item(key)
                removed += 1
        return removed

    def clear(self) -> None:
        self.store.clear()


class ExpiringCacheStore(CacheStore[TContext]):
    """Adapts an ExpiringCache to the context-keyed CacheStore interface."""

    def __init__(self, cache: ExpiringCache):
        self._cache = cache

    def get(self, ctx: TContext) -> Any | None:
        return self._cache.get(ctx.key())

    def put(self, payload: Any, ctx: TContext) -> None:
        self._cache.set(ctx.key(), payload)
