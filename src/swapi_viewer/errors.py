from __future__ import annotations


class SwapiError(Exception):
    """Base class for every error raised by the viewer."""


class NetworkError(SwapiError):
    def __init__(self, url: str, message: str | None = None):
        self.url = url
        super().__init__(message or f"Request to {url} failed")


class ApiError(NetworkError):
    """A request came back with a non-success HTTP status or an unusable body."""

    def __init__(self, status_code: int, url: str, message: str | None = None):
        self.status_code = status_code
        super().__init__(url, message or f"API error: {status_code} ({url})")


class CacheParseError(SwapiError):
    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Invalid cache payload for {key!r}")


class StorageQuotaError(SwapiError):
    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Could not store cache entry {key!r}")
