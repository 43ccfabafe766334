"""Response cache keyed by canonical request serialization."""

import dataclasses
import json
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from enum import Enum
from typing import Protocol

from pydantic import BaseModel


class Cache(Protocol):
    """Cache interface for upstream responses."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a value, expiring after the TTL (or the cache default)."""

    def clear(self) -> None:
        """Drop every entry."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local TTL cache; no size-based eviction."""

    default_ttl_seconds: int
    _entries: dict[str, _CacheEntry]

    def __init__(self, default_ttl_seconds: int = 30 * 60) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value with a TTL."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def clear(self) -> None:
        """Remove all cached entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def cache_key(prefix: str, payload: object) -> str:
    """Build a stable key from a prefix and any request payload."""
    canonical = json.dumps(
        _normalize(payload), sort_keys=True, separators=(",", ":"), default=str
    )
    return f"{prefix}:{canonical}"


def _normalize(value: object) -> object:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: _normalize(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_normalize(item) for item in value]
    return value
