"""In-memory cache for downloaded image payloads."""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class ImageCache(Protocol):
    """Cache interface for image bytes keyed by storage path."""

    def get(self, key: str) -> bytes | None:
        """Return cached bytes if present and not expired."""

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store bytes with a TTL in seconds."""


@dataclass
class _CacheEntry:
    value: bytes
    expires_at: datetime


@dataclass
class InMemoryImageCache(ImageCache):
    """Bounded in-memory cache; evicts the least recently used entry."""

    max_entries: int
    _entries: OrderedDict[str, _CacheEntry]

    def __init__(self, max_entries: int = 128) -> None:
        self.max_entries = max_entries
        self._entries = OrderedDict()

    def get(self, key: str) -> bytes | None:
        """Return cached bytes if they haven't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store bytes with a TTL, evicting the oldest entry when full."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
