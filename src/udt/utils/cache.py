"""Bounded in-memory caches for translations and parsed subtitle tracks.

Nothing here persists across process restarts. Each cache instance carries
its own capacity so the translation, display and track caches can be sized
independently.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def translation_key(target_language: str, text: str) -> str:
    """Compute the cache key for a translation request.

    The same key is used for lookup, storage and in-flight deduplication.
    Text is trimmed here so every caller derives identical keys.
    """
    return f"{target_language}::{text.strip()}"


class BoundedCache(Generic[K, V]):
    """Fixed-capacity key/value store evicting the least recently written entry.

    Writing a key (insert or update) moves it to the newest position; reads
    do not change recency. When the size exceeds the limit after a write, the
    oldest entries are dropped silently.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"Cache limit must be positive, got {limit}")
        self.limit = limit
        self._entries: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K) -> V | None:
        return self._entries.get(key)

    def set(self, key: K, value: V, limit: int | None = None) -> None:
        limit = self.limit if limit is None else limit
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value
        while len(self._entries) > limit:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[K]:
        """Keys from oldest to newest."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
