"""
In-process, tag-aware LRU cache backend.

Entries live in an OrderedDict (LRU order) and a reverse index maps each tag
to the keys carrying it, so a tag invalidation touches only the affected
entries. Suitable for a single application instance; use the Redis backend
when several instances must share invalidations.
"""

import asyncio
import time
from collections import OrderedDict
from typing import Any, Iterable

from library_api.logging import logger
from library_api.utils.metrics import (
    memory_cache_evictions_total,
    memory_cache_size,
)


class CacheEntry:
    """
    Cache entry with payload, tags and expiration time.

    Attributes:
        value: Cached payload.
        tags: Invalidation labels the entry was stored with.
        expires_at: Unix timestamp when entry expires (None = no expiry).
        last_accessed: Unix timestamp of last access (for LRU eviction).
    """

    __slots__ = ("value", "tags", "expires_at", "last_accessed")

    def __init__(
        self,
        value: Any,
        tags: Iterable[str] = (),
        ttl: int | None = None,
    ) -> None:
        self.value = value
        self.tags = frozenset(tags)
        self.expires_at = time.time() + ttl if ttl is not None else None
        self.last_accessed = time.time()

    def is_expired(self) -> bool:
        """Check if entry has expired."""
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at

    def touch(self) -> None:
        """Update last access time (for LRU)."""
        self.last_accessed = time.time()


class MemoryCacheBackend:
    """
    Tag-aware in-memory cache with LRU eviction and optional TTL.

    Example:
        >>> backend = MemoryCacheBackend(max_entries=100)
        >>> await backend.set("getAllBooks-1-10", b"[]", ["getAllBooksCache"])
        >>> await backend.get("getAllBooks-1-10")
        b'[]'
        >>> await backend.invalidate_tags(["getAllBooksCache"])
        1
    """

    name = "memory"

    def __init__(self, max_entries: int = 1000) -> None:
        """
        Args:
            max_entries: Maximum entries held before LRU eviction kicks in.
        """
        self.max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._tag_index: dict[str, set[str]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> bytes | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if entry.is_expired():
                self._remove(key)
                logger.debug(f"Memory cache expired: {key}")
                return None

            entry.touch()
            self._entries.move_to_end(key)
            return entry.value

    async def set(
        self,
        key: str,
        payload: bytes,
        tags: Iterable[str],
        ttl: int | None = None,
    ) -> None:
        async with self._lock:
            if key in self._entries:
                self._remove(key)

            entry = CacheEntry(payload, tags=tags, ttl=ttl)
            self._entries[key] = entry
            for tag in entry.tags:
                self._tag_index.setdefault(tag, set()).add(key)

            # Evict oldest entry if cache is full (LRU)
            while len(self._entries) > self.max_entries:
                oldest_key = next(iter(self._entries))
                self._remove(oldest_key)
                memory_cache_evictions_total.inc()
                logger.debug(f"Evicted LRU entry: {oldest_key}")

            memory_cache_size.set(len(self._entries))

    async def invalidate_tags(self, tags: Iterable[str]) -> int:
        async with self._lock:
            keys: set[str] = set()
            for tag in tags:
                keys |= self._tag_index.get(tag, set())

            for key in keys:
                self._remove(key)

            memory_cache_size.set(len(self._entries))
            return len(keys)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._tag_index.clear()
            memory_cache_size.set(0)

    def __len__(self) -> int:
        return len(self._entries)

    def _remove(self, key: str) -> None:
        """Drop key and its tag index references. Caller holds the lock."""
        entry = self._entries.pop(key, None)
        if entry is None:
            return

        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]
