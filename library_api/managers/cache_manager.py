"""
Tag-aware response cache with single-flight population.

CacheManager sits in front of a CacheBackend (in-memory or Redis) and adds
the two behaviors list endpoints rely on:

1. Single-flight: concurrent cold reads of the same key run the populate
   callback once; the other callers await the same result. If the caller
   running the population is cancelled, one waiter takes over with its own
   callback.
2. Tag invalidation: writes drop every entry carrying a tag. A population
   that was in flight when one of its tags got invalidated still answers
   its callers but is not stored, since its snapshot may predate the write.

The manager is created once per application (see library_api.application)
and handed to route handlers through dependency injection.
"""

import asyncio
from typing import Awaitable, Callable, Iterable

from library_api.logging import logger
from library_api.protocols import CacheBackend
from library_api.settings import app_settings
from library_api.utils.metrics import (
    cache_hits_total,
    cache_invalidated_entries_total,
    cache_misses_total,
    cache_populations_total,
    cache_single_flight_waits_total,
)

# Populate callback: returns the payload to cache and the tags to attach
Populate = Callable[[], Awaitable[tuple[bytes, Iterable[str]]]]


class PopulationAbandoned(Exception):
    """The caller populating a key was cancelled before it finished."""


class CacheManager:
    """
    Response cache with per-key single-flight and tag-based invalidation.

    Example:
        >>> cache = CacheManager(MemoryCacheBackend())
        >>> async def populate():
        ...     return b"[]", {"getAllBooksCache"}
        >>> await cache.get("getAllBooks-1-10", populate)
        b'[]'
        >>> await cache.invalidate(["getAllBooksCache"])
        1
    """

    def __init__(
        self,
        backend: CacheBackend,
        default_ttl: int | None = None,
    ) -> None:
        """
        Args:
            backend: Storage for payloads and tag index.
            default_ttl: Safety-net TTL in seconds (None = entries live until
                their tags are invalidated).
        """
        self.backend = backend
        self.default_ttl = default_ttl

        self._inflight: dict[str, asyncio.Future[bytes]] = {}
        self._lock = asyncio.Lock()

        # Invalidation clock: bumped on every invalidate(); each tag records
        # the tick at which it was last invalidated.
        self._clock = 0
        self._tag_invalidated_at: dict[str, int] = {}

        logger.info(
            f"Initialized CacheManager: backend={backend.name}, "
            f"default_ttl={default_ttl}"
        )

    async def get(
        self,
        key: str,
        populate: Populate,
        ttl: int | None = None,
    ) -> bytes:
        """
        Return the cached payload for key, populating it on miss.

        Args:
            key: Cache key.
            populate: Coroutine function returning ``(payload, tags)``.
            ttl: Time-to-live in seconds (None = use default_ttl).

        Returns:
            The cached or freshly populated payload.

        Raises:
            Exception: Whatever populate raises; it is propagated to every
                caller waiting on the same key and nothing is stored.
        """
        while True:
            payload = await self.backend.get(key)
            if payload is not None:
                cache_hits_total.labels(backend=self.backend.name).inc()
                logger.debug(f"Cache hit: {key}")
                return payload

            async with self._lock:
                future = self._inflight.get(key)
                owner = future is None
                if owner:
                    future = asyncio.get_running_loop().create_future()
                    self._inflight[key] = future

            if owner:
                return await self._own_population(key, future, populate, ttl)

            cache_single_flight_waits_total.labels(
                backend=self.backend.name
            ).inc()
            logger.debug(f"Awaiting in-flight population: {key}")
            try:
                return await asyncio.shield(future)
            except PopulationAbandoned:
                # The owner was cancelled; populate with our own callback
                logger.debug(f"In-flight population abandoned, retrying: {key}")

    async def _own_population(
        self,
        key: str,
        future: "asyncio.Future[bytes]",
        populate: Populate,
        ttl: int | None,
    ) -> bytes:
        try:
            payload = await self._populate(key, populate, ttl)
        except asyncio.CancelledError:
            self._release(key, future)
            future.set_exception(PopulationAbandoned(key))
            future.exception()
            raise
        except Exception as ex:
            self._release(key, future)
            future.set_exception(ex)
            # Mark retrieved; waiters (if any) re-raise it themselves
            future.exception()
            raise

        self._release(key, future)
        future.set_result(payload)
        return payload

    def _release(self, key: str, future: "asyncio.Future[bytes]") -> None:
        # Unregister before waking waiters so a retry never finds this future
        if self._inflight.get(key) is future:
            del self._inflight[key]

    async def _populate(
        self, key: str, populate: Populate, ttl: int | None
    ) -> bytes:
        # Another owner may have stored the key between our miss and
        # registering as owner.
        payload = await self.backend.get(key)
        if payload is not None:
            cache_hits_total.labels(backend=self.backend.name).inc()
            return payload

        cache_misses_total.labels(backend=self.backend.name).inc()
        started_at = self._clock

        try:
            payload, tags = await populate()
        except Exception:
            cache_populations_total.labels(
                backend=self.backend.name, status="error"
            ).inc()
            raise

        tags = frozenset(tags)
        if self._invalidated_since(tags, started_at):
            cache_populations_total.labels(
                backend=self.backend.name, status="discarded"
            ).inc()
            logger.info(
                f"Discarded population of {key}: tags invalidated while populating"
            )
            return payload

        await self.backend.set(
            key,
            payload,
            tags,
            ttl=ttl if ttl is not None else self.default_ttl,
        )
        cache_populations_total.labels(
            backend=self.backend.name, status="stored"
        ).inc()
        logger.debug(f"Cache populated: {key} (tags: {sorted(tags)})")
        return payload

    def _invalidated_since(self, tags: frozenset[str], tick: int) -> bool:
        return any(self._tag_invalidated_at.get(tag, -1) >= tick for tag in tags)

    async def invalidate(self, tags: Iterable[str]) -> int:
        """
        Remove every cache entry carrying any of tags.

        The removal is visible to every subsequent get(). Populations
        already in flight for those tags will not be stored.

        Args:
            tags: Invalidation labels.

        Returns:
            Number of entries removed.

        Raises:
            CacheError: If the backend could not remove the entries.
        """
        tags = list(tags)

        # Stamp tags before touching the backend so a population that
        # finishes in between is discarded rather than stored.
        tick = self._clock
        self._clock += 1
        for tag in tags:
            self._tag_invalidated_at[tag] = tick

        removed = await self.backend.invalidate_tags(tags)
        for tag in tags:
            cache_invalidated_entries_total.labels(
                backend=self.backend.name, tag=tag
            ).inc(removed)

        logger.info(f"Invalidated {removed} cache entries for tags {tags}")
        return removed

    async def clear(self) -> None:
        """Remove every cache entry."""
        await self.backend.clear()


def create_cache_manager() -> CacheManager:
    """
    Build the response cache configured by CACHE_BACKEND.

    Returns:
        CacheManager over an in-memory or Redis backend.
    """
    if app_settings.CACHE_BACKEND == "redis":
        from library_api.storage.redis import RedisCacheBackend

        backend: CacheBackend = RedisCacheBackend()
    else:
        from library_api.storage.memory_cache import MemoryCacheBackend

        backend = MemoryCacheBackend(max_entries=app_settings.CACHE_MAX_ENTRIES)

    return CacheManager(backend, default_ttl=app_settings.CACHE_TTL)
