"""
Protocol classes for structural subtyping (duck typing with type safety).

Protocols define interfaces without requiring explicit inheritance. Any class
that implements the required methods is considered compatible.

Example:
    ```python
    from library_api.protocols import CacheBackend, Repository
    from library_api.models.book import Book


    async def warm(repo: Repository[Book], backend: CacheBackend) -> None:
        book = await repo.get_by_id(1)
        ...
    ```
"""

from typing import Any, Iterable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Repository(Protocol[T]):
    """
    Protocol for repository pattern.

    Defines the interface for data access objects that manage entities
    of type T.

    Type Parameters:
        T: The entity type this repository manages.
    """

    async def get_by_id(self, id: int) -> T | None: ...

    async def get_all(self, **filters: Any) -> list[T]: ...

    async def create(self, entity: T) -> T: ...

    async def update(self, entity: T) -> T: ...

    async def delete(self, entity: T) -> None: ...

    async def exists(self, **filters: Any) -> bool: ...

    async def commit(self) -> None: ...


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol for tag-aware cache storage.

    A backend stores opaque payloads under string keys, remembers the tags
    each key was stored with, and removes every key carrying a tag in one
    call. It knows nothing about population or single-flight; that is the
    job of CacheManager.
    """

    name: str

    async def get(self, key: str) -> bytes | None:
        """
        Return the live payload stored under key, or None.
        """
        ...

    async def set(
        self,
        key: str,
        payload: bytes,
        tags: Iterable[str],
        ttl: int | None = None,
    ) -> None:
        """
        Store payload under key, tagged with every tag in tags.

        Args:
            key: Cache key.
            payload: Serialized response body.
            tags: Invalidation labels attached to the entry.
            ttl: Optional time-to-live in seconds (None = no expiry).
        """
        ...

    async def invalidate_tags(self, tags: Iterable[str]) -> int:
        """
        Remove every entry carrying any of tags.

        Returns:
            Number of entries removed.
        """
        ...

    async def clear(self) -> None:
        """Remove every entry."""
        ...
