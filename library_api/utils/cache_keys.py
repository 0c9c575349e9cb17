"""
Unified cache key generation.

Provides a single factory for all cache key patterns across the application,
so that the key a read populates and the key a test or an operator looks up
are always built the same way.
"""

from library_api.constants import CACHE_ITEM_PREFIX, CACHE_TAG_PREFIX


class CacheKeyFactory:
    """Factory for generating consistent, deterministic cache keys."""

    @staticmethod
    def list_key(operation: str, page: int, limit: int) -> str:
        """
        Build the key of a paginated list response.

        Args:
            operation: Name of the list operation (e.g. "getAllBooks").
            page: Page number, already defaulted.
            limit: Page size, already defaulted and capped.

        Returns:
            Cache key string.

        Examples:
            >>> CacheKeyFactory.list_key("getAllBooks", 1, 10)
            'getAllBooks-1-10'
        """
        return f"{operation}-{page}-{limit}"

    @staticmethod
    def item_key(key: str) -> str:
        """
        Namespace a cache key for storage in Redis.

        Examples:
            >>> CacheKeyFactory.item_key("getAllBooks-1-10")
            'cache:item:getAllBooks-1-10'
        """
        return f"{CACHE_ITEM_PREFIX}:{key}"

    @staticmethod
    def tag_key(tag: str) -> str:
        """
        Redis set holding the keys of every entry carrying ``tag``.

        Examples:
            >>> CacheKeyFactory.tag_key("getAllBooksCache")
            'cache:tag:getAllBooksCache'
        """
        return f"{CACHE_TAG_PREFIX}:{tag}"
