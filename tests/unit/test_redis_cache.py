"""
Tests for the Redis-backed response cache.

Redis is replaced by mocks; the tests check the commands issued and the
failure handling (degrade on read/write, CacheError on invalidation).
"""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import WatchError

from library_api.exceptions import CacheError
from library_api.storage.redis import RedisCacheBackend


def make_redis(pipe: MagicMock) -> MagicMock:
    """Mock Redis client whose pipeline() yields ``pipe``."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.scan = AsyncMock(return_value=(0, []))
    redis.delete = AsyncMock()

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=pipe)
    ctx.__aexit__ = AsyncMock(return_value=False)
    redis.pipeline = MagicMock(return_value=ctx)
    return redis


@pytest.fixture
def pipe() -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[True])
    pipe.watch = AsyncMock()
    pipe.sunion = AsyncMock(return_value=set())
    return pipe


@pytest.fixture
def redis(pipe: MagicMock) -> MagicMock:
    return make_redis(pipe)


@pytest.fixture
def backend(redis: MagicMock):
    with patch(
        "library_api.storage.redis.get_redis_connection",
        AsyncMock(return_value=redis),
    ):
        yield RedisCacheBackend(db=1)


class TestRedisCacheBackendReads:
    async def test_get_uses_item_key(
        self, backend: RedisCacheBackend, redis: MagicMock
    ) -> None:
        redis.get.return_value = b"[]"

        assert await backend.get("getAllBooks-1-10") == b"[]"
        redis.get.assert_awaited_once_with("cache:item:getAllBooks-1-10")

    async def test_get_degrades_to_miss_on_error(
        self, backend: RedisCacheBackend, redis: MagicMock
    ) -> None:
        redis.get.side_effect = RedisConnectionError("down")

        assert await backend.get("getAllBooks-1-10") is None


class TestRedisCacheBackendWrites:
    async def test_set_stores_payload_and_tag_membership(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        await backend.set("getAllBooks-1-10", b"[]", ["getAllBooksCache"], ttl=60)

        pipe.set.assert_called_once_with(
            "cache:item:getAllBooks-1-10", b"[]", ex=60
        )
        pipe.sadd.assert_called_once_with(
            "cache:tag:getAllBooksCache", "cache:item:getAllBooks-1-10"
        )
        pipe.execute.assert_awaited_once()

    async def test_tag_set_expires_with_its_items(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        await backend.set("getAllBooks-1-10", b"[]", ["getAllBooksCache"], ttl=60)

        assert pipe.expire.call_args_list == [
            call("cache:tag:getAllBooksCache", 60, nx=True),
            call("cache:tag:getAllBooksCache", 60, gt=True),
        ]

    async def test_tag_set_without_ttl_is_persistent(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        await backend.set("getAllBooks-1-10", b"[]", ["getAllBooksCache"])

        pipe.expire.assert_not_called()

    async def test_set_failure_is_logged_not_raised(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        pipe.execute.side_effect = RedisConnectionError("down")

        await backend.set("getAllBooks-1-10", b"[]", ["getAllBooksCache"])


class TestRedisCacheBackendInvalidation:
    async def test_invalidate_deletes_items_and_tag_sets(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        pipe.sunion.return_value = {
            b"cache:item:getAllBooks-1-10",
            b"cache:item:getAllBooks-2-10",
        }

        removed = await backend.invalidate_tags(["getAllBooksCache"])

        assert removed == 2
        pipe.watch.assert_awaited_once_with("cache:tag:getAllBooksCache")
        pipe.multi.assert_called_once()
        assert pipe.delete.call_count == 2
        pipe.delete.assert_called_with("cache:tag:getAllBooksCache")

    async def test_invalidate_retries_on_watch_error(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        pipe.sunion.return_value = {b"cache:item:getAllBooks-1-10"}
        pipe.execute.side_effect = [WatchError(), [1, 1]]

        assert await backend.invalidate_tags(["getAllBooksCache"]) == 1
        assert pipe.watch.await_count == 2

    async def test_invalidate_failure_raises_cache_error(
        self, backend: RedisCacheBackend, pipe: MagicMock
    ) -> None:
        pipe.watch.side_effect = RedisConnectionError("down")

        with pytest.raises(CacheError):
            await backend.invalidate_tags(["getAllBooksCache"])

    async def test_invalidate_without_tags_is_noop(
        self, backend: RedisCacheBackend, redis: MagicMock
    ) -> None:
        assert await backend.invalidate_tags([]) == 0
        redis.pipeline.assert_not_called()

    async def test_clear_scans_cache_namespace(
        self, backend: RedisCacheBackend, redis: MagicMock
    ) -> None:
        redis.scan.side_effect = [
            (7, [b"cache:item:a"]),
            (0, [b"cache:tag:t"]),
        ]

        await backend.clear()

        assert redis.delete.await_count == 2
        redis.scan.assert_any_await(0, match="cache:*", count=100)
