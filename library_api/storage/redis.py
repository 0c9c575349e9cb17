"""
Redis connection pooling and the Redis-backed response cache.

The cache stores each payload under ``cache:item:<key>`` and keeps, for every
tag, a Redis set ``cache:tag:<tag>`` with the item keys carrying it. A tag
invalidation reads the sets and deletes the items and the sets inside one
WATCH/MULTI transaction, retried if a concurrent write touches the sets.

With a TTL, each tag set expires no earlier than the last of its members, so
sets of entries that expired on their own do not linger. Entries sharing a
tag are expected to share the TTL policy (CacheManager applies one
default_ttl); a set is only persistent while its entries are.
"""

from typing import Iterable

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError, WatchError

from library_api.exceptions import CacheError
from library_api.logging import logger
from library_api.settings import app_settings
from library_api.utils.cache_keys import CacheKeyFactory


class RedisPool:
    """
    Redis connection pool manager.

    Manages Redis connection instances per database index with connection pooling.
    Each database gets its own connection pool with configurable settings.
    """

    __instances: dict[int, Redis] = {}
    __pools: dict[int, ConnectionPool] = {}

    @classmethod
    async def get_instance(cls, db: int = 1) -> Redis:
        """
        Get or create a Redis instance for the specified database.

        Args:
            db: Redis database index (default: 1)

        Returns:
            Redis: Redis instance connected to the specified database
        """
        if db not in cls.__instances:
            cls.__instances[db] = await cls._create_instance(db)
        return cls.__instances[db]

    @classmethod
    async def _create_instance(cls, db: int) -> Redis:
        pool = ConnectionPool.from_url(
            f"redis://{app_settings.REDIS_IP}:{app_settings.REDIS_PORT}",
            db=db,
            max_connections=app_settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=app_settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=app_settings.REDIS_CONNECT_TIMEOUT,
            health_check_interval=app_settings.REDIS_HEALTH_CHECK_INTERVAL,
            retry_on_timeout=app_settings.REDIS_RETRY_ON_TIMEOUT,
        )
        cls.__pools[db] = pool

        logger.info(
            f"Created Redis pool for {app_settings.REDIS_IP}:"
            f"{app_settings.REDIS_PORT} db={db}"
        )
        return Redis.from_pool(pool)

    @classmethod
    async def close_all(cls) -> None:
        """
        Close all Redis connection pools gracefully.

        This should be called during application shutdown to ensure
        all connections are properly closed.
        """
        logger.info("Closing all Redis connection pools...")
        for db, pool in cls.__pools.items():
            try:
                await pool.disconnect()
                logger.info(f"Closed Redis pool for database {db}")
            except (RedisError, ConnectionError) as ex:
                logger.error(f"Error closing Redis pool for database {db}: {ex}")

        cls.__pools.clear()
        cls.__instances.clear()
        logger.info("All Redis connection pools closed")


async def get_redis_connection(db: int | None = None) -> Redis:
    """
    Get the Redis connection used by the response cache.

    Args:
        db: Redis database index (default: CACHE_REDIS_DB setting).
    """
    if db is None:
        db = app_settings.CACHE_REDIS_DB
    return await RedisPool.get_instance(db)


class RedisCacheBackend:
    """
    Tag-aware cache backend shared by every application instance.

    Read and write failures degrade to a cache miss / uncached response and
    are logged. Invalidation failures raise CacheError: a tag that could not
    be invalidated means stale list pages may be served.
    """

    name = "redis"

    def __init__(self, db: int | None = None) -> None:
        """
        Args:
            db: Redis database index (default: CACHE_REDIS_DB setting).
        """
        self.db = db if db is not None else app_settings.CACHE_REDIS_DB

    async def _redis(self) -> Redis:
        return await get_redis_connection(self.db)

    async def get(self, key: str) -> bytes | None:
        try:
            redis = await self._redis()
            return await redis.get(CacheKeyFactory.item_key(key))
        except (RedisError, ConnectionError) as ex:
            logger.error(f"Error reading from Redis cache: {ex}")
            return None

    async def set(
        self,
        key: str,
        payload: bytes,
        tags: Iterable[str],
        ttl: int | None = None,
    ) -> None:
        item_key = CacheKeyFactory.item_key(key)
        try:
            redis = await self._redis()
            async with redis.pipeline(transaction=True) as pipe:
                pipe.set(item_key, payload, ex=ttl)
                for tag in tags:
                    tag_key = CacheKeyFactory.tag_key(tag)
                    pipe.sadd(tag_key, item_key)
                    if ttl is not None:
                        # A tag set outlives every member: NX sets the
                        # expiry on a new set, GT only ever extends it
                        pipe.expire(tag_key, ttl, nx=True)
                        pipe.expire(tag_key, ttl, gt=True)
                await pipe.execute()
            logger.debug(f"Cached in Redis: {key} (TTL: {ttl}s)")
        except (RedisError, ConnectionError) as ex:
            logger.error(f"Error writing to Redis cache: {ex}")

    async def invalidate_tags(self, tags: Iterable[str]) -> int:
        tag_keys = [CacheKeyFactory.tag_key(tag) for tag in tags]
        if not tag_keys:
            return 0

        try:
            redis = await self._redis()
            async with redis.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(*tag_keys)
                        item_keys = await pipe.sunion(*tag_keys)
                        pipe.multi()
                        if item_keys:
                            pipe.delete(*item_keys)
                        pipe.delete(*tag_keys)
                        await pipe.execute()
                        return len(item_keys)
                    except WatchError:
                        logger.debug(
                            f"Tag set changed during invalidation, retrying: {tag_keys}"
                        )
                        continue
        except (RedisError, ConnectionError) as ex:
            logger.error(f"Error invalidating Redis cache tags {tag_keys}: {ex}")
            raise CacheError("Response cache invalidation failed") from ex

    async def clear(self) -> None:
        try:
            redis = await self._redis()
            cursor = 0
            while True:
                cursor, keys = await redis.scan(
                    cursor, match="cache:*", count=100
                )
                if keys:
                    await redis.delete(*keys)
                if cursor == 0:
                    break
        except (RedisError, ConnectionError) as ex:
            logger.error(f"Error clearing Redis cache: {ex}")
            raise CacheError("Response cache clear failed") from ex
