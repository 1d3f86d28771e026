"""
Redis repository for durable cache entries.

Sandi Metz Principles:
- Single Responsibility: Redis data access
- Small methods: Each operation isolated
- Dependency Injection: Redis pool injected
"""

import math
from datetime import datetime
from typing import AsyncIterator, Optional

from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from jarvis.config import AppConfig, config as default_config
from jarvis.exceptions import CacheBackendError
from jarvis.models.cache_entry import CacheEntry
from jarvis.repositories.base import CacheRepository
from jarvis.utils.logger import get_logger

logger = get_logger(__name__)


async def create_redis_pool(settings: AppConfig | None = None) -> ConnectionPool:
    """
    Create Redis connection pool.

    Args:
        settings: Application configuration (global config if None)

    Returns:
        Redis connection pool
    """
    settings = settings or default_config
    return ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
    )


class RedisRepository(CacheRepository):
    """
    Durable backend storing one JSON document per key.

    Expiry is enforced by Redis (SETEX) and double-checked on read.
    """

    name = "durable"

    def __init__(self, pool: ConnectionPool, key_prefix: str = "jarvis"):
        """
        Initialize repository.

        Args:
            pool: Redis connection pool
            key_prefix: Namespace for every key
        """
        self._pool = pool
        self._prefix = f"{key_prefix}:cache:"

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def fetch(self, key: str, now: datetime) -> Optional[CacheEntry]:
        """
        Fetch cache entry by key.

        Args:
            key: Cache key
            now: Current time

        Returns:
            Live cache entry or None

        Raises:
            CacheBackendError: On Redis or decode failure
        """
        redis_key = self._redis_key(key)
        try:
            async with Redis(connection_pool=self._pool) as client:
                data = await client.get(redis_key)
                if not data:
                    return None
                entry = CacheEntry.model_validate_json(data)
                if not entry.is_live(now):
                    await client.delete(redis_key)
                    return None
                return entry
        except (RedisError, PydanticValidationError) as e:
            raise CacheBackendError(f"Redis fetch failed for {key}: {e}") from e

    async def store(self, entry: CacheEntry, now: datetime) -> bool:
        """
        Store cache entry with its remaining TTL.

        Args:
            entry: Cache entry to store
            now: Current time

        Returns:
            True if stored, False when already expired

        Raises:
            CacheBackendError: On Redis failure
        """
        ttl = math.ceil(entry.remaining_seconds(now))
        if ttl <= 0:
            return False

        try:
            async with Redis(connection_pool=self._pool) as client:
                await client.setex(self._redis_key(entry.key), ttl, entry.model_dump_json())
                return True
        except RedisError as e:
            raise CacheBackendError(f"Redis store failed for {entry.key}: {e}") from e

    async def delete(self, key: str) -> int:
        """
        Delete cache entry.

        Args:
            key: Cache key

        Returns:
            Number of keys deleted
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                return int(await client.delete(self._redis_key(key)))
        except RedisError as e:
            raise CacheBackendError(f"Redis delete failed for {key}: {e}") from e

    async def clear(self, older_than: Optional[datetime] = None) -> int:
        """
        Delete namespaced keys, optionally only those created before a cutoff.

        Args:
            older_than: Creation cutoff

        Returns:
            Number of keys deleted
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                doomed = []
                async for redis_key in self._scan(client):
                    if older_than is None:
                        doomed.append(redis_key)
                        continue
                    entry = await self._load(client, redis_key)
                    if entry is None or entry.created_at < older_than:
                        doomed.append(redis_key)
                if doomed:
                    return int(await client.delete(*doomed))
                return 0
        except RedisError as e:
            raise CacheBackendError(f"Redis clear failed: {e}") from e

    async def purge_expired(self, now: datetime) -> int:
        """
        Delete entries past their recorded expiry.

        Redis expires keys on its own; this catches clock skew and corrupt rows.

        Args:
            now: Current time

        Returns:
            Number of keys deleted
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                doomed = []
                async for redis_key in self._scan(client):
                    entry = await self._load(client, redis_key)
                    if entry is None or not entry.is_live(now):
                        doomed.append(redis_key)
                if doomed:
                    return int(await client.delete(*doomed))
                return 0
        except RedisError as e:
            raise CacheBackendError(f"Redis purge failed: {e}") from e

    async def count(self) -> int:
        """
        Count namespaced keys.

        Returns:
            Number of cache keys
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                total = 0
                async for _ in self._scan(client):
                    total += 1
                return total
        except RedisError as e:
            raise CacheBackendError(f"Redis count failed: {e}") from e

    async def ping(self) -> bool:
        """
        Ping Redis server.

        Returns:
            True if connected, False otherwise
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                await client.ping()
                return True
        except RedisError as e:
            logger.error("Redis ping failed", error=str(e))
            return False

    def _scan(self, client: Redis) -> AsyncIterator[str]:
        return client.scan_iter(match=f"{self._prefix}*")

    async def _load(self, client: Redis, redis_key: str) -> Optional[CacheEntry]:
        data = await client.get(redis_key)
        if not data:
            return None
        try:
            return CacheEntry.model_validate_json(data)
        except PydanticValidationError:
            logger.warning("Corrupt cache entry", key=redis_key)
            return None
