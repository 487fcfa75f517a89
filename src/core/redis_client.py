"""Redis client for scheduler job state."""

import logging
from datetime import UTC, datetime
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from src.core.config import Constants, settings


logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis wrapper with connection pooling.

    Every operation degrades to a no-op result when Redis is not configured
    or fails; callers keep their own in-memory fallback.
    """

    def __init__(self, url: str | None = None) -> None:
        """Initialize Redis client from a URL (defaults to settings.redis_url)."""
        self._client: Redis | None = None
        self._pool: ConnectionPool | None = None
        self._url = url if url is not None else settings.redis_url

        self._last_successful_operation: datetime | None = None
        self._failure_count = 0

        if self._url:
            try:
                self._pool = ConnectionPool.from_url(
                    self._url,
                    decode_responses=True,
                    max_connections=Constants.REDIS_MAX_CONNECTIONS,
                )
                self._client = Redis(connection_pool=self._pool)
                logger.info("Redis client initialized")
            except (RedisError, ValueError) as e:
                logger.warning("Failed to initialize Redis client: %s. Using in-memory job state.", e)
                self._client = None
                self._pool = None
        else:
            logger.info("Redis URL not configured. Using in-memory job state.")

    @property
    def is_available(self) -> bool:
        """Check if a Redis client is configured."""
        return self._client is not None

    def get_health_status(self) -> dict[str, Any]:
        """Get Redis health status."""
        return {
            "enabled": bool(self._url),
            "connected": self.is_available,
            "last_successful_operation": self._last_successful_operation.isoformat()
            if self._last_successful_operation
            else None,
            "failure_count": self._failure_count,
        }

    def _record_success(self) -> None:
        self._last_successful_operation = datetime.now(UTC)

    def _record_failure(self, operation: str, key: str, error: RedisError) -> None:
        self._failure_count += 1
        logger.warning("Redis %s error for key %s: %s", operation, key, error)

    async def get_hash(self, key: str) -> dict[str, str]:
        """Read all fields of a hash, or an empty dict if missing or on error."""
        if self._client is None:
            return {}

        try:
            value = await self._client.hgetall(key)  # type: ignore[misc]
        except RedisError as e:
            self._record_failure("HGETALL", key, e)
            return {}
        self._record_success()
        return dict(value)

    async def set_hash_fields(self, key: str, fields: dict[str, str], ttl_seconds: int) -> bool:
        """Set fields on a hash and refresh its TTL.

        Returns:
            True if successful, False otherwise
        """
        if self._client is None:
            return False

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=fields)
                pipe.expire(key, ttl_seconds)
                await pipe.execute()
        except RedisError as e:
            self._record_failure("HSET", key, e)
            return False
        self._record_success()
        return True

    async def increment_hash_field(self, key: str, field: str, ttl_seconds: int) -> int | None:
        """Atomically increment a hash field, returning the new value or None on error."""
        if self._client is None:
            return None

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hincrby(key, field, 1)
                pipe.expire(key, ttl_seconds)
                value, _ = await pipe.execute()
        except RedisError as e:
            self._record_failure("HINCRBY", key, e)
            return None
        self._record_success()
        return int(value)

    async def delete_hash_field(self, key: str, field: str) -> bool:
        """Remove one field from a hash."""
        if self._client is None:
            return False

        try:
            await self._client.hdel(key, field)  # type: ignore[misc]
        except RedisError as e:
            self._record_failure("HDEL", key, e)
            return False
        self._record_success()
        return True

    async def push_capped(self, key: str, value: str, maxlen: int, ttl_seconds: int) -> bool:
        """Prepend to a list, keeping only the newest maxlen entries."""
        if self._client is None:
            return False

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.lpush(key, value)
                pipe.ltrim(key, 0, maxlen - 1)
                pipe.expire(key, ttl_seconds)
                await pipe.execute()
        except RedisError as e:
            self._record_failure("LPUSH", key, e)
            return False
        self._record_success()
        return True

    async def get_list(self, key: str) -> list[str]:
        """Read a whole list, newest first, or an empty list on error."""
        if self._client is None:
            return []

        try:
            values = await self._client.lrange(key, 0, -1)  # type: ignore[misc]
        except RedisError as e:
            self._record_failure("LRANGE", key, e)
            return []
        self._record_success()
        return list(values)

    async def ping(self) -> bool:
        """Ping Redis to check connection."""
        if self._client is None:
            return False

        try:
            result = await self._client.ping()  # type: ignore[misc]
        except RedisError as e:
            logger.warning("Redis PING failed: %s", e)
            return False
        return bool(result)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            logger.info("Redis client closed")


# Global Redis client instance
redis_client = RedisClient()
