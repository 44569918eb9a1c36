"""Redis look-aside cache for short link records."""

import json
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..models import LinkRecord


class RedisLinkCache:
    """Caches serialized :class:`LinkRecord` objects in Redis.

    Cache failures are logged and treated as misses; the store stays the
    source of truth. Deleted links are cached as tombstones, and read-through
    fills use SET NX so they never overwrite one.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached records
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis link cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis link cache")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get(self, identifier: str) -> Optional[LinkRecord]:
        """Get a cached record.

        A cached tombstone is returned as is, so callers see the deletion.
        Values that no longer parse are dropped and reported as a miss.

        Args:
            identifier: Short link identifier

        Returns:
            Cached record or None
        """
        if not self.enabled or not self.client:
            return None

        key = self.get_cache_key(identifier)
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None
        if raw is None:
            return None

        try:
            return LinkRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self.logger.error(f"Unreadable cache entry for {identifier}, dropping it: {e}")
            await self.delete(identifier)
            return None

    async def set(self, record: LinkRecord, ttl: Optional[int] = None, only_if_absent: bool = False) -> bool:
        """Cache a record.

        Args:
            record: Record to cache (live or tombstone)
            ttl: TTL in seconds (uses default if not specified)
            only_if_absent: Leave an existing entry untouched (SET NX)

        Returns:
            True if the value was written
        """
        if not self.enabled or not self.client:
            return False

        try:
            written = await self.client.set(
                self.get_cache_key(record.identifier),
                json.dumps(record.to_dict()),
                ex=ttl or self.ttl_seconds,
                nx=only_if_absent,
            )
            return bool(written)
        except RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, identifier: str) -> bool:
        """Delete a cached record.

        Returns:
            True if an entry was removed
        """
        if not self.enabled or not self.client:
            return False

        try:
            return await self.client.delete(self.get_cache_key(identifier)) > 0
        except RedisError as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """Check Redis connectivity; a disabled cache counts as healthy."""
        if not self.enabled or not self.client:
            return True
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis link cache connection closed")

    def get_cache_key(self, identifier: str) -> str:
        return f"shortlink:link:{identifier}"
