"""Redis backend for QR artifacts."""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import StorageError
from .base import QrArtifactStoreBase


class RedisQrArtifactStore(QrArtifactStoreBase):
    """PNG bytes stored as plain Redis strings.

    A single SET replaces the whole value, so readers never observe a torn
    image. The client is created with ``decode_responses=False`` to keep the
    payload binary.
    """

    def __init__(
        self,
        redis_url: str,
        key_prefix: str = "shortlink:qr",
        logger: Optional[logging.Logger] = None,
    ):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self.client = redis.from_url(self.redis_url, decode_responses=False)
            await self.client.ping()
            self.logger.info("Connected to Redis artifact store")
        except (RedisError, OSError) as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            raise StorageError(f"Redis unavailable: {e}") from e

    def _key(self, identifier: str) -> str:
        return f"{self.key_prefix}:{identifier}"

    def _client(self) -> redis.Redis:
        if self.client is None:
            raise StorageError("Redis artifact store is not connected")
        return self.client

    async def put(self, identifier: str, image: bytes) -> None:
        try:
            await self._client().set(self._key(identifier), image)
        except RedisError as e:
            self.logger.error(f"Error storing QR code for {identifier}: {e}")
            raise StorageError(f"Redis error: {e}") from e

    async def get(self, identifier: str) -> Optional[bytes]:
        try:
            return await self._client().get(self._key(identifier))
        except RedisError as e:
            self.logger.error(f"Error reading QR code for {identifier}: {e}")
            raise StorageError(f"Redis error: {e}") from e

    async def delete(self, identifier: str) -> bool:
        try:
            return await self._client().delete(self._key(identifier)) > 0
        except RedisError as e:
            self.logger.error(f"Error deleting QR code for {identifier}: {e}")
            raise StorageError(f"Redis error: {e}") from e

    async def health_check(self) -> bool:
        try:
            return bool(await self._client().ping())
        except (RedisError, StorageError) as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis artifact store connection closed")
