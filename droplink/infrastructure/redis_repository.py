"""
Redis Repository

Redis implementation of the metadata store contract plus connection pooling.
Entry expiry uses native Redis TTLs (SETEX).
"""

import logging
from typing import Optional

import redis
from redis.exceptions import RedisError

from droplink.domain.errors import MetadataStoreError
from droplink.domain.file_storage.repositories import IMetadataStore

logger = logging.getLogger(__name__)


class RedisRepository(IMetadataStore):
    """Metadata store backed by Redis string keys."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def get(self, name: str) -> Optional[str]:
        """
        Get a string value from Redis.

        Args:
            name: Entry name (without prefix)

        Returns:
            Decoded value, or None if the key does not exist

        Raises:
            MetadataStoreError: If Redis cannot be reached
        """
        try:
            data = self.redis.get(self._make_key(name))
        except RedisError as e:
            logger.warning(f"Redis GET failed for {name}: {e}")
            raise MetadataStoreError(f"Failed to read {name}", e) from e

        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return data

    def put(self, name: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """
        Set a string value with optional TTL.

        Args:
            name: Entry name (without prefix)
            value: Value to store
            ttl_seconds: Time to live in seconds, None for no expiry

        Raises:
            MetadataStoreError: If the write fails
        """
        try:
            redis_key = self._make_key(name)
            if ttl_seconds:
                self.redis.setex(redis_key, ttl_seconds, value)
            else:
                self.redis.set(redis_key, value)
        except RedisError as e:
            logger.warning(f"Redis SET failed for {name}: {e}")
            raise MetadataStoreError(f"Failed to write {name}", e) from e

    def delete(self, name: str) -> None:
        """
        Delete a key from Redis. Missing keys are ignored.

        Raises:
            MetadataStoreError: If the delete fails
        """
        try:
            self.redis.delete(self._make_key(name))
        except RedisError as e:
            logger.warning(f"Redis DEL failed for {name}: {e}")
            raise MetadataStoreError(f"Failed to delete {name}", e) from e


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, password: Optional[str] = None,
                 decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
