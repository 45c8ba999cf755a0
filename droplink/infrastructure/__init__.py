"""Infrastructure layer for Redis and blob storage backends."""

from .local_file_storage_repository import LocalFileStorageRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    "RedisRepository",
    "RedisConnectionManager",
    "LocalFileStorageRepository",
    "StorageFactory",
]
