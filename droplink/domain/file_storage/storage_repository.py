"""
Blob Store Repository Interface

Abstract interface for the object storage that holds uploaded file content.
This abstraction keeps the domain layer infrastructure-agnostic: local
filesystem and Google Cloud Storage adapters both implement this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class StoredObject:
    """Content and HTTP metadata of a stored object."""
    key: str
    content: bytes
    content_type: str
    etag: str


@dataclass(frozen=True)
class ObjectInfo:
    """Listing entry for a stored object."""
    key: str
    size: int
    uploaded_at: Optional[datetime]
    etag: str


class IBlobStore(ABC):
    """
    Unified interface for blob storage operations.

    Contract Guarantees:
    - get() returns None for missing objects and raises BlobStoreError on failures
    - delete() is idempotent: deleting a missing object succeeds
    - exists() never raises for missing or malformed keys
    - list_objects() is unordered and not paginated

    Implementation Requirements:
    - Keys are opaque strings produced by the key generator
    - Failures other than "not found" are reported as BlobStoreError
    """

    @abstractmethod
    def save(self, key: str, content: bytes, content_type: str) -> str:
        """
        Store content under a key, overwriting any existing object.

        Args:
            key: Storage key
            content: Object bytes
            content_type: MIME type recorded with the object

        Returns:
            The etag of the stored object

        Raises:
            ValueError: If key is empty
            BlobStoreError: If the object could not be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, key: str) -> Optional[StoredObject]:
        """
        Retrieve an object.

        Args:
            key: Storage key

        Returns:
            StoredObject if found, None if the object does not exist

        Raises:
            BlobStoreError: If the store could not be read
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check whether an object exists.

        Returns:
            True if the object exists, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete an object.

        Idempotent: deleting a missing object returns True.

        Returns:
            True once the object is gone

        Raises:
            BlobStoreError: If the delete failed
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_objects(self) -> List[ObjectInfo]:
        """
        List every stored object.

        Returns:
            Unordered list of ObjectInfo entries

        Raises:
            BlobStoreError: If the listing failed
        """
        pass  # pragma: no cover
