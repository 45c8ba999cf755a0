"""
Metadata Store Repository Interface

Key-value contract for the store holding file metadata and short-key aliases.
The store offers no listing and no transactions; listings are always driven
by the blob store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IMetadataStore(ABC):
    """Abstract string-to-string store with optional per-entry TTL."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """
        Read a value.

        Args:
            name: Entry name

        Returns:
            Stored string, or None if absent or expired

        Raises:
            MetadataStoreError: If the store is unreachable
        """
        pass  # pragma: no cover

    @abstractmethod
    def put(self, name: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """
        Write a value, replacing any existing one.

        Args:
            name: Entry name
            value: String value
            ttl_seconds: Optional time to live; None keeps the entry indefinitely

        Raises:
            MetadataStoreError: If the write failed
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, name: str) -> None:
        """
        Delete an entry. Idempotent.

        Raises:
            MetadataStoreError: If the delete failed
        """
        pass  # pragma: no cover
