"""
Test fixtures package.

Provides in-memory store implementations for testing.
"""

from .mock_repositories import (
    FailingBlobStore,
    FailingMetadataStore,
    InMemoryBlobStore,
    InMemoryMetadataStore,
)

__all__ = [
    "FailingBlobStore",
    "FailingMetadataStore",
    "InMemoryBlobStore",
    "InMemoryMetadataStore",
]
