"""
File Storage Domain

Handles file metadata records, short-key aliases, key generation and
expiration policy.
"""

from .entities import FileRecord
from .repositories import IMetadataStore
from .services import MetadataManager
from .storage_repository import IBlobStore, ObjectInfo, StoredObject

__all__ = [
    "FileRecord",
    "IBlobStore",
    "IMetadataStore",
    "MetadataManager",
    "ObjectInfo",
    "StoredObject",
]
