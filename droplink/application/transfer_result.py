"""
Transfer Result Value Objects

Encapsulate the outcomes of the transfer workflows for the API layer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class IngestResult:
    """
    Value object representing a completed upload.

    ``short_key`` is None when short links are disabled or the metadata
    store could not record the upload.
    """

    key: str
    filename: str
    size: int
    content_type: str
    uploaded_at: datetime
    etag: str
    expires_at: Optional[datetime] = None
    short_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert result to dictionary for serialization.

        Returns:
            Dictionary representation of the result
        """
        return {
            "key": self.key,
            "short_key": self.short_key,
            "filename": self.filename,
            "size": self.size,
            "content_type": self.content_type,
            "uploaded_at": _iso(self.uploaded_at),
            "expires_at": _iso(self.expires_at),
            "etag": self.etag,
        }


@dataclass
class ServedFile:
    """Bytes and response metadata of a resolved download."""

    key: str
    content: bytes
    filename: str
    content_type: str
    etag: str
    consumed: bool = False

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FileListing:
    """One row of the blob-store driven file listing."""

    key: str
    filename: str
    size: int
    uploaded_at: Optional[datetime]
    etag: str
    short_key: Optional[str] = None
    expires_at: Optional[datetime] = None
    download_count: Optional[int] = None
    has_metadata: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "filename": self.filename,
            "size": self.size,
            "uploaded_at": _iso(self.uploaded_at),
            "etag": self.etag,
            "short_key": self.short_key,
            "expires_at": _iso(self.expires_at),
            "download_count": self.download_count,
            "has_metadata": self.has_metadata,
        }
