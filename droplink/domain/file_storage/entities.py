"""
File Storage Entities

Domain entities for uploaded file metadata.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from .expiration import is_expired, utc_now


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class FileRecord:
    """
    Entity holding the metadata of one uploaded object.

    ``key`` equals the blob storage key of the object it describes.
    ``download_count`` only ever grows and ``last_accessed`` is stamped
    together with each increment.
    """
    key: str
    filename: str
    size: int
    uploaded_at: datetime
    expires_at: Optional[datetime] = None
    download_count: int = 0
    last_accessed: Optional[datetime] = None
    short_key: Optional[str] = None

    @classmethod
    def create(
        cls,
        key: str,
        filename: str,
        size: int,
        uploaded_at: Optional[datetime] = None,
        expires_at: Optional[datetime] = None,
    ) -> "FileRecord":
        """
        Factory method for a freshly uploaded file.

        Args:
            key: Primary storage key
            filename: Original filename
            size: Size in bytes
            uploaded_at: Upload time (defaults to now)
            expires_at: Optional expiration time

        Returns:
            New FileRecord with a zero download count
        """
        return cls(
            key=key,
            filename=filename,
            size=size,
            uploaded_at=uploaded_at or utc_now(),
            expires_at=expires_at,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the record has expired."""
        return is_expired(self, now)

    def with_download(self, accessed_at: datetime) -> "FileRecord":
        """Copy of this record with one more download recorded."""
        return replace(
            self,
            download_count=self.download_count + 1,
            last_accessed=accessed_at,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "key": self.key,
            "filename": self.filename,
            "size": self.size,
            "uploaded_at": _format_timestamp(self.uploaded_at),
            "expires_at": _format_timestamp(self.expires_at),
            "download_count": self.download_count,
            "last_accessed": _format_timestamp(self.last_accessed),
            "short_key": self.short_key,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileRecord":
        """Create FileRecord from dictionary."""
        return cls(
            key=data["key"],
            filename=data["filename"],
            size=int(data["size"]),
            uploaded_at=_parse_timestamp(data["uploaded_at"]),
            expires_at=_parse_timestamp(data.get("expires_at")),
            download_count=int(data.get("download_count") or 0),
            last_accessed=_parse_timestamp(data.get("last_accessed")),
            short_key=data.get("short_key"),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "FileRecord":
        return cls.from_dict(json.loads(raw))
