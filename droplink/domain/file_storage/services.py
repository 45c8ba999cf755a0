"""
File Storage Services

Domain service owning file metadata records and short-key aliases.
"""

import json
import logging
from datetime import datetime
from typing import Callable, Optional

from .entities import FileRecord
from .expiration import is_expired, ttl_seconds_until, utc_now
from .repositories import IMetadataStore

logger = logging.getLogger(__name__)

RECORD_PREFIX = "file"
ALIAS_PREFIX = "short"


class MetadataManager:
    """
    Domain service for file metadata persistence.

    Records live under ``file:<key>`` and aliases under ``short:<short_key>``.
    Multi-entry writes are not atomic; the primary record is the source of
    truth. Read-modify-write updates are last-write-wins.
    Store failures surface as MetadataStoreError so callers can decide
    whether metadata is essential to the operation at hand.
    """

    def __init__(
        self,
        metadata_store: IMetadataStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize MetadataManager with a store.

        Args:
            metadata_store: Key-value store for records and aliases
            clock: Source of the current time
        """
        self.store = metadata_store
        self.clock = clock

    @staticmethod
    def record_name(key: str) -> str:
        return f"{RECORD_PREFIX}:{key}"

    @staticmethod
    def alias_name(short_key: str) -> str:
        return f"{ALIAS_PREFIX}:{short_key}"

    def create(
        self,
        key: str,
        filename: str,
        size: int,
        uploaded_at: datetime,
        expires_at: Optional[datetime] = None,
        short_key: Optional[str] = None,
    ) -> FileRecord:
        """
        Create the metadata record for a new upload.

        Writes the record first, then the alias (TTL mirrors ``expires_at``),
        then rewrites the record with the short key embedded.

        Returns:
            The stored FileRecord
        """
        record = FileRecord.create(
            key=key,
            filename=filename,
            size=size,
            uploaded_at=uploaded_at,
            expires_at=expires_at,
        )
        self._save(record)

        if short_key:
            self._save_alias(short_key, key, expires_at)
            record.short_key = short_key
            self._save(record)

        return record

    def read(self, key: str) -> Optional[FileRecord]:
        """
        Retrieve the record for a key.

        Returns:
            FileRecord if present and well-formed, None otherwise
        """
        raw = self.store.get(self.record_name(key))
        if raw is None:
            return None

        try:
            return FileRecord.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable metadata for {key}: {e}")
            return None

    def resolve_alias(self, short_key: str) -> Optional[str]:
        """Resolve a short key to its primary key."""
        return self.store.get(self.alias_name(short_key))

    def record_download(self, key: str) -> Optional[FileRecord]:
        """
        Increment the download count and stamp ``last_accessed``.

        No-op when the record is absent.
        """
        record = self.read(key)
        if record is None:
            return None

        updated = record.with_download(self.clock())
        self._save(updated)
        return updated

    def set_expiration(self, key: str, expires_at: datetime) -> Optional[FileRecord]:
        """
        Set a record's expiration time.

        The alias TTL is refreshed to follow the new expiration.
        No-op when the record is absent.
        """
        record = self.read(key)
        if record is None:
            return None

        record.expires_at = expires_at
        self._save(record)

        if record.short_key:
            self._save_alias(record.short_key, key, expires_at)

        return record

    def assign_short_key(self, key: str, short_key: str) -> Optional[FileRecord]:
        """
        Point a new short key at an existing record.

        Any previous alias is deleted first so a record never has more than
        one live alias. The alias TTL follows the record's expiration.
        No-op when the record is absent.
        """
        record = self.read(key)
        if record is None:
            return None

        if record.short_key and record.short_key != short_key:
            self.store.delete(self.alias_name(record.short_key))

        self._save_alias(short_key, key, record.expires_at)
        record.short_key = short_key
        self._save(record)
        return record

    def purge(self, key: str) -> bool:
        """
        Delete a record and its alias.

        Idempotent: missing entries are not an error. The alias of a record
        that no longer parses as a FileRecord is still removed when its JSON
        names a short key.

        Returns:
            True if a record existed, readable or not
        """
        raw = self.store.get(self.record_name(key))
        short_key = self._short_key_of(key, raw)

        self.store.delete(self.record_name(key))
        if short_key:
            self.store.delete(self.alias_name(short_key))

        return raw is not None

    def is_expired(self, record: FileRecord) -> bool:
        """Check a record against the current time."""
        return is_expired(record, self.clock())

    @staticmethod
    def _short_key_of(key: str, raw: Optional[str]) -> Optional[str]:
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(
                f"Unreadable metadata for {key}, its short link may outlive the purge"
            )
            return None

        short_key = data.get("short_key") if isinstance(data, dict) else None
        return short_key if isinstance(short_key, str) else None

    def _save(self, record: FileRecord) -> None:
        self.store.put(self.record_name(record.key), record.to_json())

    def _save_alias(
        self, short_key: str, key: str, expires_at: Optional[datetime]
    ) -> None:
        ttl = ttl_seconds_until(expires_at, self.clock())
        self.store.put(self.alias_name(short_key), key, ttl_seconds=ttl)
