"""
Local File Storage Repository Implementation

Concrete implementation of IBlobStore for local filesystem operations.
Object bytes live under ``<base>/objects/<key>``; the content type, etag and
upload time live in a JSON sidecar under ``<base>/meta/<key>.json``.
"""

import hashlib
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from droplink.domain.errors import BlobStoreError
from droplink.domain.file_storage.storage_repository import (
    IBlobStore,
    ObjectInfo,
    StoredObject,
)
from droplink.domain.file_storage.value_objects import DEFAULT_CONTENT_TYPE


class LocalFileStorageRepository(IBlobStore):
    """
    Local filesystem implementation of IBlobStore.

    Writes go through a temporary file and an atomic rename, so readers never
    observe partially written objects.

    Attributes:
        base_path: Base directory for file storage operations
    """

    def __init__(self, base_path: str = "/tmp/droplink"):
        """
        Initialize the local file storage repository.

        Args:
            base_path: Base directory for file storage (default: /tmp/droplink)
        """
        self.base_path = Path(base_path)
        self.objects_path = self.base_path / "objects"
        self.meta_path = self.base_path / "meta"
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        """
        Ensure the storage directories exist.

        Raises:
            PermissionError: If insufficient permissions to create directory
            OSError: If directory creation fails for other reasons
        """
        try:
            self.objects_path.mkdir(parents=True, exist_ok=True)
            self.meta_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise PermissionError(
                f"Insufficient permissions to create storage directory: {self.base_path}"
            ) from e
        except OSError as e:
            raise OSError(
                f"Failed to create storage directory: {self.base_path}"
            ) from e

    @staticmethod
    def _is_valid_key(key: str) -> bool:
        """Keys must stay inside the storage directory."""
        if not key or not key.strip():
            return False
        if key.startswith(".") or "/" in key or "\\" in key or "\x00" in key:
            return False
        return True

    def _object_file(self, key: str) -> Path:
        return self.objects_path / key

    def _meta_file(self, key: str) -> Path:
        return self.meta_path / f"{key}.json"

    def _write_atomic(self, target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _read_meta(self, key: str) -> dict:
        meta_file = self._meta_file(key)
        if not meta_file.exists():
            return {}
        try:
            return json.loads(meta_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}

    # IBlobStore interface methods

    def save(self, key: str, content: bytes, content_type: str) -> str:
        """
        Save object bytes and sidecar metadata.

        Returns:
            MD5 hex digest of the content, used as etag

        Raises:
            ValueError: If key is empty or would escape the storage directory
            BlobStoreError: If the filesystem write fails
        """
        if not self._is_valid_key(key):
            raise ValueError(f"Invalid storage key: {key!r}")

        etag = hashlib.md5(content).hexdigest()
        meta = {
            "content_type": content_type or DEFAULT_CONTENT_TYPE,
            "etag": etag,
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
        }

        object_file = self._object_file(key)
        try:
            self._write_atomic(object_file, content)
        except OSError as e:
            raise BlobStoreError(f"Failed to save object {key}: {e}", e) from e

        try:
            self._write_atomic(self._meta_file(key), json.dumps(meta).encode("utf-8"))
        except OSError as e:
            object_file.unlink(missing_ok=True)
            raise BlobStoreError(f"Failed to save metadata of object {key}: {e}", e) from e

        return etag

    def get(self, key: str) -> Optional[StoredObject]:
        """
        Retrieve object bytes and metadata.

        Returns:
            StoredObject if found, None if the object doesn't exist
        """
        if not self._is_valid_key(key):
            return None

        object_file = self._object_file(key)
        try:
            content = object_file.read_bytes()
        except FileNotFoundError:
            return None
        except IsADirectoryError:
            return None
        except OSError as e:
            raise BlobStoreError(f"Failed to read object {key}: {e}", e) from e

        meta = self._read_meta(key)
        return StoredObject(
            key=key,
            content=content,
            content_type=meta.get("content_type") or DEFAULT_CONTENT_TYPE,
            etag=meta.get("etag") or hashlib.md5(content).hexdigest(),
        )

    def exists(self, key: str) -> bool:
        """Check if an object exists. Never raises."""
        try:
            if not self._is_valid_key(key):
                return False
            return self._object_file(key).is_file()
        except (OSError, ValueError):
            return False

    def delete(self, key: str) -> bool:
        """
        Delete an object and its sidecar.

        Idempotent: a missing object counts as deleted.

        Raises:
            BlobStoreError: If the filesystem delete fails
        """
        if not self._is_valid_key(key):
            return True

        try:
            self._object_file(key).unlink(missing_ok=True)
            self._meta_file(key).unlink(missing_ok=True)
        except OSError as e:
            raise BlobStoreError(f"Failed to delete object {key}: {e}", e) from e

        return True

    def list_objects(self) -> List[ObjectInfo]:
        """List every stored object."""
        objects = []
        try:
            entries = list(self.objects_path.iterdir())
        except OSError as e:
            raise BlobStoreError(f"Failed to list objects: {e}", e) from e

        for entry in entries:
            if entry.name.startswith(".") or not entry.is_file():
                continue

            try:
                stat = entry.stat()
            except FileNotFoundError:
                # deleted since iterdir()
                continue

            meta = self._read_meta(entry.name)
            uploaded_at = meta.get("uploaded_at")
            objects.append(
                ObjectInfo(
                    key=entry.name,
                    size=stat.st_size,
                    uploaded_at=(
                        datetime.fromisoformat(uploaded_at)
                        if uploaded_at
                        else datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
                    ),
                    etag=meta.get("etag", ""),
                )
            )

        return objects
