"""
Google Cloud Storage Repository Implementation

Concrete implementation of IBlobStore for Google Cloud Storage.
Uses the google-cloud-storage library; content types are kept as blob
metadata and etags come from GCS.
"""

from typing import List, Optional

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage

from droplink.domain.errors import BlobStoreError
from droplink.domain.file_storage.storage_repository import (
    IBlobStore,
    ObjectInfo,
    StoredObject,
)
from droplink.domain.file_storage.value_objects import DEFAULT_CONTENT_TYPE


class GCSStorageRepository(IBlobStore):
    """
    Google Cloud Storage implementation of IBlobStore.

    Thread Safety:
        The GCS client handles concurrent operations safely.

    Attributes:
        bucket_name: Name of the GCS bucket for file storage
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(self, bucket_name: str, client: Optional[storage.Client] = None):
        """
        Initialize the GCS storage repository.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            client: Preconfigured client (defaults to ambient credentials)

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def save(self, key: str, content: bytes, content_type: str) -> str:
        """
        Upload object bytes to GCS.

        Returns:
            The GCS etag of the new object

        Raises:
            ValueError: If key is empty
            BlobStoreError: If the upload fails
        """
        if not key or not key.strip():
            raise ValueError("key cannot be empty")

        try:
            blob = self.bucket.blob(key)
            blob.upload_from_string(
                content, content_type=content_type or DEFAULT_CONTENT_TYPE
            )
            return blob.etag or ""
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to save object {key} to GCS: {e}", e) from e

    def get(self, key: str) -> Optional[StoredObject]:
        """
        Download an object from GCS.

        Returns:
            StoredObject if found, None if the blob doesn't exist
        """
        if not key or not key.strip():
            return None

        try:
            blob = self.bucket.get_blob(key)
            if blob is None:
                return None

            content = blob.download_as_bytes()
        except NotFound:
            # deleted between metadata fetch and download
            return None
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to read object {key} from GCS: {e}", e) from e

        return StoredObject(
            key=key,
            content=content,
            content_type=blob.content_type or DEFAULT_CONTENT_TYPE,
            etag=blob.etag or "",
        )

    def exists(self, key: str) -> bool:
        """Check if a blob exists. Never raises."""
        try:
            if not key or not key.strip():
                return False
            return self.bucket.blob(key).exists()
        except Exception:
            return False

    def delete(self, key: str) -> bool:
        """
        Delete a blob. Idempotent.

        Raises:
            BlobStoreError: If the delete fails
        """
        if not key or not key.strip():
            return True

        try:
            self.bucket.blob(key).delete()
        except NotFound:
            pass
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to delete object {key} from GCS: {e}", e) from e

        return True

    def list_objects(self) -> List[ObjectInfo]:
        """List every blob in the bucket."""
        try:
            return [
                ObjectInfo(
                    key=blob.name,
                    size=blob.size or 0,
                    uploaded_at=blob.time_created,
                    etag=blob.etag or "",
                )
                for blob in self.client.list_blobs(self.bucket_name)
            ]
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to list objects in GCS: {e}", e) from e

    def health_check(self) -> bool:
        """Check that the bucket is reachable."""
        try:
            return self.bucket.exists()
        except Exception:
            return False
