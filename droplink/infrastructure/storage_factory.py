"""
Storage Factory

Factory for creating the blob store implementation selected by configuration.
The application layer stays decoupled from the concrete implementation via
the `IBlobStore` interface.
"""

import logging
import os
from typing import Optional

from droplink.domain.file_storage.storage_repository import IBlobStore
from droplink.infrastructure.local_file_storage_repository import LocalFileStorageRepository

logger = logging.getLogger(__name__)

LOCAL_BACKEND = "local"
GCS_BACKEND = "gcs"


class StorageFactory:
    """Factory that returns the configured blob store."""

    @staticmethod
    def create_storage(backend: Optional[str] = None) -> IBlobStore:
        """
        Create the blob store for the configured backend.

        Args:
            backend: ``local`` or ``gcs`` (defaults to STORAGE_BACKEND)

        Returns:
            `IBlobStore` implementation

        Raises:
            ValueError: If the backend name is unknown
            RuntimeError: If the backend cannot be initialized

        Environment Variables:
            STORAGE_BACKEND: ``local`` (default) or ``gcs``
            STORAGE_DIR: Base directory for local storage (default: /tmp/droplink)
            GCS_BUCKET_NAME: Bucket used by the GCS backend
            GOOGLE_APPLICATION_CREDENTIALS: Optional service account file
        """
        backend = (backend or os.getenv("STORAGE_BACKEND", LOCAL_BACKEND)).lower()

        if backend == LOCAL_BACKEND:
            return StorageFactory._create_local_storage()
        if backend == GCS_BACKEND:
            return StorageFactory._create_gcs_storage()

        raise ValueError(f"Unknown storage backend: {backend}")

    @staticmethod
    def _create_local_storage() -> IBlobStore:
        """
        Create local filesystem storage repository.

        Raises:
            RuntimeError: If local storage initialization fails
        """
        storage_dir = os.getenv("STORAGE_DIR", "/tmp/droplink")
        try:
            storage = LocalFileStorageRepository(storage_dir)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e

        logger.info(f"Storage factory: using local filesystem storage at {storage_dir}")
        return storage

    @staticmethod
    def _create_gcs_storage() -> IBlobStore:
        """
        Create Google Cloud Storage repository.

        Uses the service account file from GOOGLE_APPLICATION_CREDENTIALS when
        present, otherwise default credentials.

        Raises:
            RuntimeError: If the bucket is not configured or the client fails
        """
        bucket_name = os.getenv("GCS_BUCKET_NAME")
        if not bucket_name:
            raise RuntimeError("GCS_BUCKET_NAME must be set for the gcs storage backend")

        try:
            from google.cloud import storage
            from google.oauth2 import service_account

            from droplink.infrastructure.gcs_storage_repository import GCSStorageRepository

            credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            if credentials_path and os.path.exists(credentials_path):
                credentials = service_account.Credentials.from_service_account_file(
                    credentials_path
                )
                client = storage.Client(credentials=credentials)
            else:
                client = storage.Client()

            repository = GCSStorageRepository(bucket_name, client=client)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize GCS storage: {e}") from e

        logger.info(f"Storage factory: using GCS bucket {bucket_name}")
        return repository
