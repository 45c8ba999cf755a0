"""
Transfer Service

Application service that orchestrates the file-transfer lifecycle:
ingest, resolve-and-serve (optionally one-time), purge and listing.
Coordinates the blob store with the metadata manager and enforces the
expiration and one-time-download contracts.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from droplink.config.transfer_config import TransferConfig
from droplink.domain.errors import (
    ErrorCategory,
    FileExpiredError,
    MetadataStoreError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from droplink.domain.file_storage.entities import FileRecord
from droplink.domain.file_storage.expiration import (
    MAX_EXPIRES_IN_HOURS,
    compute_expires_at,
    is_valid_lifetime,
    utc_now,
)
from droplink.domain.file_storage.services import MetadataManager
from droplink.domain.file_storage.storage_repository import IBlobStore
from droplink.domain.file_storage.value_objects import (
    DEFAULT_CONTENT_TYPE,
    extract_original_filename,
    generate_primary_key,
    generate_short_key,
    guess_content_type,
    looks_like_short_key,
)

from .transfer_result import FileListing, IngestResult, ServedFile

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class TransferService:
    """
    Application service for the upload / download / delete workflows.

    The blob store is the system of record for file existence. The metadata
    manager is optional: when it is missing or its store fails, every
    operation that is not purely about metadata degrades to "no metadata"
    instead of failing.

    Concurrency: store handles are shared but no in-process state is kept
    between requests. Two concurrent one-time downloads of the same key can
    both succeed, and concurrent downloads can lose count increments; the
    stores offer no conditional delete, so both races are accepted.
    """

    def __init__(
        self,
        blob_store: Optional[IBlobStore],
        metadata_manager: Optional[MetadataManager] = None,
        config: Optional[TransferConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize Transfer Service with dependencies.

        Args:
            blob_store: Object storage for file content (None if unavailable)
            metadata_manager: Domain service for file metadata (optional)
            config: Upload and download policy
            clock: Source of the current time
        """
        self.blob_store = blob_store
        self.metadata_manager = metadata_manager
        self.config = config or TransferConfig()
        self.clock = clock

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    def ingest(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
        size: Optional[int] = None,
        expires_in_hours: Optional[float] = None,
    ) -> IngestResult:
        """
        Store an uploaded file and record its metadata.

        Workflow:
        1. Validate input (nothing is written on rejection)
        2. Generate the primary key and write the blob
        3. Compute the expiration and persist metadata with a short key

        A blob failure aborts before any metadata is written. A metadata
        failure after the blob write is logged and tolerated: the result then
        reports whatever the primary record holds, and without a record the
        file stays downloadable by key, without short key or expiration.

        Args:
            content: File bytes
            filename: Original filename
            content_type: MIME type (guessed from the filename if omitted)
            size: Declared size in bytes (defaults to ``len(content)``)
            expires_in_hours: Lifetime of the file, None for no expiration

        Returns:
            IngestResult describing the stored file

        Raises:
            StoreUnavailableError: If no blob store is configured
            ValidationError: If the input is rejected
            BlobStoreError: If the blob write fails
        """
        blob_store = self._require_blob_store()

        if size is None:
            size = len(content)
        if expires_in_hours is None:
            expires_in_hours = self.config.default_expires_in_hours
        self._validate_upload(filename, size, expires_in_hours)

        key = generate_primary_key(filename)
        content_type = content_type or guess_content_type(filename)
        etag = blob_store.save(key, content, content_type)

        uploaded_at = self.clock()
        expires_at = compute_expires_at(expires_in_hours, uploaded_at)
        short_key = None

        if self.metadata_manager is not None:
            candidate = generate_short_key() if self.config.short_links_enabled else None
            try:
                self.metadata_manager.create(
                    key=key,
                    filename=filename,
                    size=size,
                    uploaded_at=uploaded_at,
                    expires_at=expires_at,
                    short_key=candidate,
                )
                short_key = candidate
            except MetadataStoreError as e:
                logger.warning(f"Metadata for {key} incomplete, metadata store failed: {e}")
                record = self._read_metadata(key)
                expires_at = record.expires_at if record is not None else None
                short_key = record.short_key if record is not None else None
        else:
            expires_at = None

        logger.info(
            f"Ingested {key} ({size} bytes, short_key={short_key}, "
            f"expires_at={expires_at.isoformat() if expires_at else None})"
        )

        return IngestResult(
            key=key,
            filename=filename,
            size=size,
            content_type=content_type,
            uploaded_at=uploaded_at,
            etag=etag,
            expires_at=expires_at,
            short_key=short_key,
        )

    def _validate_upload(
        self, filename: str, size: int, expires_in_hours: Optional[float]
    ) -> None:
        if size <= 0:
            raise ValidationError("Cannot upload empty file", ErrorCategory.EMPTY_FILE)

        if not filename or not filename.strip():
            raise ValidationError("File must have a name")

        if size > self.config.max_upload_bytes:
            raise ValidationError(
                f"File size {size} exceeds limit of {self.config.max_upload_bytes} bytes",
                ErrorCategory.FILE_TOO_LARGE,
            )

        _validate_lifetime(expires_in_hours)

    # ------------------------------------------------------------------
    # Resolve and serve
    # ------------------------------------------------------------------

    def resolve_and_serve(
        self, identifier: str, one_time: Optional[bool] = None
    ) -> ServedFile:
        """
        Resolve a key or short key and return the file content.

        Workflow:
        1. Short-key shaped identifiers are looked up as aliases first; a miss
           falls through to treating the identifier as a primary key
        2. Expired metadata fails with FileExpiredError without reading the blob
        3. The blob is read fully into memory
        4. The download is counted (best-effort)
        5. One-time downloads delete the blob, then purge metadata

        Args:
            identifier: Primary key or short key
            one_time: Delete after reading (defaults to the configured policy)

        Returns:
            ServedFile with bytes, filename and content type

        Raises:
            StoreUnavailableError: If no blob store is configured
            NotFoundError: If nothing resolves to a stored object
            FileExpiredError: If the file's expiration has passed
            BlobStoreError: If the blob store fails
        """
        blob_store = self._require_blob_store()

        if not identifier or not identifier.strip():
            raise NotFoundError("Empty identifier")

        key = self._resolve_identifier(identifier)
        record = self._read_metadata(key)

        if record is not None and self.metadata_manager.is_expired(record):
            logger.info(f"Refusing expired file {key[:8]}...")
            raise FileExpiredError(f"File has expired: {key}")

        stored = blob_store.get(key)
        if stored is None:
            raise NotFoundError(f"File not found: {identifier}")

        if record is not None:
            self._record_download(key)

        filename = record.filename if record is not None else extract_original_filename(key)
        content_type = stored.content_type
        if not content_type or content_type == DEFAULT_CONTENT_TYPE:
            content_type = guess_content_type(filename)

        if one_time is None:
            one_time = self.config.one_time_downloads
        if one_time:
            self._consume(key)

        return ServedFile(
            key=key,
            content=stored.content,
            filename=filename,
            content_type=content_type,
            etag=stored.etag,
            consumed=one_time,
        )

    def _resolve_identifier(self, identifier: str) -> str:
        """
        Map a short key to its primary key when possible.

        A primary key that happens to look like a short key is only reached
        when no alias with that name exists.
        """
        if self.metadata_manager is None or not looks_like_short_key(identifier):
            return identifier

        try:
            resolved = self.metadata_manager.resolve_alias(identifier)
        except MetadataStoreError as e:
            logger.warning(f"Alias lookup failed for {identifier}: {e}")
            return identifier

        return resolved or identifier

    def _read_metadata(self, key: str) -> Optional[FileRecord]:
        if self.metadata_manager is None:
            return None

        try:
            return self.metadata_manager.read(key)
        except MetadataStoreError as e:
            logger.warning(f"Serving {key[:8]}... without metadata: {e}")
            return None

    def _record_download(self, key: str) -> None:
        try:
            self.metadata_manager.record_download(key)
        except MetadataStoreError as e:
            logger.warning(f"Could not record download of {key[:8]}...: {e}")

    def _consume(self, key: str) -> None:
        """Delete a served file; metadata is purged even if the blob delete fails."""
        try:
            self.blob_store.delete(key)
        finally:
            self._purge_metadata(key)
        logger.info(f"Consumed one-time download {key[:8]}...")

    def _purge_metadata(self, key: str) -> bool:
        if self.metadata_manager is None:
            return False

        try:
            return self.metadata_manager.purge(key)
        except MetadataStoreError as e:
            logger.warning(f"Could not purge metadata of {key[:8]}...: {e}")
            return False

    # ------------------------------------------------------------------
    # Purge
    # ------------------------------------------------------------------

    def purge(self, key: str) -> bool:
        """
        Delete a file and its metadata.

        Succeeds when either side is already gone, including for expired files.

        Returns:
            True if a blob or a metadata record existed

        Raises:
            StoreUnavailableError: If no blob store is configured
            BlobStoreError: If the blob delete fails
        """
        blob_store = self._require_blob_store()

        existed = blob_store.exists(key)
        blob_store.delete(key)
        had_metadata = self._purge_metadata(key)

        logger.info(f"Purged {key} (blob_existed={existed}, metadata_existed={had_metadata})")
        return existed or had_metadata

    # ------------------------------------------------------------------
    # Listing and short links
    # ------------------------------------------------------------------

    def list_files(self) -> List[FileListing]:
        """
        List stored files, newest first.

        Driven by the blob store and enriched with metadata where available.
        Expired files are omitted. Enrichment stops after the first metadata
        store failure so one outage does not cost a timeout per file.

        Raises:
            StoreUnavailableError: If no blob store is configured
            BlobStoreError: If the listing fails
        """
        blob_store = self._require_blob_store()
        enrich = self.metadata_manager is not None
        now = self.clock()
        listings = []

        for info in blob_store.list_objects():
            record = None
            if enrich:
                try:
                    record = self.metadata_manager.read(info.key)
                except MetadataStoreError as e:
                    logger.warning(f"Listing without metadata enrichment: {e}")
                    enrich = False

            if record is not None and record.is_expired(now):
                continue

            listings.append(
                FileListing(
                    key=info.key,
                    filename=record.filename if record else extract_original_filename(info.key),
                    size=info.size,
                    uploaded_at=record.uploaded_at if record else info.uploaded_at,
                    etag=info.etag,
                    short_key=record.short_key if record else None,
                    expires_at=record.expires_at if record else None,
                    download_count=record.download_count if record else None,
                    has_metadata=record is not None,
                )
            )

        listings.sort(key=lambda listing: listing.uploaded_at or _EPOCH, reverse=True)
        return listings

    def get_short_link_info(self, short_key: str) -> FileRecord:
        """
        Describe the file behind a short key without downloading it.

        This operation exists only for metadata, so metadata store failures
        propagate.

        Raises:
            StoreUnavailableError: If no metadata store is configured
            NotFoundError: If the alias or its record does not exist
            FileExpiredError: If the file has expired
            MetadataStoreError: If the metadata store fails
        """
        metadata_manager = self._require_metadata()

        key = metadata_manager.resolve_alias(short_key)
        if not key:
            raise NotFoundError(f"Short link not found: {short_key}")

        record = metadata_manager.read(key)
        if record is None:
            raise NotFoundError(f"File metadata not found for short link: {short_key}")

        if metadata_manager.is_expired(record):
            raise FileExpiredError(f"File has expired: {key}")

        return record

    def create_share_link(
        self, key: str, expires_in_hours: Optional[float] = None
    ) -> FileRecord:
        """
        Assign a fresh short key to a stored file.

        The previous alias, if any, stops resolving. When ``expires_in_hours``
        is given the file's expiration is reset relative to now.

        Raises:
            StoreUnavailableError: If either store is not configured
            ValidationError: If ``expires_in_hours`` is not a valid lifetime
            NotFoundError: If the file or its metadata does not exist
            FileExpiredError: If the file has already expired
            MetadataStoreError: If the metadata store fails
        """
        blob_store = self._require_blob_store()
        metadata_manager = self._require_metadata()

        _validate_lifetime(expires_in_hours)
        expires_at = compute_expires_at(expires_in_hours, self.clock())

        record = metadata_manager.read(key)
        if record is None or not blob_store.exists(key):
            raise NotFoundError(f"File not found: {key}")
        if metadata_manager.is_expired(record):
            raise FileExpiredError(f"File has expired: {key}")

        record = metadata_manager.assign_short_key(key, generate_short_key())
        if record is None:
            raise NotFoundError(f"File metadata disappeared: {key}")

        if expires_at is not None:
            record = metadata_manager.set_expiration(key, expires_at) or record

        logger.info(f"Created share link {record.short_key} for {key}")
        return record

    # ------------------------------------------------------------------
    # Store availability
    # ------------------------------------------------------------------

    def _require_blob_store(self) -> IBlobStore:
        if self.blob_store is None:
            raise StoreUnavailableError("Blob store is not configured")
        return self.blob_store

    def _require_metadata(self) -> MetadataManager:
        if self.metadata_manager is None:
            raise StoreUnavailableError("Metadata store is not configured")
        return self.metadata_manager


def _validate_lifetime(expires_in_hours: Optional[float]) -> None:
    if expires_in_hours is not None and not is_valid_lifetime(expires_in_hours):
        raise ValidationError(
            f"expires_in_hours must be a positive number of at most {MAX_EXPIRES_IN_HOURS}"
        )
