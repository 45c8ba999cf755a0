"""
Property-based tests for key handling and the transfer workflow.
"""

from hypothesis import given
from hypothesis import strategies as st

from droplink.application.transfer_service import TransferService
from droplink.config.transfer_config import TransferConfig
from droplink.domain.file_storage import FileRecord, MetadataManager
from droplink.domain.file_storage.value_objects import (
    extract_original_filename,
    generate_primary_key,
    looks_like_short_key,
    sanitize_filename,
)
from tests.fixtures.mock_repositories import InMemoryBlobStore, InMemoryMetadataStore
from tests.property.strategies import (
    expiration_hours,
    file_contents,
    file_records,
    filenames,
)


def _service() -> TransferService:
    return TransferService(
        InMemoryBlobStore(),
        MetadataManager(InMemoryMetadataStore()),
        TransferConfig(max_upload_bytes=4096, one_time_downloads=True, short_links_enabled=True),
    )


@given(filenames)
def test_primary_key_embeds_sanitized_filename(filename):
    key = generate_primary_key(filename)

    assert extract_original_filename(key) == sanitize_filename(filename)
    assert not looks_like_short_key(key)


@given(filenames)
def test_sanitized_filename_is_safe(filename):
    sanitized = sanitize_filename(filename)

    assert len(sanitized) == len(filename)
    assert "/" not in sanitized
    assert all(char.isascii() for char in sanitized)


@given(file_records())
def test_file_record_json_is_stable(record):
    assert FileRecord.from_json(record.to_json()) == record


@given(file_contents, filenames, expiration_hours)
def test_ingest_then_serve_returns_same_bytes(content, filename, hours):
    service = _service()

    result = service.ingest(content, filename, expires_in_hours=hours)
    served = service.resolve_and_serve(result.key, one_time=False)

    assert served.content == content
    assert served.filename == filename


@given(file_contents, filenames, st.booleans())
def test_one_time_download_consumes_file(content, filename, by_short_key):
    service = _service()
    result = service.ingest(content, filename)
    identifier = result.short_key if by_short_key else result.key

    service.resolve_and_serve(identifier, one_time=True)

    assert service.blob_store.keys() == []
    assert service.metadata_manager.store.names() == []
