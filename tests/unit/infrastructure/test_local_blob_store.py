"""
Unit tests for LocalFileStorageRepository specifics not covered by the
blob store contract.
"""

import json

import pytest

from droplink.application.transfer_service import TransferService
from droplink.config.transfer_config import TransferConfig
from droplink.domain.errors import BlobStoreError
from droplink.infrastructure.local_file_storage_repository import LocalFileStorageRepository

KEY = "1705320000000-abcd1234-a.txt"


@pytest.fixture
def repository(tmp_path):
    return LocalFileStorageRepository(str(tmp_path / "storage"))


class TestLocalFileStorageRepository:
    def test_creates_directories(self, tmp_path):
        LocalFileStorageRepository(str(tmp_path / "nested" / "storage"))

        assert (tmp_path / "nested" / "storage" / "objects").is_dir()
        assert (tmp_path / "nested" / "storage" / "meta").is_dir()

    def test_writes_sidecar_metadata(self, repository):
        etag = repository.save(KEY, b"hello", "text/plain")

        meta = json.loads((repository.meta_path / f"{KEY}.json").read_text())
        assert meta["content_type"] == "text/plain"
        assert meta["etag"] == etag == "5d41402abc4b2a76b9719d911017c592"
        assert "uploaded_at" in meta

    def test_no_temporary_files_left(self, repository):
        repository.save(KEY, b"hello", "text/plain")

        leftovers = [p.name for p in repository.objects_path.iterdir() if p.name.startswith(".")]
        assert leftovers == []

    def test_missing_sidecar_falls_back(self, repository):
        (repository.objects_path / KEY).write_bytes(b"hello")

        stored = repository.get(KEY)

        assert stored.content_type == "application/octet-stream"
        assert stored.etag == "5d41402abc4b2a76b9719d911017c592"
        [info] = repository.list_objects()
        assert info.uploaded_at is not None

    @pytest.mark.parametrize("key", ["", "   ", "../escape", "a/b", ".hidden", "a\\b"])
    def test_rejects_unsafe_keys(self, repository, key):
        with pytest.raises(ValueError):
            repository.save(key, b"x", "text/plain")

        assert repository.get(key) is None
        assert repository.exists(key) is False

    def test_delete_removes_sidecar(self, repository):
        repository.save(KEY, b"hello", "text/plain")

        repository.delete(KEY)

        assert not (repository.meta_path / f"{KEY}.json").exists()

    def test_sidecar_failure_removes_object(self, repository, monkeypatch):
        write_atomic = repository._write_atomic

        def fail_on_sidecar(target, data):
            if target.parent == repository.meta_path:
                raise OSError(36, "File name too long")
            write_atomic(target, data)

        monkeypatch.setattr(repository, "_write_atomic", fail_on_sidecar)

        with pytest.raises(BlobStoreError):
            repository.save(KEY, b"hello", "text/plain")

        assert repository.exists(KEY) is False
        assert repository.list_objects() == []

    def test_ingest_with_long_filename(self, repository):
        service = TransferService(repository, None, TransferConfig(max_upload_bytes=1024))
        filename = "r" * 236 + ".pdf"

        result = service.ingest(b"hello", filename)
        served = service.resolve_and_serve(result.key, one_time=False)

        assert served.content == b"hello"
        assert served.filename.endswith(".pdf")
        assert repository.exists(result.key)
