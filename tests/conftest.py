import hashlib

import pytest
from fastapi.testclient import TestClient

from zg_storage.api.deps import get_file_storage, get_transfer_manager
from zg_storage.errors import DownloadError
from zg_storage.main import app
from zg_storage.services import StorageClient, TransferManager, UploadReceipt
from zg_storage.storage import FileSystemStorage


class FakeStorageClient(StorageClient):
    """In-memory stand-in for the 0G client.

    Files are keyed by a digest of their content so that uploading and then
    downloading by the returned root hash round-trips, like the real network.
    """

    transaction_hash = "0x" + "cd" * 32

    def __init__(self) -> None:
        self.blobs = {}
        self.upload_error = None
        self.download_error = None
        self.uploaded_paths = []
        self.download_calls = []

    def upload(self, path):
        self.uploaded_paths.append(path)
        if self.upload_error is not None:
            raise self.upload_error
        content = path.read_bytes()
        root_hash = "0x" + hashlib.sha256(content).hexdigest()
        self.blobs[root_hash] = content
        return UploadReceipt(root_hash=root_hash, transaction_hash=self.transaction_hash)

    def download(self, root_hash, output_path, *, with_proof=True):
        self.download_calls.append((root_hash, output_path, with_proof))
        if self.download_error is not None:
            output_path.write_bytes(b"partial")
            raise self.download_error
        if root_hash not in self.blobs:
            raise DownloadError("file not found")
        output_path.write_bytes(self.blobs[root_hash])


@pytest.fixture
def fake_client():
    return FakeStorageClient()


@pytest.fixture
def manager(fake_client):
    return TransferManager(fake_client)


@pytest.fixture
def file_storage(tmp_path):
    return FileSystemStorage(tmp_path / "uploads", tmp_path / "downloads")


@pytest.fixture
def api_client(manager, file_storage):
    """Provides a client for the FastAPI application wired to the fake storage client."""
    app.dependency_overrides[get_transfer_manager] = lambda: manager
    app.dependency_overrides[get_file_storage] = lambda: file_storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "file.txt"
    path.write_bytes(b"0123456789")
    return path
