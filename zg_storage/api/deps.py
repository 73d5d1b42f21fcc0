from functools import lru_cache

from zg_storage.config import settings
from zg_storage.services import TransferManager, ZeroGStorageClient
from zg_storage.storage import FileSystemStorage


@lru_cache(maxsize=1)
def get_transfer_manager() -> TransferManager:
    """Return the process-wide transfer manager backed by the configured client."""
    return TransferManager(ZeroGStorageClient.from_settings(settings))


@lru_cache(maxsize=1)
def get_file_storage() -> FileSystemStorage:
    return FileSystemStorage(settings.upload_dir, settings.download_dir)
