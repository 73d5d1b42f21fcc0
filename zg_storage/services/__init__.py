"""Storage client adapter and transfer orchestration."""

from .client import StorageClient, UploadReceipt, ZeroGStorageClient  # noqa: F401
from .transfer import TransferManager, is_root_hash  # noqa: F401
