import logging
import re
from pathlib import Path

from zg_storage.errors import DownloadError, IndexingError
from zg_storage.services.client import StorageClient, UploadReceipt

logger = logging.getLogger(__name__)

ROOT_HASH_PATTERN = re.compile(r"0x[0-9a-fA-F]{64}")


def is_root_hash(value: str) -> bool:
    return bool(ROOT_HASH_PATTERN.fullmatch(value or ""))


class TransferManager:
    """Upload and download orchestration on top of a storage client."""

    def __init__(self, client: StorageClient) -> None:
        self.client = client

    def upload(self, path: Path) -> UploadReceipt:
        """Build the file's tree and submit it, returning the root and transaction hashes."""
        path = Path(path)
        if not path.is_file():
            raise IndexingError(f"{path} is not a readable file")

        with path.open("rb") as handle:
            if not handle.read(1):
                raise IndexingError(f"{path} is empty")
            receipt = self.client.upload(path)

        logger.info("Upload of %s committed in transaction %s", receipt.root_hash, receipt.transaction_hash or "-")
        return receipt

    def download(self, root_hash: str, output_path: Path) -> Path:
        """Retrieve ``root_hash`` into ``output_path`` with proof verification."""
        if not is_root_hash(root_hash):
            raise DownloadError(f"invalid root hash {root_hash!r}")

        output_path = Path(output_path)
        if output_path.exists():
            raise DownloadError(f"{output_path} already exists")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self.client.download(root_hash, output_path, with_proof=True)
        except Exception:
            _discard(output_path)
            raise

        if not output_path.is_file():
            raise DownloadError(f"storage client did not write {output_path}")
        return output_path


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
