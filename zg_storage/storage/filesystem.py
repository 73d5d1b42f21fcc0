import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional


class FileSystemStorage:
    """Local staging area for uploaded and retrieved files."""

    def __init__(self, upload_root: Path, download_root: Path) -> None:
        self.upload_root = upload_root
        self.download_root = download_root
        self.upload_root.mkdir(parents=True, exist_ok=True)
        self.download_root.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def staged_upload(self, source: BinaryIO, filename: Optional[str] = None) -> Iterator[Path]:
        """Copy ``source`` to a unique file and delete it when the block exits."""
        suffix = Path(filename).suffix if filename else ""
        with tempfile.NamedTemporaryFile(dir=self.upload_root, suffix=suffix, delete=False) as handle:
            path = Path(handle.name)
            try:
                shutil.copyfileobj(source, handle)
            except BaseException:
                handle.close()
                path.unlink(missing_ok=True)
                raise
        try:
            yield path
        finally:
            path.unlink(missing_ok=True)

    def reserve_download(self, root_hash: str) -> Path:
        """Return a destination for ``root_hash`` inside a fresh private directory."""
        folder = Path(tempfile.mkdtemp(prefix="retrieval-", dir=self.download_root))
        return folder / root_hash

    def release(self, path: Path) -> None:
        """Remove the directory created by `reserve_download`."""
        shutil.rmtree(path.parent, ignore_errors=True)
