from __future__ import annotations

import logging
import re
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from zg_storage.config import Settings
from zg_storage.errors import (
    ClientUnavailableError,
    ConfigurationError,
    DownloadError,
    IndexingError,
    UploadError,
)

logger = logging.getLogger(__name__)

# e.g. `msg="Data prepared to upload" root=0x09d2...` or `file uploaded, root = 0x09d2...`
ROOT_PATTERN = re.compile(r"\broot\s*=\s*(0x[0-9a-fA-F]+)")
TX_HASH_PATTERN = re.compile(r"\b(?:hash|txHash|tx)\s*=\s*(0x[0-9a-fA-F]+)")
ERROR_FIELD_PATTERN = re.compile(r'\berror="((?:[^"\\]|\\.)*)"')
MESSAGE_FIELD_PATTERN = re.compile(r'\bmsg="((?:[^"\\]|\\.)*)"')


@dataclass(frozen=True)
class UploadReceipt:
    root_hash: str
    transaction_hash: str


class StorageClient(ABC):
    @abstractmethod
    def upload(self, path: Path) -> UploadReceipt:
        """Upload a file and return its root hash and transaction hash."""

    @abstractmethod
    def download(self, root_hash: str, output_path: Path, *, with_proof: bool = True) -> None:
        """Retrieve the file identified by ``root_hash`` into ``output_path``."""


class ZeroGStorageClient(StorageClient):
    """Wrapper around the ``0g-storage-client`` executable."""

    def __init__(
        self,
        private_key: Optional[str],
        *,
        rpc_url: str,
        indexer_rpc: str,
        binary: str = "0g-storage-client",
        extra_args: Optional[Sequence[str]] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.private_key = private_key
        self.rpc_url = rpc_url
        self.indexer_rpc = indexer_rpc
        self.binary = binary
        self.extra_args: List[str] = list(extra_args or [])
        self.timeout = timeout

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        private_key: Optional[str] = None,
        *,
        rpc_url: Optional[str] = None,
        indexer_rpc: Optional[str] = None,
    ) -> "ZeroGStorageClient":
        """Build a client from `Settings`, letting explicit arguments take precedence."""
        return cls(
            private_key or settings.private_key,
            rpc_url=rpc_url or str(settings.rpc_url),
            indexer_rpc=indexer_rpc or str(settings.indexer_rpc),
            binary=settings.client_binary,
            extra_args=_parse_extra_args(settings.client_extra_args),
            timeout=settings.client_timeout_seconds,
        )

    def upload(self, path: Path) -> UploadReceipt:
        if not self.private_key:
            raise ConfigurationError("Private key not found in environment variables")
        command = [
            self.binary,
            "upload",
            "--url",
            self.rpc_url,
            "--key",
            self.private_key,
            "--indexer",
            self.indexer_rpc,
            "--file",
            str(path),
            *self.extra_args,
        ]
        try:
            result = self._run(command)
        except subprocess.TimeoutExpired:
            raise UploadError(f"storage client timed out after {self.timeout} seconds")

        output = _combined_output(result)
        root_hash = _last_match(ROOT_PATTERN, output)

        if result.returncode != 0:
            reason = _failure_reason(result)
            if root_hash is None:
                raise IndexingError(reason)
            raise UploadError(reason)

        if root_hash is None:
            raise IndexingError("storage client did not report a root hash")

        transaction_hash = _transaction_hash(output)
        if not transaction_hash:
            logger.warning("No transaction reported for %s; the file may already be stored on chain", root_hash)

        logger.info("Uploaded %s, root hash = %s", path, root_hash)
        return UploadReceipt(root_hash=root_hash, transaction_hash=transaction_hash or "")

    def download(self, root_hash: str, output_path: Path, *, with_proof: bool = True) -> None:
        command = [
            self.binary,
            "download",
            "--indexer",
            self.indexer_rpc,
            "--root",
            root_hash,
            "--file",
            str(output_path),
        ]
        if with_proof:
            command.append("--proof")
        command.extend(self.extra_args)

        try:
            result = self._run(command)
        except subprocess.TimeoutExpired:
            raise DownloadError(f"storage client timed out after {self.timeout} seconds")

        if result.returncode != 0:
            raise DownloadError(_failure_reason(result))
        logger.info("Downloaded %s to %s", root_hash, output_path)

    def _run(self, command: List[str]) -> subprocess.CompletedProcess:
        logger.debug("Running %s", " ".join(self._redact(command)))
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError:
            raise ClientUnavailableError(f"executable {self.binary!r} was not found")
        except PermissionError:
            raise ClientUnavailableError(f"executable {self.binary!r} is not runnable")

        if result.stdout:
            logger.debug("[0g stdout] %s", result.stdout.strip())
        if result.stderr:
            logger.debug("[0g stderr] %s", result.stderr.strip())
        return result

    def _redact(self, command: List[str]) -> List[str]:
        return ["***" if part == self.private_key else part for part in command]


def _parse_extra_args(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return shlex.split(raw)


def _combined_output(result: subprocess.CompletedProcess) -> str:
    return "\n".join(part for part in (result.stdout, result.stderr) if part)


def _last_match(pattern: re.Pattern, text: str) -> Optional[str]:
    matches = pattern.findall(text)
    return matches[-1] if matches else None


def _transaction_hash(output: str) -> Optional[str]:
    """Return the hash logged alongside the submitted transaction, if any."""
    for line in reversed(output.splitlines()):
        if "transaction" not in line.lower():
            continue
        match = TX_HASH_PATTERN.search(line)
        if match:
            return match.group(1)
    return None


def _failure_reason(result: subprocess.CompletedProcess) -> str:
    """Extract the most specific error message the client printed."""
    output = _combined_output(result)
    error = _last_match(ERROR_FIELD_PATTERN, output)
    if error:
        return error.replace('\\"', '"')

    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if lines:
        message = MESSAGE_FIELD_PATTERN.search(lines[-1])
        return message.group(1) if message else lines[-1]
    return f"storage client exited with status {result.returncode}"
