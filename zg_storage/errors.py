"""Error taxonomy shared by the HTTP and CLI front-ends.

Every failure raised by the storage layer carries the underlying message in
``detail``; ``str(error)`` prefixes it with the failing stage so callers can
surface it as-is.
"""


class StorageError(Exception):
    """Base class for failures surfaced to API and CLI callers."""

    prefix = "Storage error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        if self.prefix and detail:
            message = f"{self.prefix}: {detail}"
        else:
            message = self.prefix or detail
        super().__init__(message)


class IndexingError(StorageError):
    """The storage client could not build the file's Merkle tree."""

    prefix = "Error generating Merkle tree"


class UploadError(StorageError):
    """The upload or its on-chain submission failed."""

    prefix = "Upload error"


class DownloadError(StorageError):
    """Retrieving a file by root hash failed."""

    prefix = "Download error"


class StreamingError(StorageError):
    """A retrieved file could not be sent back to the caller."""

    prefix = "Failed to send file"


class ClientUnavailableError(StorageError):
    prefix = "Storage client unavailable"


class ConfigurationError(StorageError):
    prefix = ""
