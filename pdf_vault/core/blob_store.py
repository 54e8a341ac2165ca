"""
Blob store protocol for document bytes.

Defines the interface every backend (local filesystem, Google Cloud
Storage) implements so the document service can use them interchangeably.
Keys are opaque stored names generated by the document service.
"""

from typing import BinaryIO, List, Protocol, Union, runtime_checkable

from pdf_vault.core.config import Settings

BlobSource = Union[bytes, bytearray, BinaryIO]


class BlobStoreError(Exception):
    """Base exception for blob store failures."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


class BlobNotFoundError(BlobStoreError):
    """The requested key has no blob."""

    pass


class BlobExistsError(BlobStoreError):
    """A write-once put hit an existing key."""

    pass


@runtime_checkable
class BlobStore(Protocol):
    """
    Durable byte storage keyed by stored name.

    Implementations are synchronous; callers on the event loop run them in
    a worker thread.
    """

    def put(self, key: str, source: BlobSource) -> int:
        """
        Write a new blob and return the number of bytes written.

        Never overwrites: an existing key raises BlobExistsError. On failure
        no partial blob is left behind under the key.
        """
        ...

    def exists(self, key: str) -> bool:
        """Report whether a blob is stored under the key."""
        ...

    def open(self, key: str) -> BinaryIO:
        """
        Open the blob for reading.

        Raises:
            BlobNotFoundError: If no blob is stored under the key.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete the blob. Returns False if it was already absent."""
        ...

    def list_keys(self) -> List[str]:
        """List every stored key."""
        ...

    def health_check(self) -> bool:
        """Check that the backend is reachable and writable."""
        ...


def get_blob_store(config: Settings) -> BlobStore:
    """Build the blob store selected by STORAGE_BACKEND."""
    if config.STORAGE_BACKEND == "gcs":
        from pdf_vault.core.gcs_client import GCSBlobStore

        return GCSBlobStore(
            bucket_name=config.GCS_BUCKET_NAME,
            prefix=config.GCS_PREFIX,
            project_id=config.GCP_PROJECT_ID,
            credentials_path=config.GOOGLE_APPLICATION_CREDENTIALS,
        )

    from pdf_vault.core.local_blob_store import LocalBlobStore

    return LocalBlobStore(config.UPLOAD_DIR)
