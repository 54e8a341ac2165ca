"""
Local filesystem blob store.

Blobs are plain files directly under the upload directory, named by their
key. Writes use exclusive create so a key is never overwritten.
"""

import os
from pathlib import Path
from typing import BinaryIO, List

from pdf_vault.core.blob_store import (
    BlobExistsError,
    BlobNotFoundError,
    BlobSource,
    BlobStoreError,
)
from pdf_vault.core.logging import get_service_logger

logger = get_service_logger("local_blob_store")

COPY_CHUNK_SIZE = 1024 * 1024


class LocalBlobStore:
    """
    File-system based blob store.

    Usage:
        store = LocalBlobStore("uploads")
        size = store.put("1700000000000-ab12cd34-report.pdf", content)
        with store.open("1700000000000-ab12cd34-report.pdf") as f:
            data = f.read()
    """

    def __init__(self, base_path: str | os.PathLike = "uploads"):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info("Local blob store initialized", base_path=str(self.base_path))

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a file path inside the base directory."""
        if not key or key in (".", "..") or "/" in key or "\\" in key or "\x00" in key:
            raise BlobStoreError(f"Invalid blob key: {key!r}", key=key)
        path = (self.base_path / key).resolve()
        if path.parent != self.base_path:
            raise BlobStoreError(f"Blob key escapes storage root: {key!r}", key=key)
        return path

    def put(self, key: str, source: BlobSource) -> int:
        path = self._path_for(key)
        try:
            f = open(path, "xb")
        except FileExistsError as e:
            raise BlobExistsError(f"Blob already exists: {key}", key=key) from e
        except OSError as e:
            logger.error("Failed to create blob file", key=key, error=str(e))
            raise BlobStoreError(f"Failed to create blob {key}: {e}", key=key) from e

        written = 0
        try:
            with f:
                if isinstance(source, (bytes, bytearray)):
                    f.write(source)
                    written = len(source)
                else:
                    while True:
                        chunk = source.read(COPY_CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
                        written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
        except Exception as e:
            self._remove_partial(path, key)
            logger.error("Failed to write blob", key=key, error=str(e))
            raise BlobStoreError(f"Failed to write blob {key}: {e}", key=key) from e

        logger.debug("Blob written", key=key, size=written)
        return written

    def _remove_partial(self, path: Path, key: str) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove partial blob", key=key, error=str(e))

    def exists(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BlobStoreError(f"Failed to stat blob {key}: {e}", key=key) from e
        return True

    def open(self, key: str) -> BinaryIO:
        path = self._path_for(key)
        try:
            return open(path, "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"Blob not found: {key}", key=key) from e
        except OSError as e:
            raise BlobStoreError(f"Failed to open blob {key}: {e}", key=key) from e

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Blob already absent on delete", key=key)
            return False
        except OSError as e:
            logger.error("Failed to delete blob", key=key, error=str(e))
            raise BlobStoreError(f"Failed to delete blob {key}: {e}", key=key) from e
        logger.debug("Blob deleted", key=key)
        return True

    def list_keys(self) -> List[str]:
        try:
            with os.scandir(self.base_path) as entries:
                return sorted(entry.name for entry in entries if entry.is_file())
        except OSError as e:
            raise BlobStoreError(f"Failed to list blobs: {e}") from e

    def health_check(self) -> bool:
        """Check that the upload directory exists and is writable."""
        if not self.base_path.is_dir():
            logger.error("Upload directory missing", base_path=str(self.base_path))
            return False
        if not os.access(self.base_path, os.W_OK | os.X_OK):
            logger.error("Upload directory not writable", base_path=str(self.base_path))
            return False
        return True
