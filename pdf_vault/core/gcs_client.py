import io
import os
from typing import BinaryIO, List, Optional

from google.cloud import storage
from google.cloud.storage import Bucket
from google.auth.exceptions import DefaultCredentialsError
from google.api_core.exceptions import GoogleAPIError, NotFound, PreconditionFailed

from pdf_vault.core.blob_store import (
    BlobExistsError,
    BlobNotFoundError,
    BlobSource,
    BlobStoreError,
)
from pdf_vault.core.logging import get_service_logger
from pdf_vault.models.document import PDF_MEDIA_TYPE

logger = get_service_logger("gcs_client")


class GCSBlobStore:
    """Google Cloud Storage implementation of the blob store."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str = "",
        project_id: Optional[str] = None,
        credentials_path: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ):
        self.logger = logger
        self._bucket_name = bucket_name
        self._prefix = f"{prefix.strip('/')}/" if prefix.strip("/") else ""

        if client is None:
            if credentials_path:
                os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = credentials_path
            try:
                client = storage.Client(project=project_id)
            except DefaultCredentialsError as e:
                self.logger.error("GCS authentication failed", error=str(e))
                raise BlobStoreError(f"GCS authentication failed: {e}") from e

        self._client = client
        self._bucket: Bucket = client.bucket(bucket_name)
        self.logger.info(
            "GCS blob store configured", bucket=bucket_name, prefix=self._prefix
        )

    @property
    def bucket(self) -> Bucket:
        return self._bucket

    def _object_name(self, key: str) -> str:
        if not key or "/" in key:
            raise BlobStoreError(f"Invalid blob key: {key!r}", key=key)
        return f"{self._prefix}{key}"

    def put(self, key: str, source: BlobSource) -> int:
        blob = self.bucket.blob(self._object_name(key))
        start = None
        try:
            if isinstance(source, (bytes, bytearray)):
                content = bytes(source)
            else:
                start = source.tell() if source.seekable() else None
                content = source.read()
            # Object creation only succeeds if no live generation exists
            blob.upload_from_string(
                content, content_type=PDF_MEDIA_TYPE, if_generation_match=0
            )
        except PreconditionFailed as e:
            # Leave the source readable for a retry under another key
            if start is not None:
                source.seek(start)
            raise BlobExistsError(f"Blob already exists: {key}", key=key) from e
        except (GoogleAPIError, OSError) as e:
            self.logger.error("Failed to upload blob to GCS", key=key, error=str(e))
            raise BlobStoreError(f"Failed to upload blob {key}: {e}", key=key) from e

        self.logger.debug("Uploaded blob to GCS", key=key, size=len(content))
        return len(content)

    def exists(self, key: str) -> bool:
        try:
            return self.bucket.blob(self._object_name(key)).exists()
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to check blob {key}: {e}", key=key) from e

    def open(self, key: str) -> BinaryIO:
        blob = self.bucket.blob(self._object_name(key))
        try:
            return io.BytesIO(blob.download_as_bytes())
        except NotFound as e:
            raise BlobNotFoundError(f"Blob not found: {key}", key=key) from e
        except GoogleAPIError as e:
            self.logger.error("Failed to download blob from GCS", key=key, error=str(e))
            raise BlobStoreError(f"Failed to download blob {key}: {e}", key=key) from e

    def delete(self, key: str) -> bool:
        blob = self.bucket.blob(self._object_name(key))
        try:
            blob.delete()
        except NotFound:
            self.logger.warning("Blob already absent on delete", key=key)
            return False
        except GoogleAPIError as e:
            self.logger.error("Failed to delete blob from GCS", key=key, error=str(e))
            raise BlobStoreError(f"Failed to delete blob {key}: {e}", key=key) from e
        self.logger.debug("Deleted blob from GCS", key=key)
        return True

    def list_keys(self) -> List[str]:
        try:
            # The iterator handles pagination internally
            names = [
                blob.name[len(self._prefix):]
                for blob in self._client.list_blobs(self.bucket, prefix=self._prefix or None)
            ]
        except GoogleAPIError as e:
            raise BlobStoreError(f"Failed to list blobs: {e}") from e
        return sorted(name for name in names if name and "/" not in name)

    def health_check(self) -> bool:
        """
        Check if the bucket is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self.bucket.reload()
            return True
        except Exception as e:
            self.logger.error("GCS health check failed", error=str(e))
            return False
