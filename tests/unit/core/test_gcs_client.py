"""
Unit tests for the Google Cloud Storage blob store.

The storage client is mocked; no network access is made.
"""

import io
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from google.api_core.exceptions import Forbidden, NotFound, PreconditionFailed

from pdf_vault.core.blob_store import BlobExistsError, BlobNotFoundError, BlobStoreError
from pdf_vault.core.gcs_client import GCSBlobStore


@pytest.fixture
def mock_client():
    return Mock()


@pytest.fixture
def mock_blob(mock_client):
    return mock_client.bucket.return_value.blob.return_value


@pytest.fixture
def gcs_store(mock_client):
    return GCSBlobStore("test-bucket", prefix="/documents/", client=mock_client)


class TestGCSBlobStoreWrites:
    """Tests for put and delete."""

    @pytest.mark.unit
    def test_put_uses_create_only_precondition(self, gcs_store, mock_client, mock_blob):
        size = gcs_store.put("1-abcdef01-a.pdf", b"%PDF-1.4 data")

        assert size == len(b"%PDF-1.4 data")
        mock_client.bucket.return_value.blob.assert_called_with("documents/1-abcdef01-a.pdf")
        mock_blob.upload_from_string.assert_called_once_with(
            b"%PDF-1.4 data", content_type="application/pdf", if_generation_match=0
        )

    @pytest.mark.unit
    def test_put_existing_object(self, gcs_store, mock_blob):
        source = io.BytesIO(b"%PDF-1.4 data")
        mock_blob.upload_from_string.side_effect = PreconditionFailed("exists")

        with pytest.raises(BlobExistsError):
            gcs_store.put("1-abcdef01-a.pdf", source)

        # Source is rewound so the caller can retry under another key
        assert source.tell() == 0

    @pytest.mark.unit
    def test_put_api_error(self, gcs_store, mock_blob):
        mock_blob.upload_from_string.side_effect = Forbidden("denied")

        with pytest.raises(BlobStoreError) as exc_info:
            gcs_store.put("1-abcdef01-a.pdf", b"data")

        assert not isinstance(exc_info.value, BlobExistsError)

    @pytest.mark.unit
    def test_delete(self, gcs_store, mock_blob):
        assert gcs_store.delete("1-abcdef01-a.pdf") is True
        mock_blob.delete.assert_called_once()

    @pytest.mark.unit
    def test_delete_missing_returns_false(self, gcs_store, mock_blob):
        mock_blob.delete.side_effect = NotFound("gone")
        assert gcs_store.delete("1-abcdef01-a.pdf") is False

    @pytest.mark.unit
    def test_delete_api_error(self, gcs_store, mock_blob):
        mock_blob.delete.side_effect = Forbidden("denied")

        with pytest.raises(BlobStoreError):
            gcs_store.delete("1-abcdef01-a.pdf")

    @pytest.mark.unit
    def test_nested_key_rejected(self, gcs_store):
        with pytest.raises(BlobStoreError):
            gcs_store.put("nested/a.pdf", b"data")


class TestGCSBlobStoreReads:
    """Tests for exists, open and list_keys."""

    @pytest.mark.unit
    def test_exists(self, gcs_store, mock_blob):
        mock_blob.exists.return_value = False
        assert gcs_store.exists("1-abcdef01-a.pdf") is False

    @pytest.mark.unit
    def test_open(self, gcs_store, mock_blob):
        mock_blob.download_as_bytes.return_value = b"%PDF-1.4 data"

        with gcs_store.open("1-abcdef01-a.pdf") as f:
            assert f.read() == b"%PDF-1.4 data"

    @pytest.mark.unit
    def test_open_missing(self, gcs_store, mock_blob):
        mock_blob.download_as_bytes.side_effect = NotFound("gone")

        with pytest.raises(BlobNotFoundError):
            gcs_store.open("1-abcdef01-a.pdf")

    @pytest.mark.unit
    def test_list_keys_strips_prefix(self, gcs_store, mock_client):
        mock_client.list_blobs.return_value = [
            SimpleNamespace(name="documents/2-bbbbbbbb-b.pdf"),
            SimpleNamespace(name="documents/1-aaaaaaaa-a.pdf"),
            SimpleNamespace(name="documents/archive/old.pdf"),
        ]

        assert gcs_store.list_keys() == ["1-aaaaaaaa-a.pdf", "2-bbbbbbbb-b.pdf"]
        mock_client.list_blobs.assert_called_once_with(
            gcs_store.bucket, prefix="documents/"
        )

    @pytest.mark.unit
    def test_health_check(self, gcs_store, mock_client):
        assert gcs_store.health_check() is True

        mock_client.bucket.return_value.reload.side_effect = Forbidden("denied")
        assert gcs_store.health_check() is False
