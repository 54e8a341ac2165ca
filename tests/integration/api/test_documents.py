"""
Integration tests for the document endpoints.

Tests upload, list, download and delete through the HTTP API against a
temporary blob store and SQLite database.
"""

import io
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from pdf_vault.api.documents_modules.document_download import (
    content_disposition,
    download_document,
)
from pdf_vault.models.document import DocumentDownload, DocumentRecord


async def upload(async_client, content: bytes, filename: str = "report.pdf",
                 media_type: str = "application/pdf"):
    return await async_client.post(
        "/documents/upload",
        files={"file": (filename, content, media_type)},
    )


class TestUploadEndpoint:
    """Tests for POST /documents/upload."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_upload_pdf(self, async_client, upload_dir, sample_pdf_content):
        response = await upload(async_client, sample_pdf_content)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["filename"] == "report.pdf"
        assert data["size"] == len(sample_pdf_content)
        assert "created_at" in data
        assert len(list(upload_dir.iterdir())) == 1

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_upload_non_pdf_rejected(self, async_client, upload_dir):
        response = await upload(async_client, b"hello", "notes.txt", "text/plain")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_INPUT"
        assert error["message"] == "Only PDF files are allowed"
        assert list(upload_dir.iterdir()) == []

        listing = await async_client.get("/documents")
        assert listing.json() == []

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_upload_without_file(self, async_client):
        response = await async_client.post("/documents/upload", data={"note": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_upload_same_name_twice(self, async_client, sample_pdf_content):
        first = await upload(async_client, sample_pdf_content)
        second = await upload(async_client, sample_pdf_content)

        assert first.json()["id"] != second.json()["id"]

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_upload_keeps_original_filename(
        self, async_client, pdf_filename, sample_pdf_content
    ):
        response = await upload(async_client, sample_pdf_content, pdf_filename)

        assert response.status_code == 201
        assert response.json()["filename"] == pdf_filename

        listing = await async_client.get("/documents")
        assert [d["filename"] for d in listing.json()] == [pdf_filename]


class TestListEndpoint:
    """Tests for GET /documents."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_list_empty(self, async_client):
        response = await async_client.get("/documents")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_list_in_upload_order(self, async_client, sample_pdf_content):
        for name in ("b.pdf", "a.pdf"):
            await upload(async_client, sample_pdf_content, name)

        response = await async_client.get("/documents")

        data = response.json()
        assert [d["filename"] for d in data] == ["b.pdf", "a.pdf"]
        assert [d["id"] for d in data] == [1, 2]
        assert set(data[0]) == {"id", "filename", "size", "created_at"}


class TestDownloadEndpoint:
    """Tests for GET /documents/{id}."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_download(self, async_client, sample_pdf_content):
        document_id = (await upload(async_client, sample_pdf_content)).json()["id"]

        response = await async_client.get(f"/documents/{document_id}")

        assert response.status_code == 200
        assert response.content == sample_pdf_content
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="report.pdf"'
        )

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_download_non_ascii_name(self, async_client, sample_pdf_content):
        document_id = (
            await upload(async_client, sample_pdf_content, "résumé.pdf")
        ).json()["id"]

        response = await async_client.get(f"/documents/{document_id}")

        assert response.status_code == 200
        assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in (
            response.headers["content-disposition"]
        )

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_download_unknown_id(self, async_client):
        response = await async_client.get("/documents/999")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == "Document not found"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_download_missing_file(self, async_client, upload_dir, sample_pdf_content):
        document_id = (await upload(async_client, sample_pdf_content)).json()["id"]
        for path in upload_dir.iterdir():
            path.unlink()

        response = await async_client.get(f"/documents/{document_id}")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "BLOB_MISSING"
        assert error["message"] == "File missing on disk"

        # The record is still listed
        listing = await async_client.get("/documents")
        assert [d["id"] for d in listing.json()] == [document_id]

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_non_integer_id(self, async_client):
        response = await async_client.get("/documents/abc")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.api
    @pytest.mark.asyncio
    @pytest.mark.parametrize("document_id", [0, 2**63, 2**64])
    async def test_download_out_of_range_id(self, async_client, document_id):
        response = await async_client.get(f"/documents/{document_id}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_download_releases_stream_without_body(self):
        stream = io.BytesIO(b"%PDF-1.4")
        record = DocumentRecord(
            id=1,
            original_name="a.pdf",
            stored_name="1-aaaaaaaa-a.pdf",
            size=8,
            created_at=datetime.now(timezone.utc),
        )
        service = Mock()
        service.fetch = AsyncMock(return_value=DocumentDownload(record, stream))

        response = await download_document(1, document_service=service)
        # Body never iterated, as when the client disconnects first
        await response.background()

        assert stream.closed


class TestDeleteEndpoint:
    """Tests for DELETE /documents/{id}."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_delete(self, async_client, upload_dir, sample_pdf_content):
        document_id = (await upload(async_client, sample_pdf_content)).json()["id"]

        response = await async_client.delete(f"/documents/{document_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Document deleted successfully"}
        assert list(upload_dir.iterdir()) == []
        assert (await async_client.get(f"/documents/{document_id}")).status_code == 404

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, async_client):
        response = await async_client.delete("/documents/999")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.api
    @pytest.mark.asyncio
    @pytest.mark.parametrize("document_id", [0, 2**63, 2**64])
    async def test_delete_out_of_range_id(self, async_client, document_id):
        response = await async_client.delete(f"/documents/{document_id}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_delete_with_missing_file(self, async_client, upload_dir, sample_pdf_content):
        document_id = (await upload(async_client, sample_pdf_content)).json()["id"]
        for path in upload_dir.iterdir():
            path.unlink()

        response = await async_client.delete(f"/documents/{document_id}")

        assert response.status_code == 200
        assert (await async_client.get("/documents")).json() == []


class TestContentDisposition:
    """Tests for the attachment header builder."""

    @pytest.mark.unit
    def test_ascii_name(self):
        assert content_disposition("a.pdf") == 'attachment; filename="a.pdf"'

    @pytest.mark.unit
    def test_quotes_replaced_in_fallback(self):
        header = content_disposition('say "hi".pdf')

        assert header.startswith('attachment; filename="say _hi_.pdf"')
        assert "filename*=UTF-8''say%20%22hi%22.pdf" in header

    @pytest.mark.unit
    def test_non_ascii_name(self):
        assert content_disposition("日本.pdf") == (
            "attachment; filename=\"__.pdf\"; filename*=UTF-8''%E6%97%A5%E6%9C%AC.pdf"
        )


class TestMiddleware:
    """Tests for response headers added by middleware."""

    @pytest.mark.api
    @pytest.mark.asyncio
    async def test_process_time_header(self, async_client):
        response = await async_client.get("/documents")
        assert "x-process-time" in response.headers
