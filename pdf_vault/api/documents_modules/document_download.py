"""
Document download endpoint.

Streams the stored PDF back as an attachment named after the original
upload. A record whose file is missing answers 404 ``BLOB_MISSING``; the
record is left in place for an operator to inspect.
"""

import re
from typing import BinaryIO, Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from pdf_vault.core.config import settings
from pdf_vault.models.document import PDF_MEDIA_TYPE
from pdf_vault.models.schemas import error_responses
from pdf_vault.services.document import DocumentService
from .common import get_document_service, log_operation_success, logger

router = APIRouter()


def content_disposition(filename: str) -> str:
    """
    Build an attachment Content-Disposition header (RFC 6266).

    Non-ASCII names get a UTF-8 ``filename*`` parameter next to an ASCII
    fallback ``filename``.
    """
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename) or "document.pdf"
    encoded = quote(filename, safe="")
    if encoded == filename:
        return f'attachment; filename="{fallback}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


def iter_stream(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    """Yield the stream in chunks and close it when done or abandoned."""
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk
    except OSError as e:
        # Headers are already sent; the client sees a truncated body
        logger.error("Download stream failed mid-transfer", error=str(e))
        raise
    finally:
        stream.close()


@router.get(
    "/{document_id}",
    response_class=StreamingResponse,
    summary="⬇️ Download Document",
    operation_id="downloadDocument",
    description="Download the stored PDF as an attachment with its original filename.",
    responses={
        200: {
            "content": {PDF_MEDIA_TYPE: {}},
            "description": "The PDF file",
        },
        **error_responses(404, 500),
    },
)
async def download_document(
    document_id: int,
    document_service: DocumentService = Depends(get_document_service),
) -> StreamingResponse:
    download = await document_service.fetch(document_id)

    log_operation_success(
        "Document download", document_id=document_id, size=download.size
    )
    return StreamingResponse(
        iter_stream(download.stream, settings.DOWNLOAD_CHUNK_SIZE),
        media_type=download.media_type,
        headers={"Content-Disposition": content_disposition(download.filename)},
        # Releases the handle even if the body is never iterated
        background=BackgroundTask(download.close),
    )
