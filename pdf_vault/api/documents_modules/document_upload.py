"""
Document upload endpoint.

Accepts a single PDF as multipart field ``file`` and stores it through the
document service (blob first, record second).
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from pdf_vault.core.exceptions import InvalidInputError
from pdf_vault.models.schemas import DocumentResponse, error_responses
from pdf_vault.services.document import DocumentService
from .common import get_document_service, log_operation_start, log_operation_success

router = APIRouter()


@router.post(
    "/upload",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="📤 Upload Document",
    operation_id="uploadDocument",
    description="""Upload a PDF document.

**Form Fields:**
- **file**: The PDF file (`application/pdf` only)

**Example Request:**
```bash
curl -X POST "http://localhost:4000/documents/upload" \\
  -F "file=@report.pdf;type=application/pdf"
```

**Response Format:**
```json
{
  "id": 1,
  "filename": "report.pdf",
  "size": 48213,
  "created_at": "2024-05-01T09:30:00.123000+00:00"
}
```""",
    responses=error_responses(400, 500),
)
async def upload_document(
    file: Optional[UploadFile] = File(None, description="PDF file to upload"),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Upload a new PDF document."""
    if file is None:
        raise InvalidInputError("No file uploaded or invalid file type")

    log_operation_start(
        "Document upload", filename=file.filename, content_type=file.content_type
    )

    try:
        record = await document_service.ingest(
            source=file.file,
            filename=file.filename,
            media_type=file.content_type,
        )
    finally:
        await file.close()

    log_operation_success(
        "Document upload", document_id=record.id, size=record.size
    )
    return DocumentResponse.from_summary(record.summary())
