"""
Document management endpoints.

- List all documents in id order
- Delete a document (file first, then its record)
"""

from typing import List

from fastapi import APIRouter, Depends

from pdf_vault.models.schemas import (
    DocumentDeleteResponse,
    DocumentResponse,
    error_responses,
)
from pdf_vault.services.document import DocumentService
from .common import get_document_service, log_operation_start, log_operation_success

router = APIRouter()


@router.get(
    "",
    response_model=List[DocumentResponse],
    summary="📋 List Documents",
    operation_id="listDocuments",
    description="List every stored document, oldest first. File presence is not checked.",
    responses=error_responses(503),
)
async def list_documents(
    document_service: DocumentService = Depends(get_document_service),
) -> List[DocumentResponse]:
    records = await document_service.list_documents()
    return [DocumentResponse.from_summary(record.summary()) for record in records]


@router.delete(
    "/{document_id}",
    response_model=DocumentDeleteResponse,
    summary="🗑️ Delete Document",
    operation_id="deleteDocument",
    description="""Delete a document and its file.

The file is removed first; a file that is already gone counts as removed.
If the file cannot be removed the record is kept and the request fails.""",
    responses=error_responses(404, 500),
)
async def delete_document(
    document_id: int,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentDeleteResponse:
    log_operation_start("Document deletion", document_id=document_id)
    await document_service.remove(document_id)
    log_operation_success("Document deletion", document_id=document_id)
    return DocumentDeleteResponse()
