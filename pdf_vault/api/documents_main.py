"""
Document API Router

Aggregates all document endpoints under ``/documents``:

- document_upload.py: Document upload
- document_management.py: List and delete
- document_download.py: File download
- common.py: Shared utilities and dependencies
"""

from fastapi import APIRouter

from pdf_vault.api.documents_modules.document_upload import router as upload_router
from pdf_vault.api.documents_modules.document_management import router as management_router
from pdf_vault.api.documents_modules.document_download import router as download_router

DOCUMENTS_PREFIX = "/documents"

router = APIRouter()

# Order matters: /upload must be registered before /{document_id}
router.include_router(
    upload_router,
    prefix=DOCUMENTS_PREFIX,
    tags=["Document Upload"],
)

router.include_router(
    management_router,
    prefix=DOCUMENTS_PREFIX,
    tags=["Document Management"],
)

router.include_router(
    download_router,
    prefix=DOCUMENTS_PREFIX,
    tags=["Document Download"],
)
