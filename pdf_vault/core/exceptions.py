import uuid
import traceback
from typing import Any, Dict, Optional
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdf_vault.core.config import settings
from pdf_vault.core.logging import get_logger

logger = get_logger(__name__)


class DocumentStoreError(Exception):
    """Base exception for the PDF Vault document store."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(DocumentStoreError):
    """Rejected upload: wrong media type, missing file or empty filename."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "INVALID_INPUT", details)


class DocumentNotFoundError(DocumentStoreError):
    """No metadata record exists for the requested id."""

    def __init__(
        self, message: str = "Document not found", document_id: Optional[int] = None
    ):
        details = {"document_id": document_id} if document_id is not None else None
        super().__init__(message, "NOT_FOUND", details)


class BlobMissingError(DocumentStoreError):
    """A metadata record exists but its blob does not."""

    def __init__(
        self,
        message: str = "File missing on disk",
        document_id: Optional[int] = None,
        stored_name: Optional[str] = None,
    ):
        details = {}
        if document_id is not None:
            details["document_id"] = document_id
        if stored_name:
            details["stored_name"] = stored_name
        super().__init__(message, "BLOB_MISSING", details)


class StorageWriteError(DocumentStoreError):
    """The blob store failed to persist an upload."""

    def __init__(
        self,
        message: str = "Failed to store file",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "STORAGE_WRITE_FAILED", details)


class StorageReadError(DocumentStoreError):
    """The blob store failed to open an existing blob."""

    def __init__(
        self,
        message: str = "Failed to read file",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "STORAGE_READ_FAILED", details)


class StorageDeleteError(DocumentStoreError):
    """The blob store failed to remove a blob for a reason other than absence."""

    def __init__(
        self,
        message: str = "Error deleting file from disk",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "STORAGE_DELETE_FAILED", details)


class MetadataWriteError(DocumentStoreError):
    """Recording a new document in the metadata store failed."""

    def __init__(
        self,
        message: str = "Failed to save document metadata",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "METADATA_WRITE_FAILED", details)


class MetadataError(DocumentStoreError):
    """A metadata lookup or deletion failed."""

    def __init__(
        self,
        message: str = "Metadata store error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "METADATA_ERROR", details)


class StoreUnavailableError(DocumentStoreError):
    """The metadata store could not be queried at all."""

    def __init__(
        self,
        message: str = "Document store unavailable",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "STORE_UNAVAILABLE", details)


STATUS_CODE_MAP = {
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "BLOB_MISSING": status.HTTP_404_NOT_FOUND,
    "STORAGE_WRITE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_READ_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_DELETE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "METADATA_WRITE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "METADATA_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "INTERNAL_ERROR",
    details: Optional[Dict[str, Any]] = None,
    error_id: Optional[str] = None,
    request_path: Optional[str] = None,
) -> JSONResponse:
    """Create standardized error response."""

    error_id = error_id or str(uuid.uuid4())[:8]

    error_response = {
        "error": {
            "code": error_code,
            "message": message,
            "error_id": error_id,
        }
    }

    if details:
        error_response["error"]["details"] = details

    if request_path:
        error_response["error"]["path"] = request_path

    return JSONResponse(status_code=status_code, content=error_response)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code="HTTP_ERROR",
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors."""
    error_id = str(uuid.uuid4())[:8]

    logger.warning(
        "Validation exception occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    formatted_errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return create_error_response(
        status_code=422,
        message="Request validation failed",
        error_code="VALIDATION_ERROR",
        details={"validation_errors": formatted_errors},
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def document_store_exception_handler(
    request: Request, exc: DocumentStoreError
) -> JSONResponse:
    """Handle document store domain errors."""
    error_id = str(uuid.uuid4())[:8]

    status_code = STATUS_CODE_MAP.get(
        exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Document store error",
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
    )

    return create_error_response(
        status_code=status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        error_id=error_id,
        exc_info=True,
    )

    if settings.is_development:
        details = {
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc().split("\n"),
        }
        message = str(exc)
    else:
        details = None
        message = "An unexpected error occurred"

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=message,
        error_code="INTERNAL_ERROR",
        details=details,
        error_id=error_id,
        request_path=str(request.url.path),
    )


def setup_exception_handlers(app):
    """Setup all exception handlers for the FastAPI app."""

    app.add_exception_handler(DocumentStoreError, document_store_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all
    app.add_exception_handler(Exception, general_exception_handler)
