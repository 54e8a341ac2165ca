"""Pydantic schemas for API responses.

- document.py: Document schemas
- errors.py: Error response schemas
"""

from pdf_vault.models.schemas.document import (
    DocumentDeleteResponse,
    DocumentResponse,
)
from pdf_vault.models.schemas.errors import (
    APIErrorResponse,
    ErrorResponse,
    error_responses,
)

__all__ = [
    "DocumentDeleteResponse",
    "DocumentResponse",
    "APIErrorResponse",
    "ErrorResponse",
    "error_responses",
]
