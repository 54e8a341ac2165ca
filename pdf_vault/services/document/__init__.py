"""
Document services package.

Services:
- document_base_service: Shared logging and store-level exceptions
- document_validation_service: Upload admission checks
- document_storage_service: Blob store access and stored name generation
- document_crud_service: Metadata record persistence
- document_service: Orchestration facade (main interface)
"""

from .document_base_service import MetadataStoreError
from .document_crud_service import DocumentCrudService
from .document_service import DocumentService

__all__ = [
    "DocumentCrudService",
    "DocumentService",
    "MetadataStoreError",
]
