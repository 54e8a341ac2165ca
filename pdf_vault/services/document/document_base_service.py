"""
Document Base Service - Common utilities and shared functionality.

This service provides the foundation for all document services with:
- Store-level exception classes
- Shared logging
"""

from pdf_vault.core.logging import get_service_logger


class MetadataStoreError(Exception):
    """Metadata store (database) operation failed."""

    pass


class DocumentBaseService:
    """Base service with common functionality shared across all document services."""

    def __init__(self):
        self.logger = get_service_logger("document")
