"""
Shared utilities and dependencies for document API endpoints.

This module provides common functionality used across different document router modules.
"""

from fastapi import Request

from pdf_vault.core.logging import get_api_logger
from pdf_vault.services.document import DocumentService

# Shared logger instance
logger = get_api_logger()


def get_document_service(request: Request) -> DocumentService:
    """Document service built during application startup."""
    return request.app.state.document_service


def log_operation_start(operation: str, **context) -> None:
    """Log the start of an operation consistently."""
    logger.info(f"{operation} started", **context)


def log_operation_success(operation: str, **context) -> None:
    """Log successful operation completion consistently."""
    logger.info(f"{operation} completed successfully", **context)
