"""
Document Storage Service - Blob store access and stored name generation.

This service handles all storage-related operations:
- Collision-resistant stored name generation
- Running the synchronous blob store off the event loop
"""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import BinaryIO, List, Optional

from pdf_vault.core.blob_store import BlobSource, BlobStore
from pdf_vault.models.document import sanitize_filename
from .document_base_service import DocumentBaseService


class DocumentStorageService(DocumentBaseService):
    """Service for blob store operations and stored name management."""

    def __init__(self, blob_store: BlobStore):
        super().__init__()
        self.blob_store = blob_store

    @staticmethod
    def generate_stored_name(original_name: str) -> str:
        """
        Build a fresh stored name for an upload.

        Format: ``<unix ms>-<8 hex chars>-<sanitized filename>``. Never derived
        from the record id, so names are never reused after a delete.
        """
        timestamp_ms = time.time_ns() // 1_000_000
        suffix = uuid.uuid4().hex[:8]
        return f"{timestamp_ms}-{suffix}-{sanitize_filename(original_name)}"

    @staticmethod
    def stored_name_timestamp(stored_name: str) -> Optional[datetime]:
        """Creation time encoded in a stored name, or None if it has none."""
        prefix = stored_name.split("-", 1)[0]
        if not prefix.isdigit():
            return None
        try:
            return datetime.fromtimestamp(int(prefix) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    async def put(self, key: str, source: BlobSource) -> int:
        return await asyncio.to_thread(self.blob_store.put, key, source)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self.blob_store.exists, key)

    async def open(self, key: str) -> BinaryIO:
        return await asyncio.to_thread(self.blob_store.open, key)

    async def delete(self, key: str) -> bool:
        return await asyncio.to_thread(self.blob_store.delete, key)

    async def list_keys(self) -> List[str]:
        return await asyncio.to_thread(self.blob_store.list_keys)

    async def health_check(self) -> bool:
        return await asyncio.to_thread(self.blob_store.health_check)
