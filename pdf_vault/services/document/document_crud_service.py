"""
Document CRUD Service - Metadata store for document records.

Records are inserted once and deleted once; there is no update. Every
database failure is reported as MetadataStoreError.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from pdf_vault.core.db_client import DatabaseManager
from pdf_vault.models.db import DocumentModel
from pdf_vault.models.document import DocumentRecord
from .document_base_service import DocumentBaseService, MetadataStoreError

# Largest value a 64-bit signed INTEGER column can hold
MAX_DOCUMENT_ID = 2**63 - 1


def is_valid_document_id(document_id: int) -> bool:
    return 1 <= document_id <= MAX_DOCUMENT_ID


class DocumentCrudService(DocumentBaseService):
    """Service for document record persistence."""

    def __init__(self, db: DatabaseManager):
        super().__init__()
        self.db = db

    def _model_to_record(self, model: DocumentModel) -> DocumentRecord:
        """Convert SQLAlchemy model to Pydantic model."""
        return DocumentRecord.from_dict(model.to_dict())

    async def insert(
        self,
        original_name: str,
        stored_name: str,
        size: int,
        created_at: datetime,
    ) -> DocumentRecord:
        """
        Insert a new record and return it with its assigned id.

        Raises:
            MetadataStoreError: If the row could not be committed
        """
        try:
            async with self.db.session() as session:
                doc_model = DocumentModel(
                    original_name=original_name,
                    stored_name=stored_name,
                    size=size,
                    created_at=created_at,
                )
                session.add(doc_model)
                await session.flush()
                record = self._model_to_record(doc_model)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to insert document record",
                stored_name=stored_name,
                error=str(e),
            )
            raise MetadataStoreError(f"Failed to insert document record: {e}") from e

        return record

    async def list(self) -> List[DocumentRecord]:
        """All records ordered by id ascending."""
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(DocumentModel).order_by(DocumentModel.id.asc())
                )
                return [self._model_to_record(m) for m in result.scalars().all()]
        except SQLAlchemyError as e:
            self.logger.error("Failed to list document records", error=str(e))
            raise MetadataStoreError(f"Failed to list document records: {e}") from e

    async def get(self, document_id: int) -> Optional[DocumentRecord]:
        if not is_valid_document_id(document_id):
            return None
        try:
            async with self.db.session() as session:
                model = await session.get(DocumentModel, document_id)
                return self._model_to_record(model) if model else None
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to get document record", document_id=document_id, error=str(e)
            )
            raise MetadataStoreError(f"Failed to get document record: {e}") from e

    async def get_by_stored_name(self, stored_name: str) -> Optional[DocumentRecord]:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(DocumentModel).where(DocumentModel.stored_name == stored_name)
                )
                model = result.scalar_one_or_none()
                return self._model_to_record(model) if model else None
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to look up stored name", stored_name=stored_name, error=str(e)
            )
            raise MetadataStoreError(f"Failed to look up stored name: {e}") from e

    async def delete(self, document_id: int) -> bool:
        """
        Delete a record.

        Returns:
            True if a row was deleted, False if none existed
        """
        if not is_valid_document_id(document_id):
            return False

        try:
            async with self.db.session() as session:
                result = await session.execute(
                    delete(DocumentModel).where(DocumentModel.id == document_id)
                )
                deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to delete document record",
                document_id=document_id,
                error=str(e),
            )
            raise MetadataStoreError(f"Failed to delete document record: {e}") from e

        return deleted
