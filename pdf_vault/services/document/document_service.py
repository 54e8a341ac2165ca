"""
Document Service - Orchestrates the blob store and the metadata store.

Every document has exactly one blob and one record, or is detectably absent
from both. The write order is blob first, record second; the removal order
is blob first, record second. Failures in between are undone where possible
and otherwise reported, never hidden:

- Ingest: put blob -> insert record (record failure deletes the blob)
- Fetch: record lookup -> blob existence -> open
- Remove: record lookup -> delete blob -> delete record
- Audit: cross-check both stores and report dangling records and orphan blobs
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pdf_vault.core.blob_store import (
    BlobExistsError,
    BlobNotFoundError,
    BlobSource,
    BlobStore,
    BlobStoreError,
)
from pdf_vault.core.exceptions import (
    BlobMissingError,
    DocumentNotFoundError,
    MetadataError,
    MetadataWriteError,
    StorageDeleteError,
    StorageReadError,
    StorageWriteError,
    StoreUnavailableError,
)
from pdf_vault.models.document import (
    ConsistencyReport,
    DocumentDownload,
    DocumentRecord,
    PDF_MEDIA_TYPE,
)

from .document_base_service import DocumentBaseService, MetadataStoreError
from .document_crud_service import DocumentCrudService
from .document_storage_service import DocumentStorageService
from .document_validation_service import DocumentValidationService

# Stored name collisions need the same millisecond and the same random suffix
MAX_STORED_NAME_ATTEMPTS = 3

# Blobs younger than this may belong to an ingest that has not recorded yet
DEFAULT_ORPHAN_GRACE = timedelta(minutes=5)


class DocumentService(DocumentBaseService):
    """
    Main document service implementing the facade pattern.

    Delegates to specialized services:
    - DocumentValidationService: upload admission
    - DocumentStorageService: blob store access off the event loop
    - DocumentCrudService: metadata records
    """

    def __init__(
        self,
        blob_store: BlobStore,
        metadata_store: DocumentCrudService,
        validation_service: Optional[DocumentValidationService] = None,
    ):
        super().__init__()
        self.storage_service = DocumentStorageService(blob_store)
        self.crud_service = metadata_store
        self.validation_service = validation_service or DocumentValidationService()

    # ========================================
    # INGEST
    # ========================================

    async def ingest(
        self,
        source: BlobSource,
        filename: Optional[str],
        media_type: Optional[str],
    ) -> DocumentRecord:
        """
        Store a new PDF and record it.

        Args:
            source: File content as bytes or a binary file object
            filename: Filename claimed by the client
            media_type: Declared media type

        Returns:
            The new record

        Raises:
            InvalidInputError: Rejected before any write
            StorageWriteError: Blob write failed, nothing recorded
            MetadataWriteError: Record insert failed, blob removed (best effort)
        """
        original_name = self.validation_service.validate_upload(filename, media_type)

        stored_name, size = await self._put_blob(original_name, source)

        self.logger.info(
            "Phase 1: Blob written",
            stored_name=stored_name,
            size=size,
        )

        created_at = datetime.now(timezone.utc)
        try:
            record = await self.crud_service.insert(
                original_name=original_name,
                stored_name=stored_name,
                size=size,
                created_at=created_at,
            )
        except MetadataStoreError as e:
            self.logger.error(
                "Phase 2 failed: record insert failed, removing blob",
                stored_name=stored_name,
                error=str(e),
            )
            await self._discard_blob(stored_name)
            raise MetadataWriteError(details={"filename": original_name}) from e

        self.logger.info(
            "Phase 2: Document recorded",
            document_id=record.id,
            stored_name=stored_name,
            size=size,
        )
        return record

    async def _put_blob(self, original_name: str, source: BlobSource) -> tuple[str, int]:
        """Write the blob under a fresh stored name; retry only on name collision."""
        for attempt in range(1, MAX_STORED_NAME_ATTEMPTS + 1):
            stored_name = self.storage_service.generate_stored_name(original_name)
            try:
                size = await self.storage_service.put(stored_name, source)
                return stored_name, size
            except BlobExistsError:
                self.logger.warning(
                    "Stored name collision, regenerating",
                    stored_name=stored_name,
                    attempt=attempt,
                )
            except BlobStoreError as e:
                self.logger.error(
                    "Phase 1 failed: blob write failed",
                    stored_name=stored_name,
                    error=str(e),
                )
                raise StorageWriteError(details={"filename": original_name}) from e

        raise StorageWriteError(
            "Failed to store file: could not allocate a unique stored name",
            details={"filename": original_name},
        )

    async def _discard_blob(self, stored_name: str) -> None:
        """Best-effort removal of a blob whose record was never written."""
        try:
            await self.storage_service.delete(stored_name)
        except BlobStoreError as cleanup_error:
            # The orphan is left for the audit to find
            self.logger.warning(
                "Cleanup failed: orphan blob left behind",
                stored_name=stored_name,
                error=str(cleanup_error),
            )

    # ========================================
    # LIST
    # ========================================

    async def list_documents(self) -> List[DocumentRecord]:
        """All records ordered by id ascending. Blob presence is not checked."""
        try:
            return await self.crud_service.list()
        except MetadataStoreError as e:
            raise StoreUnavailableError() from e

    # ========================================
    # FETCH
    # ========================================

    async def _get_record(self, document_id: int) -> DocumentRecord:
        try:
            record = await self.crud_service.get(document_id)
        except MetadataStoreError as e:
            raise MetadataError(details={"document_id": document_id}) from e
        if record is None:
            raise DocumentNotFoundError(document_id=document_id)
        return record

    async def fetch(self, document_id: int) -> DocumentDownload:
        """
        Open a stored document for download.

        The record is never repaired here: a missing blob is reported as
        BlobMissingError and the record stays in place.

        Raises:
            DocumentNotFoundError: No record
            BlobMissingError: Record present, blob absent
            StorageReadError: Blob present but unreadable
            MetadataError: Record lookup failed
        """
        record = await self._get_record(document_id)

        try:
            present = await self.storage_service.exists(record.stored_name)
        except BlobStoreError as e:
            raise StorageReadError(details={"document_id": document_id}) from e

        if not present:
            self.logger.warning(
                "Blob missing for existing record",
                document_id=document_id,
                stored_name=record.stored_name,
            )
            raise BlobMissingError(
                document_id=document_id, stored_name=record.stored_name
            )

        try:
            stream = await self.storage_service.open(record.stored_name)
        except BlobNotFoundError as e:
            # Removed between the existence check and the open
            self.logger.warning(
                "Blob vanished before open",
                document_id=document_id,
                stored_name=record.stored_name,
            )
            raise BlobMissingError(
                document_id=document_id, stored_name=record.stored_name
            ) from e
        except BlobStoreError as e:
            self.logger.error(
                "Failed to open blob",
                document_id=document_id,
                stored_name=record.stored_name,
                error=str(e),
            )
            raise StorageReadError(details={"document_id": document_id}) from e

        return DocumentDownload(record=record, stream=stream, media_type=PDF_MEDIA_TYPE)

    # ========================================
    # REMOVE
    # ========================================

    async def remove(self, document_id: int) -> None:
        """
        Delete a document's blob and then its record.

        Raises:
            DocumentNotFoundError: No record
            StorageDeleteError: Blob deletion failed, record untouched
            MetadataError: Blob gone but the record could not be deleted
        """
        record = await self._get_record(document_id)

        try:
            blob_deleted = await self.storage_service.delete(record.stored_name)
        except BlobStoreError as e:
            raise StorageDeleteError(details={"document_id": document_id}) from e

        self.logger.info(
            "Phase 1: Blob removed",
            document_id=document_id,
            stored_name=record.stored_name,
            already_absent=not blob_deleted,
        )

        try:
            row_deleted = await self.crud_service.delete(document_id)
        except MetadataStoreError as e:
            self.logger.error(
                "Phase 2 failed: record left without blob",
                document_id=document_id,
                stored_name=record.stored_name,
                error=str(e),
            )
            raise MetadataError(
                "Failed to delete document record",
                details={"document_id": document_id},
            ) from e

        if not row_deleted:
            self.logger.info(
                "Record already removed by a concurrent request",
                document_id=document_id,
            )
        else:
            self.logger.info("Phase 2: Document record removed", document_id=document_id)

    # ========================================
    # CONSISTENCY AUDIT
    # ========================================

    async def audit(
        self,
        orphan_grace: timedelta = DEFAULT_ORPHAN_GRACE,
        now: Optional[datetime] = None,
    ) -> ConsistencyReport:
        """
        Report dangling records and orphan blobs. Changes nothing.

        Blobs are listed before records so an ingest finishing mid-audit
        cannot produce a false dangling record. Candidate dangling records
        are re-checked individually. Blobs younger than ``orphan_grace`` are
        not reported as orphans.

        Raises:
            StoreUnavailableError: Either store could not be listed
        """
        now = now or datetime.now(timezone.utc)

        try:
            keys = await self.storage_service.list_keys()
        except BlobStoreError as e:
            raise StoreUnavailableError("Blob store unavailable") from e

        records = await self.list_documents()
        listed = set(keys)

        dangling: List[DocumentRecord] = []
        for record in records:
            if record.stored_name in listed:
                continue
            try:
                present = await self.storage_service.exists(record.stored_name)
            except BlobStoreError as e:
                raise StoreUnavailableError("Blob store unavailable") from e
            if not present:
                dangling.append(record)

        referenced = {record.stored_name for record in records}
        orphans = [
            key
            for key in keys
            if key not in referenced and not self._is_recent(key, now, orphan_grace)
        ]

        report = ConsistencyReport(
            dangling_records=dangling,
            orphan_blobs=orphans,
            records_checked=len(records),
            blobs_checked=len(keys),
        )

        log = self.logger.info if report.is_consistent else self.logger.warning
        log(
            "Consistency audit finished",
            records_checked=report.records_checked,
            blobs_checked=report.blobs_checked,
            dangling_records=[r.id for r in dangling],
            orphan_blobs=orphans,
        )
        return report

    def _is_recent(self, key: str, now: datetime, grace: timedelta) -> bool:
        created = self.storage_service.stored_name_timestamp(key)
        return created is not None and now - created < grace

    async def purge_dangling_record(self, document_id: int) -> bool:
        """
        Delete a record whose blob is absent.

        Returns:
            True if the record was deleted, False if its blob is present
            (the record is not dangling and is kept)
        """
        record = await self._get_record(document_id)

        try:
            present = await self.storage_service.exists(record.stored_name)
        except BlobStoreError as e:
            raise StorageReadError(details={"document_id": document_id}) from e

        if present:
            self.logger.info(
                "Record has its blob, not purging", document_id=document_id
            )
            return False

        try:
            deleted = await self.crud_service.delete(document_id)
        except MetadataStoreError as e:
            raise MetadataError(details={"document_id": document_id}) from e

        self.logger.warning(
            "Purged dangling record",
            document_id=document_id,
            stored_name=record.stored_name,
        )
        return deleted

    async def purge_orphan_blob(
        self,
        stored_name: str,
        orphan_grace: timedelta = DEFAULT_ORPHAN_GRACE,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Delete a blob that no record references.

        Returns:
            True if the blob was deleted; False if a record references it,
            it is still within the grace period, or it was already gone
        """
        now = now or datetime.now(timezone.utc)

        if self._is_recent(stored_name, now, orphan_grace):
            self.logger.info("Blob too recent to purge", stored_name=stored_name)
            return False

        try:
            record = await self.crud_service.get_by_stored_name(stored_name)
        except MetadataStoreError as e:
            raise MetadataError(details={"stored_name": stored_name}) from e

        if record is not None:
            self.logger.info(
                "Blob is referenced, not purging",
                stored_name=stored_name,
                document_id=record.id,
            )
            return False

        try:
            deleted = await self.storage_service.delete(stored_name)
        except BlobStoreError as e:
            raise StorageDeleteError(details={"stored_name": stored_name}) from e

        if deleted:
            self.logger.warning("Purged orphan blob", stored_name=stored_name)
        return deleted

    # ========================================
    # HEALTH
    # ========================================

    async def blob_store_healthy(self) -> bool:
        try:
            return await self.storage_service.health_check()
        except Exception as e:
            self.logger.error("Blob store health check failed", error=str(e))
            return False
