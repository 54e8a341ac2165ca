"""
Document Validation Service - Upload admission checks.

Rejects an upload before anything is written to either store:
- Missing file or blank filename
- Media type other than application/pdf
"""

from typing import Optional

from pdf_vault.core.exceptions import InvalidInputError
from pdf_vault.models.document import PDF_MEDIA_TYPE
from .document_base_service import DocumentBaseService

MAX_ORIGINAL_NAME_LENGTH = 1024


class DocumentValidationService(DocumentBaseService):
    """Service for validating uploads."""

    def normalize_media_type(self, media_type: Optional[str]) -> str:
        """Lower-case the media type and drop any parameters."""
        if not media_type:
            return ""
        return media_type.split(";", 1)[0].strip().lower()

    def validate_upload(
        self, filename: Optional[str], media_type: Optional[str]
    ) -> str:
        """
        Validate a claimed filename and declared media type.

        Args:
            filename: Filename as supplied by the client
            media_type: Declared content type of the upload

        Returns:
            The filename to record as the document's original name

        Raises:
            InvalidInputError: If the upload must be rejected
        """
        if filename is None or not filename.strip():
            self.logger.warning("Upload rejected: missing filename")
            raise InvalidInputError("No file uploaded or invalid file type")

        if len(filename) > MAX_ORIGINAL_NAME_LENGTH:
            raise InvalidInputError(
                f"Filename must be at most {MAX_ORIGINAL_NAME_LENGTH} characters",
                details={"length": len(filename)},
            )

        normalized = self.normalize_media_type(media_type)
        if normalized != PDF_MEDIA_TYPE:
            self.logger.warning(
                "Upload rejected: unsupported media type",
                filename=filename,
                media_type=media_type,
            )
            raise InvalidInputError(
                "Only PDF files are allowed",
                details={"media_type": media_type or None},
            )

        return filename
