import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

PDF_MEDIA_TYPE = "application/pdf"

# Longest sanitized name embedded in a stored name
MAX_STORED_FILENAME_LENGTH = 200


def sanitize_filename(filename: str) -> str:
    """
    Reduce a user-supplied filename to a safe storage suffix.

    Keeps alphanumerics, dots, hyphens and underscores; everything else
    (path separators included) becomes an underscore.
    """
    # Drop any client-side directory component
    name = re.split(r"[\\/]", filename or "")[-1]
    name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    name = re.sub(r"[^a-zA-Z0-9._-]", "_", name).strip(".")

    if len(name) > MAX_STORED_FILENAME_LENGTH:
        stem, dot, ext = name.rpartition(".")
        if dot and 0 < len(ext) <= 10:
            name = f"{stem[: MAX_STORED_FILENAME_LENGTH - len(ext) - 1]}.{ext}"
        else:
            name = name[:MAX_STORED_FILENAME_LENGTH]

    return name or "document.pdf"


class DocumentRecord(BaseModel):
    """Metadata record for one stored PDF. Immutable once created."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int = Field(..., ge=1, description="Auto-assigned document identifier")
    original_name: str = Field(..., min_length=1, description="Filename as uploaded")
    stored_name: str = Field(..., min_length=1, description="Blob store key")
    size: int = Field(..., ge=0, description="Blob size in bytes")
    created_at: datetime = Field(..., description="Ingest time (UTC)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentRecord":
        return cls.model_validate(data)

    def summary(self) -> Dict[str, Any]:
        """The public view returned by upload and list."""
        return {
            "id": self.id,
            "filename": self.original_name,
            "size": self.size,
            "created_at": self.created_at,
        }


class DocumentDownload:
    """Everything the transport needs to send a stored document back."""

    def __init__(
        self,
        record: DocumentRecord,
        stream: BinaryIO,
        media_type: str = PDF_MEDIA_TYPE,
    ):
        self.record = record
        self.stream = stream
        self.media_type = media_type

    @property
    def filename(self) -> str:
        return self.record.original_name

    @property
    def size(self) -> int:
        return self.record.size

    def close(self) -> None:
        self.stream.close()

    def __repr__(self) -> str:
        return f"<DocumentDownload(id={self.record.id}, filename='{self.filename}')>"


class ConsistencyReport(BaseModel):
    """Result of cross-checking the metadata store against the blob store."""

    dangling_records: List[DocumentRecord] = Field(
        default_factory=list, description="Records whose blob is absent"
    )
    orphan_blobs: List[str] = Field(
        default_factory=list, description="Stored keys with no record"
    )
    records_checked: int = 0
    blobs_checked: int = 0

    @property
    def is_consistent(self) -> bool:
        return not self.dangling_records and not self.orphan_blobs
