"""Document schemas for API responses."""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class DocumentResponse(BaseModel):
    """Public view of a stored document, as returned by upload and list."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Document identifier", examples=[1])
    filename: str = Field(
        ..., description="Original filename", examples=["lab-results-2024.pdf"]
    )
    size: int = Field(..., ge=0, description="Size in bytes", examples=[48213])
    created_at: datetime = Field(
        ...,
        description="Upload time (UTC)",
        examples=["2024-05-01T09:30:00.123000+00:00"],
    )

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return value.isoformat()

    @classmethod
    def from_summary(cls, summary: Dict[str, Any]) -> "DocumentResponse":
        return cls.model_validate(summary)


class DocumentDeleteResponse(BaseModel):
    """Response body for a successful delete."""

    message: str = Field(
        default="Document deleted successfully",
        examples=["Document deleted successfully"],
    )
