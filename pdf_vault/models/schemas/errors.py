"""Error response schemas for OpenAPI documentation."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standardized API error response body."""

    code: str = Field(
        ...,
        description="Error code for client-side handling",
        examples=["BLOB_MISSING"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["File missing on disk"],
    )
    error_id: Optional[str] = Field(
        None,
        description="Unique error ID for log correlation",
        examples=["a1b2c3d4"],
    )
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error context",
        examples=[{"document_id": 7}],
    )
    path: Optional[str] = Field(
        None,
        description="Request path that caused the error",
        examples=["/documents/7"],
    )


class APIErrorResponse(BaseModel):
    """Wrapper for error responses (matches actual API error format)."""

    error: ErrorResponse = Field(..., description="Error details")


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """Build a FastAPI ``responses`` mapping documenting the error envelope."""
    descriptions = {
        400: "Invalid upload",
        404: "Document or its file not found",
        422: "Request validation failed",
        500: "Storage or metadata failure",
        503: "Document store unavailable",
    }
    return {
        code: {"model": APIErrorResponse, "description": descriptions.get(code, "Error")}
        for code in status_codes
    }
