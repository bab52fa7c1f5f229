"""
Generic response schemas untuk PIN Gate API.
Menangani response format yang konsisten.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Error response schema dengan struktur konsisten.
    """
    error: Dict[str, Any] = Field(
        ...,
        description="Error details"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "message": "Credential verification is temporarily unavailable",
                    "type": "VerificationBackendFailure",
                    "details": {},
                    "request_id": "550e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2024-01-15T10:00:00Z"
                }
            }
        }
    )


class HealthCheckResponse(BaseModel):
    """
    Health check response schema.
    """
    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="API version")
    service: str = Field(..., description="Service name")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional health details"
    )


class VerificationAttemptResponse(BaseModel):
    """
    Audit record dari satu percobaan verifikasi.
    """
    id: UUID = Field(..., validation_alias="va_id")
    method: str = Field(..., validation_alias="va_method")
    outcome: str = Field(..., validation_alias="va_outcome")
    consecutive_failures: int = Field(..., validation_alias="va_consecutive_failures")
    locked_until: Optional[datetime] = Field(None, validation_alias="va_locked_until")
    attempted_at: datetime = Field(..., validation_alias="va_attempted_at")

    model_config = ConfigDict(from_attributes=True)
