"""
API models for request/response handling.
"""

from typing import Any, Dict, Optional

from pydantic import Field

from ..shared.models.base import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: Optional[str] = Field(default=None, description="Error timestamp")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "SchemaError",
                "message": "Invalid graph state",
                "details": {"errors": ["nodes.0.kind: Input should be 'service', 'class', 'module', 'api', 'queue' or 'db'"]},
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
    }


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    services: Dict[str, str] = Field(default_factory=dict, description="Individual service status")
    timestamp: str = Field(..., description="Check timestamp")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "services": {
                    "storage": "memory",
                    "model_client": "openai-compatible"
                },
                "timestamp": "2024-01-01T12:00:00Z"
            }
        }
    }
