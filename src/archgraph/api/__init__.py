"""
ArchGraph HTTP API.

Thin FastAPI surface over the graph editor service.
"""

from .app import create_app, build_default_service
from .models import ErrorResponse, HealthResponse

__all__ = [
    "create_app",
    "build_default_service",
    "ErrorResponse",
    "HealthResponse",
]
