"""
Health check and metrics endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...services.graph_editor import GraphEditorService
from ...shared import get_metrics
from ..dependencies import get_graph_editor
from ..models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(service: GraphEditorService = Depends(get_graph_editor)):
    """
    Health check endpoint.

    Returns:
        System health status
    """
    services = {}

    try:
        stats = service.storage.get_stats()
        services["storage"] = stats.get("backend", "unknown")
    except Exception as e:
        services["storage"] = f"error: {str(e)}"

    services["model_client"] = service.model_client.provider if service.model_client else "not_configured"

    error_services = [name for name, status in services.items() if "error" in status]
    overall_status = "unhealthy" if error_services else "healthy"

    return HealthResponse(
        status=overall_status,
        services=services,
        timestamp=datetime.now(timezone.utc).isoformat()
    )


@router.get("/metrics")
def metrics_snapshot():
    """Current counters and timer statistics."""
    return get_metrics().get_all_metrics()
