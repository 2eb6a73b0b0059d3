"""
Graph state endpoints: read, replace and apply deltas directly.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ...services.graph_editor import GraphEditorService
from ..dependencies import get_graph_editor

router = APIRouter()


def _read(service: GraphEditorService, project_id: Optional[str]) -> Dict[str, Any]:
    return service.get_graph(project_id).to_json_dict()


def _replace(service: GraphEditorService, payload: Any, project_id: Optional[str]) -> Dict[str, Any]:
    return service.replace_graph(payload, project_id).to_json_dict()


def _apply(service: GraphEditorService, payload: Any, project_id: Optional[str]) -> Dict[str, Any]:
    return service.apply_delta(payload, project_id).to_json_dict()


@router.get("/graph")
def get_default_graph(service: GraphEditorService = Depends(get_graph_editor)):
    """Return the default project's graph, creating an empty one if none exists."""
    return _read(service, None)


@router.get("/graph/{project_id}")
def get_graph(project_id: str, service: GraphEditorService = Depends(get_graph_editor)):
    """Return a project's graph, creating an empty one if none exists."""
    return _read(service, project_id)


@router.put("/graph")
def replace_default_graph(payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """
    Replace the default project's graph.

    The payload must be a structurally valid GraphState with unique ids and
    no dangling edges.
    """
    return _replace(service, payload, None)


@router.put("/graph/{project_id}")
def replace_graph(project_id: str, payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """Replace a project's graph."""
    return _replace(service, payload, project_id)


@router.post("/graph/delta")
def apply_default_delta(payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """Apply a GraphDelta to the default project's graph."""
    return _apply(service, payload, None)


@router.post("/graph/{project_id}/delta")
def apply_delta(project_id: str, payload: Any = Body(...), service: GraphEditorService = Depends(get_graph_editor)):
    """Apply a GraphDelta to a project's graph."""
    return _apply(service, payload, project_id)
