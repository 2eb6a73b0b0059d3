"""
FastAPI dependencies.
"""

from fastapi import Request

from ..services.graph_editor import GraphEditorService


def get_graph_editor(request: Request) -> GraphEditorService:
    """The service instance attached to the application at creation time."""
    return request.app.state.graph_editor
