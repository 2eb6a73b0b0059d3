"""
ArchGraph - architecture graphs edited through validated, mergeable deltas.
"""

__version__ = "1.0.0"
__author__ = "ArchGraph Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.graph import GraphNode, GraphEdge, GraphState, GraphDelta
from .shared.exceptions import ArchGraphError, SchemaError, ParseError
from .services.graph_editor import GraphEditorService, merge_delta, parse_delta

__all__ = [
    "get_settings",
    "GraphNode",
    "GraphEdge",
    "GraphState",
    "GraphDelta",
    "ArchGraphError",
    "SchemaError",
    "ParseError",
    "GraphEditorService",
    "merge_delta",
    "parse_delta",
]
