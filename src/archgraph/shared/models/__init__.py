"""
Shared data models for ArchGraph.
"""

from .base import BaseModel, utc_now
from .graph import (
    NodeKind, EdgeKind, Position, NodeData, GraphNode, EdgeData, GraphEdge,
    GraphMeta, GraphState, NodeUpdate, GraphDelta, IntegrityReport,
)

__all__ = [
    # Graph models
    "NodeKind",
    "EdgeKind",
    "Position",
    "NodeData",
    "GraphNode",
    "EdgeData",
    "GraphEdge",
    "GraphMeta",
    "GraphState",
    "NodeUpdate",
    "GraphDelta",
    "IntegrityReport",
    # Base models
    "BaseModel",
    "utc_now",
]
