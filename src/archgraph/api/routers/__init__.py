"""
API routers for ArchGraph.
"""

from . import chat, graph, health

__all__ = ["chat", "graph", "health"]
