"""
Graph data models for ArchGraph.

These models describe the architecture graph and the deltas that edit it:
- GraphState: the authoritative nodes/edges/meta for one project
- GraphDelta: a partial, externally produced description of change
- IntegrityReport: the outcome of a post-merge consistency check

They are the structural schema only. Cross-entity checks (dangling edges,
duplicate ids) belong to the integrity validator.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from pydantic import Field, StrictFloat, StrictStr

from .base import BaseModel, utc_now


class NodeKind(str, Enum):
    """Kinds of architecture components."""
    SERVICE = "service"
    CLASS = "class"
    MODULE = "module"
    API = "api"
    QUEUE = "queue"
    DB = "db"


class EdgeKind(str, Enum):
    """Kinds of relationships between components."""
    CALLS = "calls"
    DEPENDS_ON = "depends_on"
    PUBLISHES = "publishes"
    CONSUMES = "consumes"
    QUERIES = "queries"


class Position(BaseModel):
    """Canvas coordinates. ``(0, 0)`` means "not yet placed"."""

    x: StrictFloat = Field(..., description="Horizontal canvas coordinate")
    y: StrictFloat = Field(..., description="Vertical canvas coordinate")

    @property
    def is_unplaced(self) -> bool:
        return self.x == 0 and self.y == 0


class NodeData(BaseModel):
    """
    Descriptive payload of a node.

    Every field is optional, so the same model doubles as the partial patch
    carried by node updates.
    """

    summary: Optional[StrictStr] = Field(default=None, description="Short description")
    methods: Optional[List[StrictStr]] = Field(default=None, description="Ordered method names")
    fields: Optional[List[StrictStr]] = Field(default=None, description="Ordered field names")
    file_path: Optional[StrictStr] = Field(default=None, alias="filePath", description="Source file path")


class GraphNode(BaseModel):
    """A software component on the architecture canvas."""

    id: StrictStr = Field(..., description="Unique identifier within the graph")
    kind: NodeKind = Field(..., description="Component kind")
    label: StrictStr = Field(..., description="Display label")
    position: Position = Field(..., description="Canvas position")
    data: NodeData = Field(default_factory=NodeData, description="Descriptive payload")


class EdgeData(BaseModel):
    """Descriptive payload of an edge."""

    description: Optional[StrictStr] = Field(default=None, description="What the relationship means")


class GraphEdge(BaseModel):
    """A directed relationship between two nodes."""

    id: StrictStr = Field(..., description="Unique identifier within the graph")
    source: StrictStr = Field(..., description="ID of the source node")
    target: StrictStr = Field(..., description="ID of the target node")
    kind: EdgeKind = Field(..., description="Relationship kind")
    data: Optional[EdgeData] = Field(default=None, description="Descriptive payload")


class GraphMeta(BaseModel):
    """Project identity and last modification time."""

    project_id: StrictStr = Field(..., alias="projectId", description="Owning project")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt", description="Last mutation time")


class GraphState(BaseModel):
    """
    The single source of truth for one project's architecture graph.

    Node and edge order is kept for display; it carries no meaning otherwise.
    """

    nodes: List[GraphNode] = Field(..., description="Components")
    edges: List[GraphEdge] = Field(..., description="Relationships")
    meta: GraphMeta = Field(..., description="Project metadata")

    @classmethod
    def empty(cls, project_id: str) -> "GraphState":
        """Create an empty graph for a new project, stamped now."""
        return cls(nodes=[], edges=[], meta=GraphMeta(project_id=project_id, updated_at=utc_now()))

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        """Get a node by its ID."""
        return next((n for n in self.nodes if n.id == node_id), None)


class NodeUpdate(BaseModel):
    """Partial change to an existing node. Absent fields keep their value."""

    id: StrictStr = Field(..., description="ID of the node to update")
    label: Optional[StrictStr] = Field(default=None, description="New label")
    kind: Optional[NodeKind] = Field(default=None, description="New kind")
    data: Optional[NodeData] = Field(default=None, description="Keys to overwrite in node data")


class GraphDelta(BaseModel):
    """
    A description of change, consumed once by the merge engine.

    All operations are optional; an empty delta is valid and changes nothing
    except the modification time.
    """

    add_nodes: Optional[List[GraphNode]] = Field(default=None, alias="addNodes")
    update_nodes: Optional[List[NodeUpdate]] = Field(default=None, alias="updateNodes")
    remove_node_ids: Optional[List[StrictStr]] = Field(default=None, alias="removeNodeIds")
    add_edges: Optional[List[GraphEdge]] = Field(default=None, alias="addEdges")
    remove_edge_ids: Optional[List[StrictStr]] = Field(default=None, alias="removeEdgeIds")

    def is_empty(self) -> bool:
        """True when no operation carries any entry."""
        return not any([
            self.add_nodes,
            self.update_nodes,
            self.remove_node_ids,
            self.add_edges,
            self.remove_edge_ids,
        ])


class IntegrityReport(BaseModel):
    """Result of a referential integrity check."""

    valid: bool = Field(..., description="Whether no violation was found")
    errors: List[str] = Field(default_factory=list, description="Every violation found")

