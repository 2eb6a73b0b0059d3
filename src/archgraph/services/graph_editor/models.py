"""
Data models for the graph editor service.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from ...shared.models import BaseModel, GraphState, IntegrityReport


class ChatErrorType(str, Enum):
    """Why a chat request produced no graph change."""
    UPSTREAM_FAILURE = "upstream_failure"
    PARSE_ERROR = "parse_error"
    STORAGE_ERROR = "storage_error"


class ChatRequest(BaseModel):
    """A natural-language edit request, optionally with the client's view of the graph."""

    message: str = Field(..., description="What the user wants changed")
    graph_state: Optional[GraphState] = Field(default=None, alias="graphState", description="Client copy of the graph")


class ChatResponse(BaseModel):
    """
    Outcome of a chat request.

    On failure ``graph_state`` is the unmodified prior state, so the caller is
    never left without a valid graph.
    """

    success: bool = Field(default=True, description="Whether the graph was updated")
    assistant_message: str = Field(..., alias="assistantMessage", description="Text shown to the user")
    graph_state: GraphState = Field(..., alias="graphState", description="Resulting (or prior) graph")
    error: Optional[str] = Field(default=None, description="Failure detail")
    error_type: Optional[ChatErrorType] = Field(default=None, alias="errorType", description="Failure category")
    integrity: Optional[IntegrityReport] = Field(default=None, description="Post-merge integrity check")


class EditResult(BaseModel):
    """Outcome of applying a delta directly."""

    graph_state: GraphState = Field(..., alias="graphState")
    summary: str = Field(..., alias="assistantMessage")
    integrity: IntegrityReport = Field(...)


class TrimReport(BaseModel):
    """How much of a graph was left out of a prompt."""

    original_nodes: int
    original_edges: int
    kept_nodes: int
    kept_edges: int

    @property
    def truncated(self) -> bool:
        return self.kept_nodes < self.original_nodes or self.kept_edges < self.original_edges
