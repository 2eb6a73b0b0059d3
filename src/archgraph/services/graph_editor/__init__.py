"""
Graph Editor Service for ArchGraph.

Implements the graph-delta protocol:
- Structural validation of states and deltas
- Tolerant extraction of deltas from model output
- Ordered, integrity-preserving merging
- Grid placement of new nodes and change summaries
"""

from .service import GraphEditorService
from .models import ChatRequest, ChatResponse, ChatErrorType, EditResult, TrimReport
from .schema import validate_state, validate_delta
from .delta_parser import DeltaParser, parse_delta
from .merge import MergeResult, merge_delta, merge_with_report
from .integrity import validate_integrity
from .layout import assign_positions, next_start_y
from .summarizer import summarize_delta
from .prompt_builder import PromptBuilder, build_messages, trim_state_for_prompt
from .storage import StorageBackend, InMemoryStorage, FileStorage, create_storage_backend

__all__ = [
    "GraphEditorService",
    "ChatRequest",
    "ChatResponse",
    "ChatErrorType",
    "EditResult",
    "TrimReport",
    "validate_state",
    "validate_delta",
    "DeltaParser",
    "parse_delta",
    "MergeResult",
    "merge_delta",
    "merge_with_report",
    "validate_integrity",
    "assign_positions",
    "next_start_y",
    "summarize_delta",
    "PromptBuilder",
    "build_messages",
    "trim_state_for_prompt",
    "StorageBackend",
    "InMemoryStorage",
    "FileStorage",
    "create_storage_backend",
]
