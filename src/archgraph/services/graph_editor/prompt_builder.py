"""
Prompt construction for graph editing requests.

Builds the system/user message pair sent to the text-generation call. The
current graph is embedded as JSON, trimmed to bound token usage.
"""

import json
from typing import List, Tuple

from ...shared import get_logger, get_metrics
from ...shared.infrastructure.ai import ChatMessage, MessageRole
from ...shared.models import GraphState
from .models import TrimReport

MAX_PROMPT_NODES = 50
MAX_PROMPT_EDGES = 100

SYSTEM_PROMPT = """You are a software architecture assistant that edits a graph representing a system design.
You receive the current architecture graph and a natural language request.
You MUST respond with a JSON object that conforms to the following TypeScript type:

interface GraphDelta {
  addNodes?: GraphNode[];
  updateNodes?: { id: string; label?: string; kind?: NodeKind; data?: Partial<GraphNode["data"]>; }[];
  removeNodeIds?: string[];
  addEdges?: GraphEdge[];
  removeEdgeIds?: string[];
}

interface GraphNode {
  id: string;
  kind: "service" | "class" | "module" | "api" | "queue" | "db";
  label: string;
  position: { x: number; y: number };
  data: { summary?: string; methods?: string[]; fields?: string[]; filePath?: string; };
}

interface GraphEdge {
  id: string;
  source: string;
  target: string;
  kind: "calls" | "depends_on" | "publishes" | "consumes" | "queries";
  data?: { description?: string; };
}

Rules:
- Only include fields you are actually changing.
- Do not restate the full graph.
- Do not include any explanation or comments outside of the JSON.
- Ensure all added node IDs and edge IDs are unique (use descriptive kebab-case IDs like "auth-service", "user-db").
- Ensure that edges only reference existing or newly-added nodes.
- When adding nodes, use reasonable default positions. Spread new nodes out (e.g., x: 100, 300, 500... and y: 100, 250, 400...).
- Respond ONLY with valid JSON. No markdown code blocks, no explanations."""


class PromptBuilder:
    """
    Builds the messages for one graph editing request.

    Args:
        max_nodes: Nodes kept in the embedded graph
        max_edges: Edges kept in the embedded graph
    """

    def __init__(self, max_nodes: int = MAX_PROMPT_NODES, max_edges: int = MAX_PROMPT_EDGES):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.max_nodes = max_nodes
        self.max_edges = max_edges

    def trim_state(self, state: GraphState) -> Tuple[GraphState, TrimReport]:
        """
        Cap the graph for prompting.

        Keeps the first ``max_nodes`` nodes; when nodes were cut, keeps only
        edges whose endpoints both survive; then keeps the first
        ``max_edges`` edges.
        """
        nodes = state.nodes
        edges = state.edges

        if len(nodes) > self.max_nodes:
            self.logger.warning(f"Trimming nodes from {len(nodes)} to {self.max_nodes}")
            nodes = nodes[:self.max_nodes]
            node_ids = {n.id for n in nodes}
            edges = [e for e in edges if e.source in node_ids and e.target in node_ids]

        if len(edges) > self.max_edges:
            self.logger.warning(f"Trimming edges from {len(edges)} to {self.max_edges}")
            edges = edges[:self.max_edges]

        report = TrimReport(
            original_nodes=len(state.nodes),
            original_edges=len(state.edges),
            kept_nodes=len(nodes),
            kept_edges=len(edges),
        )
        if report.truncated:
            self.metrics.counter('prompt_trimmed_total')

        trimmed = state.model_copy(update={'nodes': list(nodes), 'edges': list(edges)})
        return trimmed, report

    def build_messages(self, user_message: str, state: GraphState) -> List[ChatMessage]:
        """Build the ``[system, user]`` messages for ``user_message``."""
        trimmed, _ = self.trim_state(state)
        graph_json = json.dumps(trimmed.to_json_dict(), indent=2)

        user_content = (
            "Project context: This graph represents a system architecture with nodes and edges as described.\n"
            "\n"
            "Current graph:\n"
            f"{graph_json}\n"
            "\n"
            "User request:\n"
            f"\"{user_message}\""
        )

        return [
            ChatMessage(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT),
            ChatMessage(role=MessageRole.USER, content=user_content),
        ]


def trim_state_for_prompt(state: GraphState,
                          max_nodes: int = MAX_PROMPT_NODES,
                          max_edges: int = MAX_PROMPT_EDGES) -> Tuple[GraphState, TrimReport]:
    """Cap ``state`` to ``max_nodes`` nodes and ``max_edges`` edges."""
    return PromptBuilder(max_nodes=max_nodes, max_edges=max_edges).trim_state(state)


def build_messages(user_message: str, state: GraphState) -> List[ChatMessage]:
    """Build prompt messages with the default size caps."""
    return PromptBuilder().build_messages(user_message, state)
