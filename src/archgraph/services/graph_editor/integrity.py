"""
Referential integrity checks for graph states.

Detects drift (duplicate ids, dangling edges) without blocking anything;
callers decide whether a violation is fatal.
"""

from typing import Set

from ...shared.models import GraphState, IntegrityReport


def validate_integrity(state: GraphState) -> IntegrityReport:
    """
    Check ``state`` for duplicate node ids, duplicate edge ids and edges whose
    endpoints do not resolve. Every violation is collected.
    """
    errors = []
    node_ids = state.node_ids()

    seen_node_ids: Set[str] = set()
    for node in state.nodes:
        if node.id in seen_node_ids:
            errors.append(f"Duplicate node ID: {node.id}")
        seen_node_ids.add(node.id)

    seen_edge_ids: Set[str] = set()
    for edge in state.edges:
        if edge.id in seen_edge_ids:
            errors.append(f"Duplicate edge ID: {edge.id}")
        seen_edge_ids.add(edge.id)

    for edge in state.edges:
        if edge.source not in node_ids:
            errors.append(f"Edge {edge.id} references non-existent source node: {edge.source}")
        if edge.target not in node_ids:
            errors.append(f"Edge {edge.id} references non-existent target node: {edge.target}")

    return IntegrityReport(valid=not errors, errors=errors)
