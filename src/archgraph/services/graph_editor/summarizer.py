"""
Human-readable descriptions of graph deltas.
"""

from ...shared.models import GraphDelta

NO_CHANGES = "No changes were made to the graph."


def summarize_delta(delta: GraphDelta) -> str:
    """
    Describe ``delta`` in one sentence per non-empty operation.

    Order: added nodes, updated nodes, removed nodes, added edges, removed edges.
    """
    parts = []

    if delta.add_nodes:
        labels = ", ".join(f'"{n.label}" ({n.kind})' for n in delta.add_nodes)
        parts.append(f"Added {len(delta.add_nodes)} node(s): {labels}")

    if delta.update_nodes:
        ids = ", ".join(u.id for u in delta.update_nodes)
        parts.append(f"Updated {len(delta.update_nodes)} node(s): {ids}")

    if delta.remove_node_ids:
        parts.append(f"Removed {len(delta.remove_node_ids)} node(s): {', '.join(delta.remove_node_ids)}")

    if delta.add_edges:
        edges = ", ".join(f"{e.source} → {e.target} ({e.kind})" for e in delta.add_edges)
        parts.append(f"Added {len(delta.add_edges)} edge(s): {edges}")

    if delta.remove_edge_ids:
        parts.append(f"Removed {len(delta.remove_edge_ids)} edge(s): {', '.join(delta.remove_edge_ids)}")

    if not parts:
        return NO_CHANGES

    return ". ".join(parts) + "."
