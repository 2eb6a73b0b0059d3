"""
Merge engine: applies a GraphDelta to a GraphState.

Operations run in a fixed order, each on the previous step's result:

1. remove nodes, together with every edge touching a removed node
2. remove edges
3. add nodes (first writer wins on id clashes)
4. update nodes (shallow, key-by-key merge of ``data``)
5. add edges whose endpoints exist after steps 1-4 and whose id is new

Missing references and duplicate ids are dropped, never raised: a usable
graph matters more than rejecting an imperfect delta. Inputs are never
mutated and the result always carries a fresh ``updatedAt``.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ...shared import get_logger, get_metrics
from ...shared.models import (
    GraphDelta, GraphEdge, GraphMeta, GraphNode, GraphState, NodeData, NodeUpdate, utc_now,
)

logger = get_logger(__name__)


@dataclass
class MergeResult:
    """New state plus what the merge actually did."""

    state: GraphState
    added_node_ids: List[str] = field(default_factory=list)
    updated_node_ids: List[str] = field(default_factory=list)
    removed_node_ids: List[str] = field(default_factory=list)
    added_edge_ids: List[str] = field(default_factory=list)
    removed_edge_ids: List[str] = field(default_factory=list)
    duplicate_node_ids: List[str] = field(default_factory=list)
    missing_update_ids: List[str] = field(default_factory=list)
    duplicate_edge_ids: List[str] = field(default_factory=list)
    dropped_edge_ids: List[str] = field(default_factory=list)


def _apply_update(node: GraphNode, update: NodeUpdate) -> GraphNode:
    changes = {}
    if update.label is not None:
        changes['label'] = update.label
    if update.kind is not None:
        changes['kind'] = update.kind
    if update.data is not None:
        patch = update.data.model_dump(exclude_unset=True, exclude_none=True)
        if patch:
            merged = node.data.model_dump(exclude_none=True)
            merged.update(patch)
            changes['data'] = NodeData.model_validate(merged)

    return node.model_copy(update=changes) if changes else node


def merge_with_report(state: GraphState, delta: GraphDelta, now: Optional[datetime] = None) -> MergeResult:
    """
    Apply ``delta`` to ``state`` and report every effect and every drop.

    Args:
        state: Prior graph state (left untouched)
        delta: Validated delta
        now: Timestamp to stamp, defaults to the current UTC time

    Returns:
        MergeResult holding the new state
    """
    start_time = time.time()
    working = state.model_copy(deep=True)
    delta = delta.model_copy(deep=True)

    nodes: List[GraphNode] = list(working.nodes)
    edges: List[GraphEdge] = list(working.edges)
    result = MergeResult(state=working)

    # 1. Remove nodes and every edge that would dangle
    if delta.remove_node_ids:
        remove_set = set(delta.remove_node_ids)
        result.removed_node_ids = [n.id for n in nodes if n.id in remove_set]
        nodes = [n for n in nodes if n.id not in remove_set]

        orphaned = [e for e in edges if e.source in remove_set or e.target in remove_set]
        if orphaned:
            result.removed_edge_ids.extend(e.id for e in orphaned)
            edges = [e for e in edges if e.source not in remove_set and e.target not in remove_set]

    # 2. Remove edges
    if delta.remove_edge_ids:
        remove_set = set(delta.remove_edge_ids)
        result.removed_edge_ids.extend(e.id for e in edges if e.id in remove_set)
        edges = [e for e in edges if e.id not in remove_set]

    # 3. Add nodes, first writer wins
    if delta.add_nodes:
        existing_ids = {n.id for n in nodes}
        for new_node in delta.add_nodes:
            if new_node.id in existing_ids:
                result.duplicate_node_ids.append(new_node.id)
                logger.debug(f"Skipping node {new_node.id}: id already exists")
                continue
            nodes.append(new_node)
            existing_ids.add(new_node.id)
            result.added_node_ids.append(new_node.id)

    # 4. Update nodes in place
    if delta.update_nodes:
        positions: Dict[str, List[int]] = {}
        for index, node in enumerate(nodes):
            positions.setdefault(node.id, []).append(index)

        for update in delta.update_nodes:
            indexes = positions.get(update.id)
            if not indexes:
                result.missing_update_ids.append(update.id)
                logger.debug(f"Skipping update for {update.id}: node not found")
                continue
            for index in indexes:
                nodes[index] = _apply_update(nodes[index], update)
            if update.id not in result.updated_node_ids:
                result.updated_node_ids.append(update.id)

    # 5. Add edges whose endpoints exist after all node operations
    if delta.add_edges:
        node_ids = {n.id for n in nodes}
        existing_edge_ids = {e.id for e in edges}

        for new_edge in delta.add_edges:
            if new_edge.source not in node_ids or new_edge.target not in node_ids:
                result.dropped_edge_ids.append(new_edge.id)
                logger.warning(
                    f"Skipping edge {new_edge.id}: source ({new_edge.source}) "
                    f"or target ({new_edge.target}) not found"
                )
                continue
            if new_edge.id in existing_edge_ids:
                result.duplicate_edge_ids.append(new_edge.id)
                logger.debug(f"Skipping edge {new_edge.id}: id already exists")
                continue
            edges.append(new_edge)
            existing_edge_ids.add(new_edge.id)
            result.added_edge_ids.append(new_edge.id)

    result.state = GraphState(
        nodes=nodes,
        edges=edges,
        meta=GraphMeta(project_id=working.meta.project_id, updated_at=now or utc_now()),
    )

    get_metrics().record_merge(
        added_nodes=len(result.added_node_ids),
        updated_nodes=len(result.updated_node_ids),
        removed_nodes=len(result.removed_node_ids),
        added_edges=len(result.added_edge_ids),
        removed_edges=len(result.removed_edge_ids),
        dropped_edges=len(result.dropped_edge_ids),
        duration_seconds=time.time() - start_time,
    )
    logger.info(
        f"Merged delta into {working.meta.project_id}: "
        f"+{len(result.added_node_ids)}/~{len(result.updated_node_ids)}/-{len(result.removed_node_ids)} nodes, "
        f"+{len(result.added_edge_ids)}/-{len(result.removed_edge_ids)} edges, "
        f"{len(result.dropped_edge_ids)} dropped"
    )
    return result


def merge_delta(state: GraphState, delta: GraphDelta, now: Optional[datetime] = None) -> GraphState:
    """Apply ``delta`` to ``state`` and return the new state."""
    return merge_with_report(state, delta, now=now).state
