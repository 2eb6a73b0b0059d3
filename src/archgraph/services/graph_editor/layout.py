"""
Placeholder placement for newly added nodes.

Nodes at exactly ``(0, 0)`` are treated as unplaced and put on a fixed
row-major grid. A node deliberately placed at the origin cannot be told
apart from an unplaced one; such callers must offset it slightly.
"""

from typing import List, Sequence

from ...shared.models import GraphNode, GraphState, Position

GRID_COLUMNS = 4
SPACING_X = 250.0
SPACING_Y = 150.0
DEFAULT_START_X = 100.0
DEFAULT_START_Y = 100.0


def assign_positions(nodes: Sequence[GraphNode],
                     start_x: float = DEFAULT_START_X,
                     start_y: float = DEFAULT_START_Y,
                     columns: int = GRID_COLUMNS,
                     spacing_x: float = SPACING_X,
                     spacing_y: float = SPACING_Y) -> List[GraphNode]:
    """
    Return copies of ``nodes`` with unplaced ones moved onto the grid.

    The grid cell comes from a node's index in ``nodes`` (the delta's
    ``addNodes`` list), so placed nodes still occupy their cell.
    """
    placed = []
    for index, node in enumerate(nodes):
        if not node.position.is_unplaced:
            placed.append(node)
            continue

        col = index % columns
        row = index // columns
        position = Position(x=float(start_x + col * spacing_x), y=float(start_y + row * spacing_y))
        placed.append(node.model_copy(update={'position': position}))

    return placed


def next_start_y(state: GraphState,
                 spacing_y: float = SPACING_Y,
                 empty_start_y: float = DEFAULT_START_Y) -> float:
    """Y coordinate one row below the lowest existing node."""
    if not state.nodes:
        return empty_start_y
    return max(node.position.y for node in state.nodes) + spacing_y
