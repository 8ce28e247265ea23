"""
Connection-anchor assignment for positioned graphs.

For every edge, decides which side of the source and target nodes the
connector leaves from and enters into:
- target below source -> bottom/top, target right of source -> right/left
- the reverse member of a bidirectional pair takes the perpendicular sides
- parallel edges between the same ordered pair alternate between two pairs
"""

import dataclasses
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from flowtext.config import NodeSizeConfig
from flowtext.models import GraphEdge, GraphNode, Handle, ParseResult, Position
from flowtext.scope_utils import absolute_origin

HandlePair = Tuple[Handle, Handle]

# (default, reverse-of-bidirectional, odd sibling) per dominant direction
_DOWN = ((Handle.BOTTOM, Handle.TOP), (Handle.LEFT, Handle.LEFT), (Handle.RIGHT, Handle.RIGHT))
_UP = ((Handle.TOP, Handle.BOTTOM), (Handle.RIGHT, Handle.RIGHT), (Handle.LEFT, Handle.LEFT))
_RIGHT = ((Handle.RIGHT, Handle.LEFT), (Handle.BOTTOM, Handle.BOTTOM), (Handle.BOTTOM, Handle.BOTTOM))
_LEFT = ((Handle.LEFT, Handle.RIGHT), (Handle.TOP, Handle.TOP), (Handle.TOP, Handle.TOP))


def _center(
    node: GraphNode, nodes_by_id: Mapping[str, GraphNode], size: NodeSizeConfig
) -> Optional[Tuple[float, float]]:
    origin = absolute_origin(node, nodes_by_id)
    if origin is None:
        return None
    width = node.width if node.width is not None else size.width
    height = node.height if node.height is not None else size.height
    return origin[0] + width / 2, origin[1] + height / 2


def choose_handles(
    dx: float, dy: float, is_reverse: bool = False, sibling_index: int = 0
) -> HandlePair:
    """Pick (source_handle, target_handle) from the center-to-center delta."""
    if abs(dy) >= abs(dx):
        default, reverse, alternate = _DOWN if dy >= 0 else _UP
    else:
        default, reverse, alternate = _RIGHT if dx >= 0 else _LEFT
    if is_reverse:
        return reverse
    if sibling_index % 2 == 1:
        return alternate
    return default


def assign_anchors(
    nodes: Sequence[GraphNode],
    edges: Iterable[GraphEdge],
    node_size: Optional[NodeSizeConfig] = None,
) -> List[GraphEdge]:
    """
    Return edges annotated with source/target handles.

    Pure and idempotent: an edge whose computed handles equal its current ones
    is returned as the same object. Self-loops and edges touching an unknown
    or unpositioned node are returned unchanged.
    """
    size = node_size or NodeSizeConfig()
    edges = list(edges)
    nodes_by_id: Dict[str, GraphNode] = {n.id: n for n in nodes}
    order: Dict[str, int] = {}
    for index, n in enumerate(nodes):
        order.setdefault(n.id, index)

    centers: Dict[str, Optional[Tuple[float, float]]] = {}
    for node_id, node in nodes_by_id.items():
        centers[node_id] = _center(node, nodes_by_id, size)

    # directions present per unordered endpoint pair
    pair_directions: Dict[frozenset, Set[Tuple[str, str]]] = defaultdict(set)
    for edge in edges:
        if not edge.is_self_loop:
            pair_directions[frozenset((edge.source_id, edge.target_id))].add(
                (edge.source_id, edge.target_id)
            )

    sibling_counts: Dict[Tuple[str, str], int] = defaultdict(int)
    result: List[GraphEdge] = []
    for edge in edges:
        source = centers.get(edge.source_id)
        target = centers.get(edge.target_id)
        if edge.is_self_loop or source is None or target is None:
            result.append(edge)
            continue

        key = (edge.source_id, edge.target_id)
        sibling_index = sibling_counts[key]
        sibling_counts[key] += 1

        directions = pair_directions[frozenset(key)]
        is_reverse = (
            (edge.target_id, edge.source_id) in directions
            and order[edge.source_id] > order[edge.target_id]
        )

        source_handle, target_handle = choose_handles(
            target[0] - source[0], target[1] - source[1], is_reverse, sibling_index
        )
        if edge.source_handle == source_handle and edge.target_handle == target_handle:
            result.append(edge)
            continue
        result.append(
            dataclasses.replace(
                edge, source_handle=source_handle, target_handle=target_handle
            )
        )
    return result


def apply_layout(
    result: ParseResult, placements: Mapping[str, Mapping[str, Optional[float]]]
) -> ParseResult:
    """
    Return a copy of result with node positions from an external layout engine.

    placements maps node id -> {"x", "y", optional "width"/"height"}; unknown
    ids are ignored and nodes without a placement keep their position.
    """
    nodes: List[GraphNode] = []
    for node in result.nodes:
        placement = placements.get(node.id)
        if placement is None:
            nodes.append(node)
            continue
        width = placement.get("width")
        height = placement.get("height")
        nodes.append(
            dataclasses.replace(
                node,
                position=Position(x=float(placement["x"]), y=float(placement["y"])),
                width=node.width if width is None else float(width),
                height=node.height if height is None else float(height),
            )
        )
    return dataclasses.replace(result, nodes=nodes)
