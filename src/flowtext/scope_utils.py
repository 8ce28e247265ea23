"""
Utilities for working with nested scopes (subgraphs and state composites).
"""

from typing import Dict, Mapping, Optional, Tuple

from flowtext.models import GraphNode


def scope_depth(
    node_id: str,
    parents: Mapping[str, Optional[str]],
    cache: Optional[Dict[str, int]] = None,
) -> int:
    """Compute depth of a node within the scope forest (root depth = 0)."""
    cache = cache if cache is not None else {}
    if node_id in cache:
        return cache[node_id]
    depth = 0
    seen = {node_id}
    parent = parents.get(node_id)
    while parent and parent not in seen:
        if parent in cache:
            depth += 1 + cache[parent]
            break
        seen.add(parent)
        depth += 1
        parent = parents.get(parent)
    cache[node_id] = depth
    return depth


def is_ancestor_or_self(
    candidate: str, node_id: str, parents: Mapping[str, Optional[str]]
) -> bool:
    """Return True if candidate is node_id or one of its enclosing scopes."""
    current: Optional[str] = node_id
    visited = set()
    while current and current not in visited:
        if current == candidate:
            return True
        visited.add(current)
        current = parents.get(current)
    return False


def absolute_origin(
    node: GraphNode, nodes_by_id: Mapping[str, GraphNode]
) -> Optional[Tuple[float, float]]:
    """
    Return the absolute top-left corner of a positioned node.

    A node's stored position is relative to its parent, so parent offsets are
    accumulated up the chain. A missing or unpositioned parent ends the walk.
    """
    if node.position is None:
        return None
    x, y = node.position.x, node.position.y
    visited = {node.id}
    parent_id = node.parent_id
    while parent_id and parent_id not in visited:
        parent = nodes_by_id.get(parent_id)
        if parent is None or parent.position is None:
            break
        visited.add(parent_id)
        x += parent.position.x
        y += parent.position.y
        parent_id = parent.parent_id
    return x, y
