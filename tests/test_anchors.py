"""
Tests for anchors module
"""

import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from flowtext.anchors import apply_layout, assign_anchors, choose_handles
from flowtext.config import NodeSizeConfig
from flowtext.models import GraphEdge, GraphNode, Handle, NodeType, Position
from flowtext.parsers import parse_mermaid

B, T, L, R = Handle.BOTTOM, Handle.TOP, Handle.LEFT, Handle.RIGHT


def _node(node_id, cx, cy, width=250, height=150, parent_id=None):
    """Node whose center sits at (cx, cy), relative to its parent."""
    return GraphNode(
        id=node_id,
        type=NodeType.PROCESS,
        label=node_id,
        position=Position(cx - width / 2, cy - height / 2),
        width=width,
        height=height,
        parent_id=parent_id,
    )


def _edge(edge_id, source_id, target_id, **kwargs):
    return GraphEdge(id=edge_id, source_id=source_id, target_id=target_id, **kwargs)


def _handles(edges):
    return [(e.source_handle, e.target_handle) for e in edges]


class TestAssignAnchors:
    """Test cases for assign_anchors function"""

    def test_target_below(self):
        """Test a target below its source uses bottom/top"""
        nodes = [_node("A", 0, 0), _node("B", 0, 300)]
        assert nodes[0].position == Position(-125, -75)

        result = assign_anchors(nodes, [_edge("e1", "A", "B")])

        assert _handles(result) == [(B, T)]

    def test_cardinal_directions(self):
        nodes = [
            _node("C", 0, 0),
            _node("up", 0, -300),
            _node("right", 400, 0),
            _node("left", -400, 0),
        ]
        edges = [
            _edge("e1", "C", "up"),
            _edge("e2", "C", "right"),
            _edge("e3", "C", "left"),
        ]

        assert _handles(assign_anchors(nodes, edges)) == [(T, B), (R, L), (L, R)]

    def test_vertical_wins_ties(self):
        nodes = [_node("A", 0, 0), _node("B", 300, 300)]

        assert _handles(assign_anchors(nodes, [_edge("e1", "A", "B")])) == [(B, T)]

    def test_parallel_edges_alternate(self):
        """Test parallel edges between the same pair get different handles"""
        nodes = [_node("A", 0, 0), _node("B", 0, 300)]
        edges = [_edge(f"e{i}", "A", "B") for i in range(3)]

        assert _handles(assign_anchors(nodes, edges)) == [(B, T), (R, R), (B, T)]

    def test_bidirectional_pair(self):
        """Test the reverse member of a bidirectional pair takes other sides"""
        nodes = [_node("A", 0, 0), _node("B", 0, 300)]
        forward = _edge("e1", "A", "B")
        backward = _edge("e2", "B", "A")

        result = assign_anchors(nodes, [forward, backward])

        assert _handles(result) == [(B, T), (R, R)]
        # edge order does not change which member is the reverse one
        swapped = assign_anchors(nodes, [backward, forward])
        assert _handles(swapped) == [(R, R), (B, T)]

    def test_reverse_member_follows_registration_order(self):
        """Test the node registered later is the source of the reverse edge"""
        nodes = [_node("zeta", 0, 300), _node("alpha", 0, 0)]
        edges = [_edge("e1", "alpha", "zeta"), _edge("e2", "zeta", "alpha")]

        result = assign_anchors(nodes, edges)

        assert _handles(result) == [(L, L), (T, B)]

    def test_horizontal_reverse_and_sibling_handles(self):
        nodes = [_node("A", 0, 0), _node("B", 400, 0)]
        edges = [_edge("e1", "A", "B"), _edge("e2", "A", "B"), _edge("e3", "B", "A")]

        assert _handles(assign_anchors(nodes, edges)) == [(R, L), (B, B), (T, T)]

    def test_idempotent(self):
        """Test a second pass returns the very same edge objects"""
        nodes = [_node("A", 0, 0), _node("B", 0, 300), _node("C", 400, 300)]
        edges = [_edge("e1", "A", "B"), _edge("e2", "B", "C"), _edge("e3", "B", "A")]

        first = assign_anchors(nodes, edges)
        second = assign_anchors(nodes, first)

        assert _handles(second) == _handles(first)
        assert all(a is b for a, b in zip(first, second))

    def test_unchanged_edge_is_same_object(self):
        nodes = [_node("A", 0, 0), _node("B", 0, 300)]
        edge = _edge("e1", "A", "B", source_handle=B, target_handle=T)

        assert assign_anchors(nodes, [edge])[0] is edge

    def test_self_loop_untouched(self):
        nodes = [_node("A", 0, 0)]
        edge = _edge("e1", "A", "A")

        result = assign_anchors(nodes, [edge])

        assert result[0] is edge
        assert result[0].source_handle is None

    def test_unpositioned_or_unknown_nodes(self):
        """Test edges touching nodes without coordinates are left alone"""
        floating = GraphNode(id="F", type=NodeType.PROCESS, label="F")
        nodes = [_node("A", 0, 0), floating]
        edges = [_edge("e1", "A", "F"), _edge("e2", "A", "ghost")]

        result = assign_anchors(nodes, edges)

        assert result[0] is edges[0]
        assert result[1] is edges[1]

    def test_input_is_not_mutated(self):
        nodes = [_node("A", 0, 0), _node("B", 0, 300)]
        edges = [_edge("e1", "A", "B")]

        assign_anchors(nodes, edges)

        assert edges[0].source_handle is None

    def test_parent_offsets(self):
        """Test positions inside a group are measured from the group origin"""
        group = GraphNode(
            id="G",
            type=NodeType.GROUP,
            label="G",
            position=Position(1000, 0),
            width=400,
            height=400,
        )
        outside = _node("X", 50, 25, width=100, height=50)
        inside = _node("C", 50, 25, width=100, height=50, parent_id="G")

        result = assign_anchors([group, outside, inside], [_edge("e1", "X", "C")])

        assert _handles(result) == [(R, L)]

    def test_default_node_size(self):
        """Test nodes without a size use the configured default"""
        a = _node("A", 25, 25, width=50, height=50)
        b = GraphNode(id="B", type=NodeType.PROCESS, label="B", position=Position(-100, 60))
        edges = [_edge("e1", "A", "B")]

        assert _handles(assign_anchors([a, b], edges)) == [(B, T)]
        wide = NodeSizeConfig(width=400, height=10)
        assert _handles(assign_anchors([a, b], edges, node_size=wide)) == [(R, L)]


class TestChooseHandles:
    """Test cases for choose_handles function"""

    def test_table(self):
        assert choose_handles(0, 10) == (B, T)
        assert choose_handles(0, -10) == (T, B)
        assert choose_handles(10, 0) == (R, L)
        assert choose_handles(-10, 0) == (L, R)
        assert choose_handles(0, 10, is_reverse=True) == (L, L)
        assert choose_handles(0, -10, is_reverse=True) == (R, R)
        assert choose_handles(10, 0, is_reverse=True) == (B, B)
        assert choose_handles(-10, 0, is_reverse=True) == (T, T)
        assert choose_handles(0, 10, sibling_index=1) == (R, R)
        assert choose_handles(0, -10, sibling_index=3) == (L, L)
        assert choose_handles(10, 0, sibling_index=1) == (B, B)
        assert choose_handles(-10, 0, sibling_index=1) == (T, T)


class TestApplyLayout:
    """Test cases for apply_layout function"""

    def test_positions_and_sizes_are_applied(self):
        result = parse_mermaid("flowchart TD\nA --> B")

        laid_out = apply_layout(
            result,
            {
                "A": {"x": 0, "y": 0, "width": 100, "height": 40},
                "B": {"x": 0, "y": 200},
                "ghost": {"x": 5, "y": 5},
            },
        )

        a, b = laid_out.nodes
        assert a.position == Position(0, 0)
        assert (a.width, a.height) == (100, 40)
        assert b.width is None
        assert result.nodes[0].position is None
        assert _handles(assign_anchors(laid_out.nodes, laid_out.edges)) == [(B, T)]
