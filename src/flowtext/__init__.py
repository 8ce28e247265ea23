"""
flowtext - compile diagram text into a directed-graph model.
"""

from flowtext.anchors import apply_layout, assign_anchors
from flowtext.models import GraphEdge, GraphNode, ParseResult
from flowtext.parsers import parse_flow_dsl, parse_mermaid

__version__ = "0.1.0"

__all__ = [
    "GraphEdge",
    "GraphNode",
    "ParseResult",
    "apply_layout",
    "assign_anchors",
    "parse_flow_dsl",
    "parse_mermaid",
]
