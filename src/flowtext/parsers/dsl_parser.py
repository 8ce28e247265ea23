"""
FlowText DSL parser

Syntax:
  flow: "Title"
  direction: TB | LR
  # comment
  [type] Label
  Source Label -> Target Label
  Source Label ->|edge label| Target Label
"""

import logging
import re
from typing import Dict, List, Optional

from flowtext.config import LayoutConfig
from flowtext.constants import DEFAULT_FLOW_TITLE, NO_NODES_FOUND_ERROR
from flowtext.graph_builder import GraphBuilder
from flowtext.models import Direction, NodeType, ParseResult, Position

logger = logging.getLogger(__name__)

TITLE_RE = re.compile(r'^flow:\s*"?([^"]*)"?\s*$', re.IGNORECASE)
DIRECTION_RE = re.compile(r"^direction:\s*(TB|LR|TD|RL|BT)\s*$", re.IGNORECASE)
EDGE_RE = re.compile(r"^(.+?)\s*->\s*(?:\|([^|]*)\|\s*)?(.+)$")
NODE_RE = re.compile(r"^\[(\w+)\]\s+(.+)$")

NODE_TYPE_MAP = {
    "start": NodeType.START,
    "process": NodeType.PROCESS,
    "decision": NodeType.DECISION,
    "end": NodeType.END,
    "system": NodeType.CUSTOM,
    "custom": NodeType.CUSTOM,
    "note": NodeType.ANNOTATION,
    "section": NodeType.SECTION,
}


def _parse_direction(token: str) -> Direction:
    d = token.upper()
    if d in ("LR", "RL"):
        # Known limitation: RL is read as LR, the right-to-left distinction is lost.
        if d == "RL":
            logger.debug("direction RL is laid out as LR")
        return Direction.LR
    return Direction.TB


def grid_positions(
    node_ids: List[str], direction: Direction, layout: Optional[LayoutConfig] = None
) -> Dict[str, Position]:
    """
    Assign initial coordinates: a single row for LR, a wrapped grid otherwise.
    """
    layout = layout or LayoutConfig()
    positions: Dict[str, Position] = {}
    for i, node_id in enumerate(node_ids):
        if direction == Direction.LR:
            positions[node_id] = Position(x=i * layout.horizontal_spacing_x, y=0)
        else:
            col = i % layout.grid_columns
            row = i // layout.grid_columns
            positions[node_id] = Position(
                x=col * layout.vertical_spacing_x, y=row * layout.vertical_spacing_y
            )
    return positions


def parse_flow_dsl(text: str, layout: Optional[LayoutConfig] = None) -> ParseResult:
    """
    Parse FlowText DSL into a positioned ParseResult.

    Nodes are keyed by their label; an edge endpoint seen before its
    `[type] Label` line is registered as a process node and retyped in place.
    """
    builder = GraphBuilder()
    ids_by_label: Dict[str, str] = {}
    title = DEFAULT_FLOW_TITLE
    direction = Direction.TB

    def _node_id(label: str) -> str:
        if label not in ids_by_label:
            ids_by_label[label] = f"node-{len(ids_by_label)}"
        return ids_by_label[label]

    for line_no, raw in enumerate((text or "").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        m = TITLE_RE.match(line)
        if m:
            title = m.group(1).strip()
            continue

        m = DIRECTION_RE.match(line)
        if m:
            direction = _parse_direction(m.group(1))
            continue

        m = EDGE_RE.match(line)
        if m:
            source_label = m.group(1).strip()
            edge_label = (m.group(2) or "").strip()
            target_label = m.group(3).strip()
            source_id = _node_id(source_label)
            target_id = _node_id(target_label)
            if source_id not in builder:
                builder.declare(source_id, label=source_label, node_type=NodeType.PROCESS)
            if target_id not in builder:
                builder.declare(target_id, label=target_label, node_type=NodeType.PROCESS)
            builder.add_edge(source_id, target_id, label=edge_label or None)
            continue

        m = NODE_RE.match(line)
        if m:
            node_type = NODE_TYPE_MAP.get(m.group(1).lower(), NodeType.PROCESS)
            label = m.group(2).strip()
            builder.declare(_node_id(label), label=label, node_type=node_type)
            continue

        logger.debug("Skipping line %d: %s", line_no, line)

    if not len(builder):
        logger.info("FlowText DSL parse failed: %s", NO_NODES_FOUND_ERROR)
        return ParseResult.failure(NO_NODES_FOUND_ERROR)

    positions = grid_positions(list(ids_by_label.values()), direction, layout)
    return ParseResult(
        nodes=builder.build_nodes(positions=positions),
        edges=builder.build_edges(),
        direction=direction,
        title=title,
    )
