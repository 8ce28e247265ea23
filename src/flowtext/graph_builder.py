"""
Graph model assembly shared by the Mermaid and FlowText DSL parsers.

Both grammars register nodes and edges through a GraphBuilder so that
merge-by-id semantics, type defaults and scope nesting behave identically
no matter which grammar produced a ParseResult.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from flowtext.constants import (
    DASHED_EDGE_STYLE,
    DEFAULT_NODE_COLOR,
    NODE_DEFAULTS,
    THICK_EDGE_STYLE,
)
from flowtext.models import (
    ArrowKind,
    ClassStyle,
    GraphEdge,
    GraphNode,
    NodeShape,
    NodeType,
    Position,
)
from flowtext.scope_utils import is_ancestor_or_self

logger = logging.getLogger(__name__)

DEFAULT_CLASS = "default"


@dataclass
class NodeDraft:
    id: str
    label: str
    type: NodeType = NodeType.PROCESS
    shape: Optional[NodeShape] = None
    classes: List[str] = field(default_factory=list)
    icon: Optional[str] = None


@dataclass
class EdgeDraft:
    source_id: str
    target_id: str
    label: Optional[str] = None
    arrow_kind: ArrowKind = ArrowKind.SOLID
    directed: bool = True


def resolve_node_defaults(
    node_type: NodeType, shape: Optional[NodeShape] = None
) -> Tuple[NodeShape, str]:
    """Return (shape, colour) for a node, filling the shape from its type."""
    defaults = NODE_DEFAULTS.get(node_type, {})
    resolved_shape = shape or defaults.get("shape", NodeShape.ROUNDED)
    return resolved_shape, defaults.get("color", DEFAULT_NODE_COLOR)


def _split_top_level(text: str, sep: str = ",") -> List[str]:
    """Split on sep, ignoring separators inside parentheses (e.g. rgb(1,2,3))."""
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        if ch == sep and depth == 0:
            parts.append(current)
            current = ""
            continue
        current += ch
    parts.append(current)
    return parts


def parse_style_props(text: str) -> Dict[str, str]:
    """
    Parse a `key:value,key:value` property list.

    Entries without a colon are ignored; values may themselves contain colons.
    """
    props: Dict[str, str] = {}
    if not text:
        return props
    for pair in _split_top_level(text.strip().rstrip(";")):
        key, sep, value = pair.partition(":")
        key, value = key.strip(), value.strip().rstrip(";").strip()
        if not sep or not key or not value:
            continue
        props[key] = value
    return props


def arrow_kind_style(kind: ArrowKind) -> Dict[str, str]:
    if kind == ArrowKind.DASHED:
        return dict(DASHED_EDGE_STYLE)
    if kind == ArrowKind.THICK:
        return dict(THICK_EDGE_STYLE)
    return {}


class GraphBuilder:
    """Accumulates node declarations and edges for one parse call."""

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeDraft] = {}
        self._parents: Dict[str, Optional[str]] = {}
        self._edges: List[EdgeDraft] = []

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, node_id: str) -> Optional[NodeDraft]:
        return self._nodes.get(node_id)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def declare(
        self,
        node_id: str,
        *,
        label: Optional[str] = None,
        node_type: Optional[NodeType] = None,
        shape: Optional[NodeShape] = None,
        classes: Iterable[str] = (),
        icon: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> NodeDraft:
        """
        Register a node or merge into an existing one.

        Later label/type/shape values override earlier ones; classes accumulate.
        """
        draft = self._nodes.get(node_id)
        if draft is None:
            draft = NodeDraft(
                id=node_id,
                label=node_id if label is None else label,
                type=node_type or NodeType.PROCESS,
                shape=shape,
                icon=icon,
            )
            self._nodes[node_id] = draft
            self._parents[node_id] = None
        else:
            if label is not None:
                draft.label = label
            if node_type is not None:
                draft.type = node_type
            if shape is not None:
                draft.shape = shape
            if icon:
                draft.icon = icon
        for name in classes:
            if name not in draft.classes:
                draft.classes.append(name)
        if parent_id is not None:
            self.set_parent(node_id, parent_id)
        return draft

    def ensure(self, node_id: str, parent_id: Optional[str] = None) -> NodeDraft:
        """Return the node for node_id, auto-registering it as a process node."""
        return self.declare(node_id, parent_id=parent_id)

    def set_parent(self, node_id: str, parent_id: str) -> None:
        if is_ancestor_or_self(node_id, parent_id, self._parents):
            logger.debug("Ignoring scope %s for %s: would nest a scope in itself", parent_id, node_id)
            return
        self._parents[node_id] = parent_id

    def add_edge(
        self,
        source_id: str,
        target_id: str,
        *,
        label: Optional[str] = None,
        arrow_kind: ArrowKind = ArrowKind.SOLID,
        directed: bool = True,
    ) -> int:
        """Queue an edge and return its 0-based encounter index."""
        self._edges.append(
            EdgeDraft(
                source_id=source_id,
                target_id=target_id,
                label=label or None,
                arrow_kind=arrow_kind,
                directed=directed,
            )
        )
        return len(self._edges) - 1

    def build_nodes(
        self,
        class_styles: Optional[Mapping[str, ClassStyle]] = None,
        node_styles: Optional[Mapping[str, Dict[str, str]]] = None,
        positions: Optional[Mapping[str, Position]] = None,
    ) -> List[GraphNode]:
        class_styles = class_styles or {}
        node_styles = node_styles or {}
        positions = positions or {}
        nodes: List[GraphNode] = []
        for draft in self._nodes.values():
            shape, color = resolve_node_defaults(draft.type, draft.shape)
            styles: Dict[str, str] = {}
            if draft.type != NodeType.GROUP and DEFAULT_CLASS in class_styles:
                styles.update(class_styles[DEFAULT_CLASS].styles)
            for name in draft.classes:
                cls = class_styles.get(name)
                if cls is None:
                    logger.debug("Node %s references undefined class %s", draft.id, name)
                    continue
                styles.update(cls.styles)
            styles.update(node_styles.get(draft.id, {}))
            nodes.append(
                GraphNode(
                    id=draft.id,
                    type=draft.type,
                    label=draft.label,
                    shape=shape,
                    parent_id=self._parents.get(draft.id),
                    style_overrides=styles,
                    classes=list(draft.classes),
                    color=color,
                    icon=draft.icon,
                    position=positions.get(draft.id),
                )
            )
        return nodes

    def build_edges(
        self,
        edge_styles: Optional[Mapping[int, Dict[str, str]]] = None,
        default_style: Optional[Mapping[str, str]] = None,
    ) -> List[GraphEdge]:
        edge_styles = edge_styles or {}
        edges: List[GraphEdge] = []
        for index, draft in enumerate(self._edges):
            if draft.source_id not in self._nodes or draft.target_id not in self._nodes:
                logger.debug(
                    "Dropping edge %d: %s -> %s has an unresolved endpoint",
                    index,
                    draft.source_id,
                    draft.target_id,
                )
                continue
            styles = arrow_kind_style(draft.arrow_kind)
            styles.update(default_style or {})
            styles.update(edge_styles.get(index, {}))
            edges.append(
                GraphEdge(
                    id=f"edge-{index}",
                    source_id=draft.source_id,
                    target_id=draft.target_id,
                    label=draft.label,
                    arrow_kind=draft.arrow_kind,
                    directed=draft.directed,
                    style_overrides=styles,
                )
            )
        return edges
