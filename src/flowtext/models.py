"""
Data models for flowtext
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class NodeType(str, Enum):
    START = "start"
    PROCESS = "process"
    DECISION = "decision"
    END = "end"
    CUSTOM = "custom"
    ANNOTATION = "annotation"
    SECTION = "section"
    GROUP = "group"


class NodeShape(str, Enum):
    RECTANGLE = "rectangle"
    ROUNDED = "rounded"
    CAPSULE = "capsule"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"
    CYLINDER = "cylinder"
    PARALLELOGRAM = "parallelogram"
    CIRCLE = "circle"


class ArrowKind(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    THICK = "thick"


class Handle(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class Direction(str, Enum):
    TB = "TB"
    LR = "LR"
    RL = "RL"
    BT = "BT"

    @classmethod
    def from_token(cls, token: Optional[str]) -> "Direction":
        """Map a header token (TB/TD/LR/RL/BT, any case) to a Direction."""
        value = (token or "TB").strip().upper()
        if value == "TD":
            value = "TB"
        return cls(value)


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class GraphNode:
    id: str
    type: NodeType
    label: str
    shape: Optional[NodeShape] = None
    parent_id: Optional[str] = None
    style_overrides: Dict[str, str] = field(default_factory=dict)
    classes: List[str] = field(default_factory=list)
    color: str = "slate"
    icon: Optional[str] = None
    position: Optional[Position] = None  # parent-relative when parent_id is set
    width: Optional[float] = None
    height: Optional[float] = None


@dataclass(frozen=True)
class GraphEdge:
    id: str
    source_id: str
    target_id: str
    label: Optional[str] = None
    arrow_kind: ArrowKind = ArrowKind.SOLID
    directed: bool = True
    style_overrides: Dict[str, str] = field(default_factory=dict)
    source_handle: Optional[Handle] = None
    target_handle: Optional[Handle] = None

    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id


@dataclass
class ClassStyle:
    name: str
    styles: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    direction: Optional[Direction] = None
    title: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "ParseResult":
        return cls(nodes=[], edges=[], error=message)

    def node(self, node_id: str) -> Optional[GraphNode]:
        """Return the node with the given id, or None."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None
