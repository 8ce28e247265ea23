from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from flowtext.models import (
    ArrowKind,
    Direction,
    GraphEdge,
    GraphNode,
    Handle,
    NodeShape,
    NodeType,
    ParseResult,
)


class PositionModel(BaseModel):
    x: float
    y: float


class NodeModel(BaseModel):
    id: str
    type: NodeType
    label: str
    shape: Optional[NodeShape] = None
    parent_id: Optional[str] = None
    style_overrides: Dict[str, str] = Field(default_factory=dict)
    classes: List[str] = Field(default_factory=list)
    color: str = "slate"
    icon: Optional[str] = None
    position: Optional[PositionModel] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_node(cls, node: GraphNode) -> "NodeModel":
        position = None
        if node.position is not None:
            position = PositionModel(x=node.position.x, y=node.position.y)
        return cls(
            id=node.id,
            type=node.type,
            label=node.label,
            shape=node.shape,
            parent_id=node.parent_id,
            style_overrides=dict(node.style_overrides),
            classes=list(node.classes),
            color=node.color,
            icon=node.icon,
            position=position,
            width=node.width,
            height=node.height,
        )


class EdgeModel(BaseModel):
    id: str
    source_id: str
    target_id: str
    label: Optional[str] = None
    arrow_kind: ArrowKind = ArrowKind.SOLID
    directed: bool = True
    style_overrides: Dict[str, str] = Field(default_factory=dict)
    source_handle: Optional[Handle] = None
    target_handle: Optional[Handle] = None

    @classmethod
    def from_edge(cls, edge: GraphEdge) -> "EdgeModel":
        return cls(
            id=edge.id,
            source_id=edge.source_id,
            target_id=edge.target_id,
            label=edge.label,
            arrow_kind=edge.arrow_kind,
            directed=edge.directed,
            style_overrides=dict(edge.style_overrides),
            source_handle=edge.source_handle,
            target_handle=edge.target_handle,
        )


class ParseResultModel(BaseModel):
    nodes: List[NodeModel] = Field(default_factory=list)
    edges: List[EdgeModel] = Field(default_factory=list)
    direction: Optional[Direction] = None
    title: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: ParseResult) -> "ParseResultModel":
        return cls(
            nodes=[NodeModel.from_node(n) for n in result.nodes],
            edges=[EdgeModel.from_edge(e) for e in result.edges],
            direction=result.direction,
            title=result.title,
            error=result.error,
        )


class NodePlacement(BaseModel):
    id: str
    x: float
    y: float
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)


class LayoutPayload(BaseModel):
    """Node positions returned by an external layout engine."""

    nodes: List[NodePlacement] = Field(default_factory=list)

    def placements(self) -> Dict[str, Dict[str, Optional[float]]]:
        return {
            n.id: {"x": n.x, "y": n.y, "width": n.width, "height": n.height}
            for n in self.nodes
        }
