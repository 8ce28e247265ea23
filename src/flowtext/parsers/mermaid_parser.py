"""
Mermaid diagram parser
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from flowtext.constants import MISSING_DECLARATION_ERROR, NO_VALID_NODES_ERROR
from flowtext.graph_builder import GraphBuilder
from flowtext.models import ClassStyle, Direction, NodeShape, NodeType, ParseResult
from flowtext.parsers.normalizer import normalize_text
from flowtext.parsers.statements import (
    ClassAssign,
    ClassDef,
    Edge,
    EdgeStyle,
    Header,
    NodeDecl,
    NodeSpec,
    NodeStyle,
    ScopeClose,
    ScopeOpen,
    Skip,
    Statement,
    classify_line,
    split_statements,
)

logger = logging.getLogger(__name__)


@dataclass
class ParserState:
    """Scratch state for one parse call; discarded once the result is built."""

    builder: GraphBuilder = field(default_factory=GraphBuilder)
    diagram_kind: Optional[str] = None
    direction: Direction = Direction.TB
    scope_stack: List[str] = field(default_factory=list)
    class_styles: Dict[str, ClassStyle] = field(default_factory=dict)
    node_styles: Dict[str, Dict[str, str]] = field(default_factory=dict)
    edge_styles: Dict[int, Dict[str, str]] = field(default_factory=dict)
    default_edge_style: Dict[str, str] = field(default_factory=dict)
    scope_count: int = 0
    marker_count: int = 0

    @property
    def current_scope(self) -> Optional[str]:
        return self.scope_stack[-1] if self.scope_stack else None

    @property
    def is_state_diagram(self) -> bool:
        return bool(self.diagram_kind and self.diagram_kind.startswith("statediagram"))


def _register(state: ParserState, spec: NodeSpec, as_source: bool = True) -> str:
    """Register a node spec in the current scope and return its id."""
    if spec.marker:
        # every [*] is its own anonymous entry or exit point
        state.marker_count += 1
        role = "start" if as_source else "end"
        node_id = f"state-{role}-{state.marker_count}"
        state.builder.declare(
            node_id,
            label="",
            node_type=NodeType.START if as_source else NodeType.END,
            shape=NodeShape.CIRCLE,
            parent_id=state.current_scope,
        )
        return node_id
    state.builder.declare(
        spec.id,
        label=spec.label,
        node_type=spec.node_type,
        shape=spec.shape,
        classes=spec.classes,
        icon=spec.icon,
        parent_id=state.current_scope,
    )
    return spec.id


def _apply_header(state: ParserState, stmt: Header) -> None:
    if stmt.kind is None:
        if state.scope_stack:
            logger.debug("Ignoring scope-level direction %s", stmt.direction)
            return
    else:
        state.diagram_kind = stmt.kind
    if stmt.direction is not None:
        state.direction = stmt.direction


def _apply_scope_open(state: ParserState, stmt: ScopeOpen) -> None:
    scope_id = stmt.scope_id or f"subgraph-{state.scope_count}"
    state.scope_count += 1
    state.builder.declare(
        scope_id,
        label=stmt.label,
        node_type=NodeType.GROUP,
        parent_id=state.current_scope,
    )
    state.scope_stack.append(scope_id)


def _apply_scope_close(state: ParserState, stmt: ScopeClose) -> None:
    if state.scope_stack:
        state.scope_stack.pop()


def _apply_class_def(state: ParserState, stmt: ClassDef) -> None:
    for name in stmt.names:
        cls = state.class_styles.setdefault(name, ClassStyle(name=name))
        cls.styles.update(stmt.styles)


def _apply_class_assign(state: ParserState, stmt: ClassAssign) -> None:
    for node_id in stmt.node_ids:
        state.builder.declare(node_id, classes=stmt.class_names)


def _apply_node_style(state: ParserState, stmt: NodeStyle) -> None:
    state.builder.ensure(stmt.node_id)
    state.node_styles.setdefault(stmt.node_id, {}).update(stmt.styles)


def _apply_edge_style(state: ParserState, stmt: EdgeStyle) -> None:
    if stmt.applies_to_all:
        state.default_edge_style.update(stmt.styles)
        return
    for index in stmt.indices:
        state.edge_styles.setdefault(index, {}).update(stmt.styles)


def _apply_edge(state: ParserState, stmt: Edge) -> None:
    resolved = [
        [_register(state, spec, as_source=(i == 0)) for spec in group]
        for i, group in enumerate(stmt.groups)
    ]
    # A --> B --> C: the right-hand group of one link is the left-hand group of the next
    for i, link in enumerate(stmt.links):
        for source_id in resolved[i]:
            for target_id in resolved[i + 1]:
                state.builder.add_edge(
                    source_id,
                    target_id,
                    label=link.label,
                    arrow_kind=link.arrow_kind,
                    directed=link.directed,
                )


def _apply_node_decl(state: ParserState, stmt: NodeDecl) -> None:
    _register(state, stmt.node)


def _apply_skip(state: ParserState, stmt: Skip) -> None:
    pass


_HANDLERS: Dict[type, Callable[[ParserState, Statement], None]] = {
    Header: _apply_header,
    ScopeOpen: _apply_scope_open,
    ScopeClose: _apply_scope_close,
    ClassDef: _apply_class_def,
    ClassAssign: _apply_class_assign,
    NodeStyle: _apply_node_style,
    EdgeStyle: _apply_edge_style,
    Edge: _apply_edge,
    NodeDecl: _apply_node_decl,
    Skip: _apply_skip,
}


def apply_statement(state: ParserState, stmt: Statement) -> None:
    """Apply one classified statement to the parser state."""
    _HANDLERS[type(stmt)](state, stmt)


def _is_declaration(stmt: Statement) -> bool:
    return isinstance(stmt, Header) and stmt.kind is not None


def build_result(state: ParserState) -> ParseResult:
    """Materialize queued nodes and edges into a ParseResult."""
    if state.diagram_kind is None:
        return ParseResult.failure(MISSING_DECLARATION_ERROR)
    if not len(state.builder):
        return ParseResult.failure(NO_VALID_NODES_ERROR)
    nodes = state.builder.build_nodes(state.class_styles, state.node_styles)
    edges = state.builder.build_edges(state.edge_styles, state.default_edge_style)
    return ParseResult(nodes=nodes, edges=edges, direction=state.direction)


def parse_mermaid(text: str) -> ParseResult:
    """
    Parse Mermaid flowchart or state-diagram text into a ParseResult.

    Args:
        text: Diagram source

    Returns:
        ParseResult; on failure `error` is set and nodes/edges are empty
    """
    state = ParserState()
    for line_no, raw in enumerate(normalize_text(text or "").split("\n"), start=1):
        line = raw.strip()
        if not line or line.startswith(("%%", "#")):
            continue
        for part in split_statements(line):
            stmt = classify_line(part, state_mode=state.is_state_diagram)
            if state.diagram_kind is None and not _is_declaration(stmt):
                logger.debug("Line %d precedes the diagram declaration: %s", line_no, part)
                continue
            if isinstance(stmt, Skip):
                logger.debug("Skipping line %d (%s): %s", line_no, stmt.reason, part)
            apply_statement(state, stmt)

    result = build_result(state)
    if result.error:
        logger.info("Mermaid parse failed: %s", result.error)
    return result
