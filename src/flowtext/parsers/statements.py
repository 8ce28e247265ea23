"""
Statement classification for the Mermaid grammar.

Every non-empty line is turned into exactly one Statement variant by
classify_line(); the parser then applies it with a single dispatch table.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from flowtext.graph_builder import parse_style_props
from flowtext.models import ArrowKind, Direction, NodeShape, NodeType

ID = r"[A-Za-z0-9_][\w-]*"

HEADER_RE = re.compile(
    r"^(flowchart|graph|stateDiagram-v2|stateDiagram)\s*(TB|TD|LR|RL|BT)?\s*$",
    re.IGNORECASE,
)
DIRECTION_RE = re.compile(r"^direction\s+(TB|TD|LR|RL|BT)\s*$", re.IGNORECASE)
SUBGRAPH_RE = re.compile(r"^subgraph(?:\s+(.*?))?\s*$", re.IGNORECASE)
SUBGRAPH_TITLE_RE = re.compile(rf"^({ID})\s*\[(.*)\]$")
STATE_BLOCK_RE = re.compile(
    rf'^state\s+(?:"([^"]*)"\s+as\s+({ID})|({ID}))\s*\{{\s*$', re.IGNORECASE
)
STATE_ALIAS_RE = re.compile(rf'^state\s+"([^"]*)"\s+as\s+({ID})\s*$', re.IGNORECASE)
STATE_KIND_RE = re.compile(rf"^state\s+({ID})\s*<<(choice|fork|join)>>\s*$", re.IGNORECASE)
STATE_LABEL_RE = re.compile(rf"^({ID})\s*:(?!::)\s*(.+)$")
SCOPE_END_RE = re.compile(r"^(?:end|\})$", re.IGNORECASE)
CLASSDEF_RE = re.compile(r"^classDef\s+([\w-]+(?:\s*,\s*[\w-]+)*)\s+(.+)$")
CLASS_ASSIGN_RE = re.compile(rf"^class\s+({ID}(?:\s*,\s*{ID})*)\s+([\w-]+(?:,[\w-]+)*)$")
STYLE_RE = re.compile(rf"^style\s+({ID})\s+(.+)$")
LINKSTYLE_RE = re.compile(r"^linkStyle\s+(default|\d+(?:\s*,\s*\d+)*)\s+(.+)$")
IGNORED_DIRECTIVE_RE = re.compile(
    r"^(?:%%|#|(?:accTitle|accDescr)\s*[:{]|note\s+(?:left|right|over)\b|"
    r"(?:linkStyle|style|classDef|class|click|callback|interpolate)(?:\s|$)(?!\s*[-=]))",
    re.IGNORECASE,
)
ICON_RE = re.compile(r"\b(fa[bsrl]?|mdi):([\w-]+)")
BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
CLASS_SUFFIX = r"((?::::[\w-]+(?:,[\w-]+)*)*)"
STATE_MARKER = "[*]"

# Arrow tokens; at a given position the longest match wins.
ARROW_TOKENS: List[Tuple["re.Pattern[str]", ArrowKind, bool]] = [
    (re.compile(r"={2,}>"), ArrowKind.THICK, True),
    (re.compile(r"-\.+->"), ArrowKind.DASHED, True),
    (re.compile(r"-{2,}>"), ArrowKind.SOLID, True),
    (re.compile(r"={3,}"), ArrowKind.THICK, False),
    (re.compile(r"-\.+-"), ArrowKind.DASHED, False),
    (re.compile(r"-{3,}"), ArrowKind.SOLID, False),
    (re.compile(r"->"), ArrowKind.SOLID, True),
    (re.compile(r"--"), ArrowKind.SOLID, False),
]

# Shape brackets, most specific first so `([...])` is never read as `(...)`.
SHAPE_BRACKETS: List[Tuple[str, str, NodeType, NodeShape]] = [
    ("([", "])", NodeType.START, NodeShape.CAPSULE),
    ("[[", "]]", NodeType.PROCESS, NodeShape.RECTANGLE),
    ("[(", ")]", NodeType.CUSTOM, NodeShape.CYLINDER),
    ("((", "))", NodeType.END, NodeShape.CIRCLE),
    ("{{", "}}", NodeType.CUSTOM, NodeShape.HEXAGON),
    ("[/", "/]", NodeType.PROCESS, NodeShape.PARALLELOGRAM),
    ("[\\", "\\]", NodeType.PROCESS, NodeShape.PARALLELOGRAM),
    ("(", ")", NodeType.PROCESS, NodeShape.ROUNDED),
    ("{", "}", NodeType.DECISION, NodeShape.DIAMOND),
    ("[", "]", NodeType.PROCESS, NodeShape.RECTANGLE),
    (">", "]", NodeType.PROCESS, NodeShape.RECTANGLE),
]
SHAPE_PATTERNS = [
    (
        re.compile(rf"^({ID})\s*{re.escape(open_)}(.*){re.escape(close)}{CLASS_SUFFIX}$"),
        node_type,
        shape,
    )
    for open_, close, node_type, shape in SHAPE_BRACKETS
]
BARE_NODE_RE = re.compile(rf"^({ID}){CLASS_SUFFIX}$")


@dataclass(frozen=True)
class NodeSpec:
    id: str
    label: Optional[str] = None
    node_type: Optional[NodeType] = None
    shape: Optional[NodeShape] = None
    classes: Tuple[str, ...] = ()
    icon: Optional[str] = None
    marker: bool = False


@dataclass(frozen=True)
class Link:
    arrow_kind: ArrowKind = ArrowKind.SOLID
    directed: bool = True
    label: Optional[str] = None


@dataclass(frozen=True)
class Header:
    kind: Optional[str]  # None for a bare `direction XX` line
    direction: Optional[Direction] = None


@dataclass(frozen=True)
class ScopeOpen:
    scope_id: Optional[str]
    label: str


@dataclass(frozen=True)
class ScopeClose:
    pass


@dataclass(frozen=True)
class ClassDef:
    names: Tuple[str, ...]
    styles: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassAssign:
    node_ids: Tuple[str, ...]
    class_names: Tuple[str, ...]


@dataclass(frozen=True)
class NodeStyle:
    node_id: str
    styles: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EdgeStyle:
    indices: Tuple[int, ...]
    styles: Dict[str, str] = field(default_factory=dict)
    applies_to_all: bool = False


@dataclass(frozen=True)
class Edge:
    groups: Tuple[Tuple[NodeSpec, ...], ...]  # one more group than links
    links: Tuple[Link, ...]


@dataclass(frozen=True)
class NodeDecl:
    node: NodeSpec


@dataclass(frozen=True)
class Skip:
    reason: str


Statement = Union[
    Header,
    ScopeOpen,
    ScopeClose,
    ClassDef,
    ClassAssign,
    NodeStyle,
    EdgeStyle,
    Edge,
    NodeDecl,
    Skip,
]


def _split_outside(text: str, sep: str) -> List[str]:
    """Split on sep where it is not inside quotes or brackets."""
    parts: List[str] = []
    depth = 0
    in_quote = False
    start = 0
    for i, ch in enumerate(text):
        if ch == '"':
            in_quote = not in_quote
        elif in_quote:
            continue
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        elif ch == sep and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


def split_statements(line: str) -> List[str]:
    """Split a physical line into `;`-separated statements."""
    return [part.strip() for part in _split_outside(line, ";") if part.strip()]


def clean_label(raw: str) -> Tuple[str, Optional[str]]:
    """
    Return (label, icon) for a raw bracket body.

    Quotes are removed, `\\n` escapes and `<br>` tags become newlines and an
    icon-font token is stripped. When only the icon remains, its name
    (with separators as spaces) becomes the label.
    """
    text = raw.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    text = BR_RE.sub("\n", text.replace("\\n", "\n"))
    icon = None
    m = ICON_RE.search(text)
    if m:
        icon = m.group(0)
        text = (text[: m.start()] + text[m.end() :]).strip()
        if not text:
            name = re.sub(r"^(?:fa|mdi)-", "", m.group(2))
            text = re.sub(r"[-_]+", " ", name).strip()
    return text.strip(" \t"), icon


def _class_names(suffix: Optional[str]) -> Tuple[str, ...]:
    if not suffix:
        return ()
    return tuple(name for name in re.split(r":::|,", suffix) if name)


def parse_node_spec(text: str, state_mode: bool = False) -> Optional[NodeSpec]:
    """Parse `id`, `id:::cls` or `id<bracket>label<bracket>` into a NodeSpec."""
    text = text.strip()
    if not text:
        return None
    if state_mode and text == STATE_MARKER:
        return NodeSpec(id=STATE_MARKER, marker=True)
    for pattern, node_type, shape in SHAPE_PATTERNS:
        m = pattern.match(text)
        if m:
            node_id, body, suffix = m.group(1), m.group(2), m.group(3)
            label, icon = clean_label(body)
            return NodeSpec(
                id=node_id,
                label=label or node_id,
                node_type=node_type,
                shape=shape,
                classes=_class_names(suffix),
                icon=icon,
            )
    m = BARE_NODE_RE.match(text)
    if m:
        return NodeSpec(id=m.group(1), classes=_class_names(m.group(2)))
    return None


def _match_arrow(text: str, pos: int) -> Optional[Tuple[str, ArrowKind, bool]]:
    best = None
    for pattern, kind, directed in ARROW_TOKENS:
        m = pattern.match(text, pos)
        if m and (best is None or len(m.group(0)) > len(best[0])):
            best = (m.group(0), kind, directed)
    return best


def _read_pipe_label(text: str, pos: int) -> Tuple[Optional[str], int]:
    """Read an optional `|label|` starting at pos (after whitespace)."""
    j = pos
    while j < len(text) and text[j] in " \t":
        j += 1
    if j < len(text) and text[j] == "|":
        close = text.find("|", j + 1)
        if close != -1:
            label, _ = clean_label(text[j + 1 : close])
            return label, close + 1
    return None, pos


def split_edge_chain(text: str) -> Optional[Tuple[List[str], List[Link]]]:
    """
    Split `A --> B -->|x| C` into endpoint segments and links.

    Arrow tokens inside quotes or brackets are part of a label, not links.
    Returns None when the text holds no arrow.
    """
    segments: List[str] = []
    links: List[Link] = []
    depth = 0
    in_quote = False
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == '"':
            in_quote = not in_quote
        elif not in_quote:
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth = max(0, depth - 1)
            elif depth == 0 and ch in "-=":
                arrow = _match_arrow(text, i)
                if arrow:
                    token, kind, directed = arrow
                    segments.append(text[start:i])
                    label, end = _read_pipe_label(text, i + len(token))
                    links.append(Link(arrow_kind=kind, directed=directed, label=label))
                    start = i = end
                    continue
        i += 1
    segments.append(text[start:])
    if not links:
        return None
    return segments, links


def _parse_edge(text: str, state_mode: bool) -> Optional[Edge]:
    chain = split_edge_chain(text)
    if chain is None:
        return None
    segments, links = chain
    if state_mode:
        m = STATE_LABEL_RE.match(segments[-1].strip())
        if m:
            segments[-1] = m.group(1)
            last = links[-1]
            label, _ = clean_label(m.group(2))
            links[-1] = Link(arrow_kind=last.arrow_kind, directed=last.directed, label=label)
    groups: List[Tuple[NodeSpec, ...]] = []
    for segment in segments:
        specs = []
        for part in _split_outside(segment, "&"):
            spec = parse_node_spec(part, state_mode)
            if spec is None:
                return None
            specs.append(spec)
        groups.append(tuple(specs))
    return Edge(groups=tuple(groups), links=tuple(links))


def _parse_scope_title(title: str) -> ScopeOpen:
    title = title.strip()
    m = SUBGRAPH_TITLE_RE.match(title)
    if m:
        label, _ = clean_label(m.group(2))
        return ScopeOpen(scope_id=m.group(1), label=label or m.group(1))
    if re.fullmatch(ID, title):
        return ScopeOpen(scope_id=title, label=title)
    label, _ = clean_label(title)
    return ScopeOpen(scope_id=None, label=label)


def classify_line(line: str, state_mode: bool = False) -> Statement:
    """Classify one statement into its Statement variant."""
    line = line.strip()
    if not line:
        return Skip("empty")

    m = HEADER_RE.match(line)
    if m:
        direction = Direction.from_token(m.group(2)) if m.group(2) else None
        return Header(kind=m.group(1).lower(), direction=direction)
    m = DIRECTION_RE.match(line)
    if m:
        return Header(kind=None, direction=Direction.from_token(m.group(1)))

    m = SUBGRAPH_RE.match(line)
    if m:
        return _parse_scope_title(m.group(1) or "")
    m = STATE_BLOCK_RE.match(line)
    if m:
        if m.group(2):
            return ScopeOpen(scope_id=m.group(2), label=m.group(1))
        return ScopeOpen(scope_id=m.group(3), label=m.group(3))
    if SCOPE_END_RE.match(line):
        return ScopeClose()

    m = CLASSDEF_RE.match(line)
    if m:
        styles = parse_style_props(m.group(2))
        if styles:
            names = tuple(n.strip() for n in m.group(1).split(","))
            return ClassDef(names=names, styles=styles)
    m = CLASS_ASSIGN_RE.match(line)
    if m:
        node_ids = tuple(n.strip() for n in m.group(1).split(","))
        return ClassAssign(node_ids=node_ids, class_names=tuple(m.group(2).split(",")))
    m = STYLE_RE.match(line)
    if m:
        styles = parse_style_props(m.group(2))
        if styles:
            return NodeStyle(node_id=m.group(1), styles=styles)
    m = LINKSTYLE_RE.match(line)
    if m:
        styles = parse_style_props(m.group(2))
        if styles:
            if m.group(1) == "default":
                return EdgeStyle(indices=(), styles=styles, applies_to_all=True)
            indices = tuple(int(i) for i in m.group(1).split(","))
            return EdgeStyle(indices=indices, styles=styles)
    if IGNORED_DIRECTIVE_RE.match(line):
        return Skip("directive")

    if state_mode:
        m = STATE_ALIAS_RE.match(line)
        if m:
            return NodeDecl(NodeSpec(id=m.group(2), label=m.group(1)))
        m = STATE_KIND_RE.match(line)
        if m:
            if m.group(2).lower() == "choice":
                return NodeDecl(
                    NodeSpec(
                        id=m.group(1),
                        node_type=NodeType.DECISION,
                        shape=NodeShape.DIAMOND,
                    )
                )
            return NodeDecl(NodeSpec(id=m.group(1), shape=NodeShape.RECTANGLE))

    edge = _parse_edge(line, state_mode)
    if edge is not None:
        return edge

    if state_mode:
        m = STATE_LABEL_RE.match(line)
        if m:
            label, _ = clean_label(m.group(2))
            return NodeDecl(NodeSpec(id=m.group(1), label=label))

    spec = parse_node_spec(line, state_mode)
    if spec is not None and not spec.marker:
        return NodeDecl(spec)
    return Skip("unrecognized")
