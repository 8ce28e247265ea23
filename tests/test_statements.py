"""
Tests for statement classification
"""

import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from flowtext.models import ArrowKind, Direction, NodeShape, NodeType
from flowtext.parsers.statements import (
    ClassAssign,
    ClassDef,
    Edge,
    EdgeStyle,
    Header,
    NodeDecl,
    NodeStyle,
    ScopeClose,
    ScopeOpen,
    Skip,
    classify_line,
    clean_label,
    parse_node_spec,
    split_edge_chain,
    split_statements,
)


class TestClassifyLine:
    """Test cases for classify_line function"""

    def test_headers(self):
        assert classify_line("flowchart LR") == Header("flowchart", Direction.LR)
        assert classify_line("graph TD") == Header("graph", Direction.TB)
        assert classify_line("stateDiagram-v2") == Header("statediagram-v2")

    def test_direction_line(self):
        assert classify_line("direction RL") == Header(kind=None, direction=Direction.RL)

    def test_subgraph_forms(self):
        """Test id[Title], bare id and quoted title subgraph headers"""
        assert classify_line("subgraph one[Title]") == ScopeOpen("one", "Title")
        assert classify_line("subgraph api") == ScopeOpen("api", "api")
        assert classify_line('subgraph "Two words"') == ScopeOpen(None, "Two words")
        assert classify_line("end") == ScopeClose()

    def test_class_def(self):
        stmt = classify_line("classDef hot,warm fill:#f96,stroke-width:2px")

        assert isinstance(stmt, ClassDef)
        assert stmt.names == ("hot", "warm")
        assert stmt.styles == {"fill": "#f96", "stroke-width": "2px"}

    def test_class_assign(self):
        stmt = classify_line("class A,B hot")

        assert stmt == ClassAssign(node_ids=("A", "B"), class_names=("hot",))

    def test_style(self):
        stmt = classify_line("style A fill:#fff,color:rgb(1,2,3)")

        assert isinstance(stmt, NodeStyle)
        assert stmt.node_id == "A"
        assert stmt.styles == {"fill": "#fff", "color": "rgb(1,2,3)"}

    def test_link_style(self):
        stmt = classify_line("linkStyle 0,2 stroke:#f00")

        assert isinstance(stmt, EdgeStyle)
        assert stmt.indices == (0, 2)
        assert not stmt.applies_to_all

        default = classify_line("linkStyle default stroke:#f00")
        assert default.applies_to_all
        assert default.styles == {"stroke": "#f00"}

    def test_directives_are_skipped(self):
        """Test unsupported directives classify as Skip"""
        for line in ["accTitle: Hello", "click A callback", "style A", "classDef x"]:
            assert isinstance(classify_line(line), Skip)

    def test_node_ids_that_look_like_keywords(self):
        """Test ids that start with a directive keyword are still nodes"""
        stmt = classify_line("title --> notes")

        assert isinstance(stmt, Edge)
        assert [g[0].id for g in stmt.groups] == ["title", "notes"]

        for line, ids in [
            ("style-x --> B", ["style-x", "B"]),
            ("class-a --> B", ["class-a", "B"]),
            ("click-btn --> B", ["click-btn", "B"]),
            ("click --> B", ["click", "B"]),
        ]:
            stmt = classify_line(line)
            assert isinstance(stmt, Edge), line
            assert [g[0].id for g in stmt.groups] == ids

    def test_edge_and_node(self):
        edge = classify_line("A --> B")
        assert isinstance(edge, Edge)
        assert [g[0].id for g in edge.groups] == ["A", "B"]

        decl = classify_line("A[Label]")
        assert isinstance(decl, NodeDecl)
        assert decl.node.label == "Label"

    def test_unrecognized(self):
        assert classify_line("??? !!!") == Skip("unrecognized")
        assert classify_line("   ") == Skip("empty")

    def test_state_mode_only_constructs(self):
        """Test state syntax is only recognised in state mode"""
        stmt = classify_line("Idle : waiting", state_mode=True)
        assert isinstance(stmt, NodeDecl)
        assert stmt.node.label == "waiting"

        assert isinstance(classify_line("[*]", state_mode=True), Skip)
        assert isinstance(classify_line("Idle : waiting"), Skip)


class TestParseNodeSpec:
    """Test cases for parse_node_spec function"""

    def test_bare_id(self):
        spec = parse_node_spec("A")

        assert spec.id == "A"
        assert spec.label is None
        assert spec.node_type is None

    def test_classes_suffix(self):
        spec = parse_node_spec("A[Go]:::hot:::cold")

        assert spec.classes == ("hot", "cold")
        assert spec.label == "Go"

    def test_trapezoid_and_flag(self):
        assert parse_node_spec("T[\\Out\\]").shape == NodeShape.PARALLELOGRAM
        flag = parse_node_spec("F>Flag]")
        assert flag.shape == NodeShape.RECTANGLE
        assert flag.label == "Flag"

    def test_subroutine(self):
        spec = parse_node_spec("S[[Sub]]")

        assert spec.shape == NodeShape.RECTANGLE
        assert spec.node_type == NodeType.PROCESS
        assert spec.label == "Sub"

    def test_empty_label_falls_back_to_id(self):
        assert parse_node_spec('A[""]').label == "A"

    def test_state_marker(self):
        assert parse_node_spec("[*]", state_mode=True).marker
        assert parse_node_spec("[*]") is None

    def test_invalid(self):
        assert parse_node_spec("not a node") is None
        assert parse_node_spec("") is None


class TestSplitEdgeChain:
    """Test cases for split_edge_chain function"""

    def test_no_arrow(self):
        assert split_edge_chain("A[Label]") is None

    def test_longest_arrow_wins(self):
        segments, links = split_edge_chain("A ----> B")

        assert [s.strip() for s in segments] == ["A", "B"]
        assert len(links) == 1
        assert links[0].directed

    def test_short_links(self):
        """Test two-character links next to longer arrows"""
        segments, links = split_edge_chain("A -- B --> C -> D")

        assert [s.strip() for s in segments] == ["A", "B", "C", "D"]
        assert [(link.arrow_kind, link.directed) for link in links] == [
            (ArrowKind.SOLID, False),
            (ArrowKind.SOLID, True),
            (ArrowKind.SOLID, True),
        ]

    def test_mixed_kinds(self):
        segments, links = split_edge_chain("A --> B -.- C ==> D")

        assert [s.strip() for s in segments] == ["A", "B", "C", "D"]
        assert [(link.arrow_kind, link.directed) for link in links] == [
            (ArrowKind.SOLID, True),
            (ArrowKind.DASHED, False),
            (ArrowKind.THICK, True),
        ]

    def test_arrow_inside_brackets_is_label(self):
        segments, links = split_edge_chain("A[x --> y] --> B")

        assert len(links) == 1
        assert segments[0].strip() == "A[x --> y]"


class TestHelpers:
    """Test cases for label and statement helpers"""

    def test_clean_label(self):
        assert clean_label('"Quoted"') == ("Quoted", None)
        assert clean_label("a\\nb") == ("a\nb", None)
        assert clean_label("mdi:mdi-database Store") == ("Store", "mdi:mdi-database")

    def test_split_statements(self):
        assert split_statements('A --> B; C["x;y"]; ') == ["A --> B", 'C["x;y"]']
