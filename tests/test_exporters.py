"""
Tests for exporters module
"""

import dataclasses
import json
import os
import sys

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from flowtext.anchors import assign_anchors
from flowtext.exporters import export_json, export_md
from flowtext.models import ParseResult
from flowtext.parsers import parse_flow_dsl, parse_mermaid


class TestExportJson:
    """Test cases for export_json function"""

    def test_export_mermaid_result(self):
        """Test exporting a parsed Mermaid diagram"""
        result = parse_mermaid("flowchart LR\nsubgraph g[Group]\nA -.->|maybe| B\nend")

        data = json.loads(export_json(result))

        assert data["direction"] == "LR"
        assert data["error"] is None
        assert [n["id"] for n in data["nodes"]] == ["g", "A", "B"]
        assert data["nodes"][0]["type"] == "group"
        assert data["nodes"][1]["parent_id"] == "g"
        edge = data["edges"][0]
        assert edge["arrow_kind"] == "dashed"
        assert edge["label"] == "maybe"
        assert edge["style_overrides"] == {"stroke-dasharray": "5 5"}
        assert edge["source_handle"] is None

    def test_export_positions_and_handles(self):
        result = parse_flow_dsl("A -> B")
        result = dataclasses.replace(
            result, edges=assign_anchors(result.nodes, result.edges)
        )

        data = json.loads(export_json(result))

        assert data["title"] == "Untitled Flow"
        assert data["nodes"][1]["position"] == {"x": 250.0, "y": 0.0}
        assert data["edges"][0]["source_handle"] == "right"
        assert data["edges"][0]["target_handle"] == "left"

    def test_export_error_result(self):
        data = json.loads(export_json(ParseResult.failure("boom")))

        assert data["error"] == "boom"
        assert data["nodes"] == []

    def test_export_to_file(self, tmp_path):
        out_path = tmp_path / "graph.json"

        content = export_json(parse_mermaid("flowchart TD\nA --> B"), str(out_path))

        assert out_path.read_text(encoding="utf-8") == content


class TestExportMd:
    """Test cases for export_md function"""

    def test_export_tables(self):
        content = """flowchart TD
    subgraph g[Group]
        A[Start here] -->|a| B
    end
"""
        md = export_md(parse_mermaid(content))

        assert md.startswith("# Diagram\n")
        assert "**Direction:** TB" in md
        assert "| A | Start here | process | rectangle | g | 1 |" in md
        assert "| g | Group | group | rectangle |  | 0 |" in md
        assert "| edge-0 | A | B | a | solid |  |" in md

    def test_export_no_edges(self):
        md = export_md(parse_flow_dsl('flow: "Solo"\n[start] Only'))

        assert md.startswith("# Solo\n")
        assert "No edges." in md

    def test_export_error(self):
        md = export_md(ParseResult.failure("Missing chart type declaration."))

        assert "**Error:** Missing chart type declaration." in md
        assert "## Nodes" not in md

    def test_multiline_label_is_escaped(self, tmp_path):
        out_path = tmp_path / "graph.md"
        result = parse_mermaid('flowchart TD\nA["one\ntwo"]')

        md = export_md(result, str(out_path))

        assert "| A | one<br>two |" in md
        assert out_path.exists()
