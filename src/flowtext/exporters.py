"""
Export functionality for parse results
"""

from typing import Dict, Optional

from flowtext.models import ParseResult
from flowtext.schemas import ParseResultModel
from flowtext.scope_utils import scope_depth


def export_json(result: ParseResult, out_path: Optional[str] = None) -> str:
    """
    Export a parse result to JSON format.

    Args:
        result: ParseResult to export
        out_path: Optional output file path

    Returns:
        JSON string representation
    """
    content = ParseResultModel.from_result(result).model_dump_json(indent=2)
    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(content)
    return content


def _safe(text: Optional[str]) -> str:
    return (text or "").replace("|", "\\|").replace("\n", "<br>")


def export_md(result: ParseResult, out_path: Optional[str] = None) -> str:
    """
    Export a parse result to Markdown format
    """
    md_content = f"# {_safe(result.title) or 'Diagram'}\n\n"

    if result.error:
        md_content += f"**Error:** {result.error}\n"
    else:
        direction = result.direction.value if result.direction else "TB"
        md_content += f"**Direction:** {direction}\n\n"

        md_content += "## Nodes\n\n"
        md_content += "| ID | Label | Type | Shape | Parent | Depth |\n"
        md_content += "|----|-------|------|-------|--------|-------|\n"
        parents: Dict[str, Optional[str]] = {n.id: n.parent_id for n in result.nodes}
        cache: Dict[str, int] = {}
        for node in result.nodes:
            shape = node.shape.value if node.shape else ""
            md_content += (
                f"| {node.id} | {_safe(node.label)} | {node.type.value} | {shape} "
                f"| {node.parent_id or ''} | {scope_depth(node.id, parents, cache)} |\n"
            )

        md_content += "\n## Edges\n\n"
        if not result.edges:
            md_content += "No edges.\n"
        else:
            md_content += "| ID | Source | Target | Label | Arrow | Handles |\n"
            md_content += "|----|--------|--------|-------|-------|---------|\n"
            for edge in result.edges:
                handles = ""
                if edge.source_handle and edge.target_handle:
                    handles = f"{edge.source_handle.value} → {edge.target_handle.value}"
                md_content += (
                    f"| {edge.id} | {edge.source_id} | {edge.target_id} "
                    f"| {_safe(edge.label)} | {edge.arrow_kind.value} | {handles} |\n"
                )

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(md_content)

    return md_content
