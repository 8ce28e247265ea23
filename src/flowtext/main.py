#!/usr/bin/env python3
"""
flowtext - CLI
"Throw in diagram text, get a graph model with connection anchors."

Inputs:
- Mermaid file (.mmd/.mermaid)
- FlowText DSL file (.flow/.fm)
- Optional YAML config (layout spacing, default node size, log level)
- Optional layout JSON from an external layout engine

Outputs:
- JSON and/or Markdown description of the parsed graph.

Examples:
    flowtext parse --mermaid examples/checkout.mmd --out-dir reports/
    flowtext parse --dsl examples/onboarding.flow --anchors --format both --out-dir reports/
    flowtext parse --diagram examples/checkout.mmd --config flowtext.yaml --verbose
    flowtext anchor --diagram examples/checkout.mmd --layout layout.json --out-dir reports/
"""

import argparse
import dataclasses
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError

from flowtext.anchors import apply_layout, assign_anchors
from flowtext.cliui import set_verbose, ui
from flowtext.config import FlowTextConfig, default_config, load_config
from flowtext.exporters import export_json, export_md
from flowtext.models import ParseResult
from flowtext.parsers import parse_flow_dsl, parse_mermaid
from flowtext.schemas import LayoutPayload

logger = logging.getLogger(__name__)

MERMAID_SUFFIXES = (".mmd", ".mermaid")
DSL_SUFFIXES = (".flow", ".fm")


def _detect_format(path: str) -> Optional[str]:
    lowered = path.lower()
    if lowered.endswith(MERMAID_SUFFIXES):
        return "mermaid"
    if lowered.endswith(DSL_SUFFIXES):
        return "dsl"
    return None


def _prepare_output_paths(
    diagram_file: str, out_dir: str, base_name_override: Optional[str] = None
) -> Tuple[Path, Path, Path]:
    """Return output directory and file paths for graph exports."""
    target_dir = Path(out_dir).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    base_source = base_name_override or Path(diagram_file).stem or "diagram"
    base_name = Path(base_source).stem or "diagram"
    json_path = target_dir / f"{base_name}_graph.json"
    md_path = target_dir / f"{base_name}_graph.md"
    return target_dir, json_path, md_path


def _resolve_diagram(args: argparse.Namespace) -> Tuple[str, str]:
    """Return (path, format) from the parse arguments or exit with code 2."""
    if getattr(args, "mermaid", None):
        return args.mermaid, "mermaid"
    if getattr(args, "dsl", None):
        return args.dsl, "dsl"
    if args.diagram:
        diagram_format = _detect_format(args.diagram)
        if diagram_format is None:
            ui.error(
                f"Unsupported diagram file format for {args.diagram}",
                "Supported: Mermaid (.mmd/.mermaid) or FlowText DSL (.flow/.fm)",
            )
            sys.exit(2)
        return args.diagram, diagram_format
    ui.error(
        "No diagram file specified",
        "Please specify a diagram file using --diagram, --mermaid, or --dsl",
    )
    sys.exit(2)


def _load_settings(config_path: Optional[str]) -> FlowTextConfig:
    if not config_path:
        return default_config()
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValueError) as exc:
        ui.error("Invalid configuration", str(exc))
        sys.exit(2)


def _configure_logging(config: FlowTextConfig, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.observability.log_level.upper()
    logging.basicConfig(level=level)


def parse_file(path: str, diagram_format: str, config: FlowTextConfig) -> ParseResult:
    """Read a diagram file and parse it with the grammar for its format."""
    text = Path(path).read_text(encoding="utf-8")
    if diagram_format == "dsl":
        return parse_flow_dsl(text, layout=config.layout)
    return parse_mermaid(text)


def _with_anchors(result: ParseResult, config: FlowTextConfig) -> ParseResult:
    edges = assign_anchors(result.nodes, result.edges, node_size=config.nodes)
    return dataclasses.replace(result, edges=edges)


def _write_outputs(
    result: ParseResult, fmt: str, json_path: Path, md_path: Path
) -> List[Path]:
    written: List[Path] = []
    if fmt in ("json", "both"):
        export_json(result, str(json_path))
        written.append(json_path)
    if fmt in ("md", "both"):
        export_md(result, str(md_path))
        written.append(md_path)
    return written


def _load_or_exit(path: str, diagram_format: str, config: FlowTextConfig) -> ParseResult:
    try:
        result = parse_file(path, diagram_format, config)
    except FileNotFoundError:
        ui.error(f"Diagram file not found: {path}")
        sys.exit(2)
    if result.error:
        ui.error("Failed to parse diagram", result.error)
        sys.exit(1)
    ui.success(f"Parsed {len(result.nodes)} nodes and {len(result.edges)} edges")
    return result


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--diagram",
        type=str,
        help="Path to diagram file (auto-detects format from extension)",
    )
    parser.add_argument("--config", type=str, help="Optional YAML config file")
    parser.add_argument(
        "--out-dir",
        type=str,
        default=".",
        help="Directory for exported files (default: current directory)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output with detailed logs",
    )


def main(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(prog="flowtext", description="flowtext CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_parse = sub.add_parser("parse", help="Parse a diagram into a graph model")
    p_parse.add_argument("--mermaid", type=str, help="Path to Mermaid (.mmd/.mermaid)")
    p_parse.add_argument("--dsl", type=str, help="Path to FlowText DSL (.flow/.fm)")
    _add_common_arguments(p_parse)
    p_parse.add_argument(
        "--format",
        choices=["json", "md", "both"],
        default="json",
        help="Output format (default: json)",
    )
    p_parse.add_argument(
        "--anchors",
        action="store_true",
        help="Assign connection anchors from the positions the grammar produced",
    )

    p_anchor = sub.add_parser(
        "anchor", help="Apply external layout positions and assign connection anchors"
    )
    _add_common_arguments(p_anchor)
    p_anchor.add_argument(
        "--layout",
        type=str,
        required=True,
        help='Layout JSON: {"nodes": [{"id", "x", "y", "width"?, "height"?}]}',
    )

    args = p.parse_args(argv)

    set_verbose(args.verbose)
    config = _load_settings(args.config)
    _configure_logging(config, args.verbose)
    logger.debug("Using config: %s", config)
    start_time = time.time()

    if args.cmd == "parse":
        ui.set_total_steps(3 if args.anchors else 2)
        diagram_file, diagram_format = _resolve_diagram(args)

        ui.step("Parsing diagram")
        ui.info(f"Loading {diagram_format} diagram: {diagram_file}")
        result = _load_or_exit(diagram_file, diagram_format, config)

        if args.anchors:
            ui.step("Assigning connection anchors")
            result = _with_anchors(result, config)
            ui.show_edges_preview(result)

        ui.step("Exporting")
        _, json_path, md_path = _prepare_output_paths(diagram_file, args.out_dir)
        for path in _write_outputs(result, args.format, json_path, md_path):
            ui.success(f"Wrote {path}")
        ui.show_summary(result, time.time() - start_time)

    elif args.cmd == "anchor":
        ui.set_total_steps(3)
        diagram_file, diagram_format = _resolve_diagram(args)

        ui.step("Parsing diagram")
        result = _load_or_exit(diagram_file, diagram_format, config)

        ui.step("Applying layout and assigning anchors")
        try:
            with open(args.layout, "r", encoding="utf-8") as f:
                payload = LayoutPayload.model_validate(json.load(f))
        except FileNotFoundError:
            ui.error(f"Layout file not found: {args.layout}")
            sys.exit(2)
        except (json.JSONDecodeError, ValidationError) as exc:
            ui.error("Invalid layout file", str(exc))
            sys.exit(2)
        placements = payload.placements()
        missing = [n.id for n in result.nodes if n.id not in placements and n.position is None]
        if missing:
            ui.warning(
                f"{len(missing)} nodes have no position",
                "Edges touching them keep their handles: " + ", ".join(missing),
            )
        result = _with_anchors(apply_layout(result, placements), config)
        ui.show_edges_preview(result)

        ui.step("Exporting")
        _, json_path, _ = _prepare_output_paths(diagram_file, args.out_dir)
        export_json(result, str(json_path))
        ui.success(f"Wrote {json_path}")
        ui.show_summary(result, time.time() - start_time)


if __name__ == "__main__":
    main()
