"""
Terminal output for the flowtext CLI
"""

import sys
from enum import Enum
from typing import Optional, TextIO

from flowtext.models import GraphEdge, ParseResult


class Level(Enum):
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Colors:
    """ANSI escape codes"""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


# level -> (marker, colour)
_LEVEL_STYLES = {
    Level.DEBUG: ("·", Colors.DIM),
    Level.INFO: ("ℹ️", Colors.BLUE),
    Level.SUCCESS: ("✅", Colors.GREEN),
    Level.WARNING: ("⚠️", Colors.YELLOW),
    Level.ERROR: ("❌", Colors.RED),
}
_ARROWS = {"solid": "-->", "dashed": "-.->", "thick": "==>"}
_OPEN_LINKS = {"solid": "---", "dashed": "-.-", "thick": "==="}


def _edge_line(index: int, edge: GraphEdge) -> str:
    arrows = _ARROWS if edge.directed else _OPEN_LINKS
    arrow = arrows[edge.arrow_kind.value]
    text = f"  {Colors.BOLD}{index}.{Colors.RESET} {edge.source_id} {arrow} {edge.target_id}"
    if edge.label:
        text += f" [{edge.label.splitlines()[0]}]"
    if edge.source_handle and edge.target_handle:
        sides = f"{edge.source_handle.value}/{edge.target_handle.value}"
        text += f" {Colors.DIM}({sides}){Colors.RESET}"
    return text


class FlowTextUI:
    """Step-by-step progress and result previews for the CLI"""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None):
        self.verbose = verbose
        self.stream = stream
        self.current_step = 0
        self.total_steps = 0

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream or sys.stdout)

    def set_total_steps(self, total: int):
        self.total_steps = total
        self.current_step = 0

    def step(self, title: str):
        """Announce the next pipeline step"""
        self.current_step += 1
        progress = str(self.current_step)
        if self.total_steps:
            progress += f"/{self.total_steps}"
        self._print(f"\n{Colors.BOLD}{Colors.BLUE}▶ [{progress}] {title}{Colors.RESET}")

    def log(self, level: Level, message: str, details: Optional[str] = None):
        if level == Level.DEBUG and not self.verbose:
            return
        marker, color = _LEVEL_STYLES[level]
        self._print(f"{color}{marker} {message}{Colors.RESET}")
        # details are always shown for problems, otherwise only when verbose
        if details and (self.verbose or level in (Level.ERROR, Level.WARNING)):
            for line in details.splitlines():
                if line.strip():
                    self._print(f"  {Colors.DIM}{line}{Colors.RESET}")

    def success(self, message: str, details: Optional[str] = None):
        self.log(Level.SUCCESS, message, details)

    def info(self, message: str, details: Optional[str] = None):
        self.log(Level.INFO, message, details)

    def warning(self, message: str, details: Optional[str] = None):
        self.log(Level.WARNING, message, details)

    def error(self, message: str, details: Optional[str] = None):
        self.log(Level.ERROR, message, details)

    def debug(self, message: str, details: Optional[str] = None):
        self.log(Level.DEBUG, message, details)

    def show_edges_preview(self, result: ParseResult, max_show: int = 5):
        """Print the first few edges with their anchors"""
        if not result.edges:
            self.warning("Diagram has no edges")
            return
        shown = result.edges[:max_show]
        self.info(f"Edges ({len(shown)} of {len(result.edges)}):")
        for i, edge in enumerate(shown, start=1):
            self._print(_edge_line(i, edge))
        hidden = len(result.edges) - len(shown)
        if hidden > 0:
            self._print(f"  {Colors.DIM}... {hidden} more{Colors.RESET}")

    def show_summary(self, result: ParseResult, processing_time: float):
        """Print node/edge counts for the finished run"""
        groups = sum(1 for n in result.nodes if n.type.value == "group")
        bullet = f"  {Colors.CYAN}•{Colors.RESET}"
        self._print(f"\n{Colors.BOLD}{Colors.GREEN}Done: {result.title or 'diagram'}{Colors.RESET}")
        self._print(
            f"{bullet} {len(result.nodes)} nodes ({groups} scopes), {len(result.edges)} edges"
        )
        if result.direction:
            self._print(f"{bullet} direction {result.direction.value}")
        self._print(f"{bullet} {processing_time:.2f}s")


ui = FlowTextUI()


def set_verbose(verbose: bool):
    """Toggle debug output on the shared ui"""
    ui.verbose = verbose
