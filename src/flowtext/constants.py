"""
Constants for flowtext
"""

from flowtext.models import NodeShape, NodeType

# Type -> default palette colour and shape
NODE_DEFAULTS = {
    NodeType.START: {"color": "emerald", "shape": NodeShape.CAPSULE},
    NodeType.END: {"color": "red", "shape": NodeShape.CIRCLE},
    NodeType.DECISION: {"color": "amber", "shape": NodeShape.DIAMOND},
    NodeType.CUSTOM: {"color": "violet", "shape": NodeShape.HEXAGON},
    NodeType.PROCESS: {"color": "slate", "shape": NodeShape.ROUNDED},
    NodeType.ANNOTATION: {"color": "yellow", "shape": NodeShape.RECTANGLE},
    NodeType.SECTION: {"color": "slate", "shape": NodeShape.RECTANGLE},
    NodeType.GROUP: {"color": "slate", "shape": NodeShape.RECTANGLE},
}
DEFAULT_NODE_COLOR = "slate"

# Layout
NODE_WIDTH = 250
NODE_HEIGHT = 150
VERTICAL_SPACING_X = 250
VERTICAL_SPACING_Y = 180
HORIZONTAL_SPACING_X = 300
GRID_COLUMNS = 3

# Edge styling derived from the arrow token
DASHED_EDGE_STYLE = {"stroke-dasharray": "5 5"}
THICK_EDGE_STYLE = {"stroke-width": "3"}

DEFAULT_FLOW_TITLE = "Untitled Flow"

# Errors reported through ParseResult.error
MISSING_DECLARATION_ERROR = (
    "Missing chart type declaration. Start with: flowchart TD"
)
NO_VALID_NODES_ERROR = "No valid nodes found. Start with: flowchart TD"
NO_NODES_FOUND_ERROR = "No nodes found. Use: [type] Label"
