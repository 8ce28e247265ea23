"""
Parsers package
"""

from .dsl_parser import parse_flow_dsl
from .mermaid_parser import parse_mermaid
from .normalizer import normalize_text

__all__ = [
    "parse_flow_dsl",
    "parse_mermaid",
    "normalize_text",
]
