"""
Configuration loader for flowtext.

Keeps a minimal set of defaults while allowing environment variable expansion
inside YAML (e.g., `${FLOWTEXT_LOG_LEVEL}` or `${GRID_COLUMNS:-3}`).
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict

import yaml

from flowtext.constants import (
    GRID_COLUMNS,
    HORIZONTAL_SPACING_X,
    NODE_HEIGHT,
    NODE_WIDTH,
    VERTICAL_SPACING_X,
    VERTICAL_SPACING_Y,
)

VALID_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass
class LayoutConfig:
    vertical_spacing_x: float = VERTICAL_SPACING_X
    vertical_spacing_y: float = VERTICAL_SPACING_Y
    horizontal_spacing_x: float = HORIZONTAL_SPACING_X
    grid_columns: int = GRID_COLUMNS


@dataclass
class NodeSizeConfig:
    width: float = NODE_WIDTH
    height: float = NODE_HEIGHT


@dataclass
class ObservabilityConfig:
    log_level: str = "info"


@dataclass
class FlowTextConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    nodes: NodeSizeConfig = field(default_factory=NodeSizeConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


ENV_REF_RE = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _env_value(match: re.Match[str]) -> str:
    return os.environ.get(match.group(1), match.group(2) or "")


def _expand_env(value: Any) -> Any:
    """Expand ${VAR} and ${VAR:-default} in every string of a YAML document.

    Unset variables without a default expand to "".
    """
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return ENV_REF_RE.sub(_env_value, os.path.expandvars(value))
    return value


def _load_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _expand_env(data)


def _positive(value: Any, name: str) -> float:
    number = float(value)
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {value!r}")
    return number


def _load_layout(data: Dict[str, Any]) -> LayoutConfig:
    lay = data.get("layout", {}) or {}
    grid_columns = int(lay.get("grid_columns", GRID_COLUMNS))
    if grid_columns < 1:
        raise ValueError("layout.grid_columns must be at least 1")
    return LayoutConfig(
        vertical_spacing_x=_positive(
            lay.get("vertical_spacing_x", VERTICAL_SPACING_X), "layout.vertical_spacing_x"
        ),
        vertical_spacing_y=_positive(
            lay.get("vertical_spacing_y", VERTICAL_SPACING_Y), "layout.vertical_spacing_y"
        ),
        horizontal_spacing_x=_positive(
            lay.get("horizontal_spacing_x", HORIZONTAL_SPACING_X),
            "layout.horizontal_spacing_x",
        ),
        grid_columns=grid_columns,
    )


def _load_nodes(data: Dict[str, Any]) -> NodeSizeConfig:
    nodes = data.get("nodes", {}) or {}
    return NodeSizeConfig(
        width=_positive(nodes.get("width", NODE_WIDTH), "nodes.width"),
        height=_positive(nodes.get("height", NODE_HEIGHT), "nodes.height"),
    )


def _load_observability(data: Dict[str, Any]) -> ObservabilityConfig:
    obs = data.get("observability", {}) or {}
    log_level = str(obs.get("log_level") or "info").lower()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(f"Unknown log level: {log_level}")
    return ObservabilityConfig(log_level=log_level)


def default_config() -> FlowTextConfig:
    return FlowTextConfig()


def load_config(path: str) -> FlowTextConfig:
    """
    Load flowtext configuration from YAML file.

    Raises:
        FileNotFoundError: when path does not exist
        ValueError: when a value is out of range
    """
    data = _load_yaml(path)
    return FlowTextConfig(
        layout=_load_layout(data),
        nodes=_load_nodes(data),
        observability=_load_observability(data),
    )
