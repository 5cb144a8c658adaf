"""
Settings management for lanegraph
"""

import copy
import json
from pathlib import Path
from typing import Any

from lanegraph.constants import (
    DEFAULT_PAGE_SIZE,
    GRAPH_LEFT_PADDING,
    LANE_WIDTH,
    MAX_VISIBLE_REFS,
    MERGE_NODE_SIZE,
    NODE_RADIUS,
    OVERSCAN_COUNT,
    ROW_HEIGHT,
    SETTINGS_PATH,
)
from lanegraph.graph.types import GraphGeometry


class Settings:
    """Manages application settings"""

    DEFAULT_SETTINGS = {
        "graph": {
            "page_size": DEFAULT_PAGE_SIZE,  # Commits fetched per "load more"
            "row_height": ROW_HEIGHT,
            "lane_width": LANE_WIDTH,
            "left_padding": GRAPH_LEFT_PADDING,
            "overscan": OVERSCAN_COUNT,
            "node_radius": NODE_RADIUS,
            "merge_node_size": MERGE_NODE_SIZE,
            "max_visible_refs": MAX_VISIBLE_REFS,
            "all_branches": True,
            "first_parent": False,
        },
        "ui": {
            "window_size": [1100, 700],
        },
    }

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize settings"""
        if config_path is None:
            config_path = Path(SETTINGS_PATH).expanduser()

        self.config_path = config_path
        self.settings: dict[str, Any] = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.load()

    def load(self) -> None:
        """Load settings from file"""
        if self.config_path.exists():
            with open(self.config_path) as f:
                loaded = json.load(f)
                # Merge with defaults to handle new settings
                self._merge_settings(self.settings, loaded)

    def save(self) -> None:
        """Save settings to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.settings, f, indent=2)

    def _merge_settings(self, base: dict[str, Any], updates: dict[str, Any]) -> None:
        """Recursively merge settings dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_settings(base[key], value)
            else:
                base[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get a setting by dot-separated path (e.g., 'graph.row_height')"""
        value: Any = self.settings
        for part in path.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    def set(self, path: str, value: Any) -> None:
        """Set a setting by dot-separated path"""
        parts = path.split(".")
        target: Any = self.settings

        for part in parts[:-1]:
            if part not in target:
                target[part] = {}
            target = target[part]

        target[parts[-1]] = value

    def get_page_size(self) -> int:
        """Commits per page. At least 1."""
        page_size = int(self.get("graph.page_size", DEFAULT_PAGE_SIZE))
        return max(1, page_size)

    def get_geometry(self) -> GraphGeometry:
        """Row/lane metrics for the graph layout.

        Row height and lane width are clamped to at least one pixel so a bad
        settings file cannot make the virtualization math divide by zero.
        """
        return GraphGeometry(
            row_height=max(1.0, float(self.get("graph.row_height", ROW_HEIGHT))),
            lane_width=max(1.0, float(self.get("graph.lane_width", LANE_WIDTH))),
            left_padding=max(0.0, float(self.get("graph.left_padding", GRAPH_LEFT_PADDING))),
            overscan=max(0, int(self.get("graph.overscan", OVERSCAN_COUNT))),
        )
