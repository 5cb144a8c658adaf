"""
Centralized constants for lanegraph.

Layout metrics and paging defaults shared by the graph engine, the view
and the settings defaults.
"""

# Paging
DEFAULT_PAGE_SIZE = 100

# Row/lane geometry (pixels)
ROW_HEIGHT = 24
LANE_WIDTH = 16
GRAPH_LEFT_PADDING = 8
NODE_RADIUS = 4
MERGE_NODE_SIZE = 5

# Rows rendered beyond the viewport on each side
OVERSCAN_COUNT = 5

# Edge curvature: vertical control offset = min(|dy| * factor, rows * row height)
EDGE_CURVE_FACTOR = 0.4
EDGE_CURVE_MAX_ROWS = 2

# Row text
MAX_VISIBLE_REFS = 3
SHORT_HASH_LENGTH = 7

# Settings file
SETTINGS_PATH = "~/.config/lanegraph/settings.json"
