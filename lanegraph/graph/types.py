"""Types and constants for the commit graph engine."""

from dataclasses import dataclass, field

from lanegraph.constants import (
    GRAPH_LEFT_PADDING,
    LANE_WIDTH,
    OVERSCAN_COUNT,
    ROW_HEIGHT,
    SHORT_HASH_LENGTH,
)


@dataclass(frozen=True)
class CommitRecord:
    """A single commit as returned by the graph loader, newest first."""

    hash: str
    parents: tuple[str, ...] = ()
    refs: tuple[str, ...] = ()
    author_name: str = ""
    timestamp: str = ""
    message: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parents) >= 2

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]

    @property
    def display_refs(self) -> list[str]:
        """Ref labels without the `HEAD -> ` and `tag: ` decorations."""
        return [ref.replace("HEAD -> ", "").replace("tag: ", "") for ref in self.refs]


@dataclass(frozen=True)
class LaneAssignment:
    """Lane of one commit plus the widest lane in use up to its row."""

    lane: int
    max_lane: int


@dataclass(frozen=True)
class GraphGeometry:
    """Pixel metrics used to turn rows and lanes into coordinates."""

    row_height: float = ROW_HEIGHT
    lane_width: float = LANE_WIDTH
    left_padding: float = GRAPH_LEFT_PADDING
    overscan: int = OVERSCAN_COUNT

    def lane_x(self, lane: int) -> float:
        """Center x of a lane column."""
        return self.left_padding + lane * self.lane_width + self.lane_width / 2

    def row_y(self, row: int) -> float:
        """Center y of a row."""
        return row * self.row_height + self.row_height / 2

    def graph_width(self, max_lane: int) -> float:
        """Width of the graph column, leaving one spare lane on the right."""
        return (max_lane + 2) * self.lane_width + self.left_padding


@dataclass(frozen=True)
class NodeDescriptor:
    """A commit node ready to be drawn."""

    hash: str
    center_x: float
    center_y: float
    color: str
    is_merge: bool = False
    is_root: bool = False
    is_selected: bool = False


@dataclass(frozen=True)
class EdgeDescriptor:
    """A connector from a commit (origin) down to one of its parents (target)."""

    origin_x: float
    origin_y: float
    target_x: float
    target_y: float
    color: str
    child_hash: str = field(default="", compare=False)
    parent_hash: str = field(default="", compare=False)

    @property
    def is_straight(self) -> bool:
        return self.origin_x == self.target_x


# Colors for different lanes
LANE_COLORS = [
    "#4CAF50",  # Green
    "#2196F3",  # Blue
    "#FF9800",  # Orange
    "#9C27B0",  # Purple
    "#F44336",  # Red
    "#00BCD4",  # Cyan
    "#E91E63",  # Pink
    "#795548",  # Brown
]


def get_lane_color(lane: int) -> str:
    """Get color for a lane."""
    return LANE_COLORS[lane % len(LANE_COLORS)]
