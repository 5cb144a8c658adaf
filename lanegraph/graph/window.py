"""Virtualization window - maps scroll state to the rows worth drawing."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from lanegraph.graph.edges import project_edges
from lanegraph.graph.lanes import assign_lanes, max_lane_of
from lanegraph.graph.types import (
    CommitRecord,
    EdgeDescriptor,
    GraphGeometry,
    LaneAssignment,
    NodeDescriptor,
    get_lane_color,
)


@dataclass(frozen=True)
class VisibleWindow:
    """Row range to materialize, plus a one-row wider range for edges."""

    start_index: int
    end_index: int
    edge_start: int
    edge_end: int

    def __len__(self) -> int:
        return self.end_index - self.start_index


def compute_window(
    scroll_top: float,
    viewport_height: float,
    row_height: float,
    overscan: int,
    total_rows: int,
) -> VisibleWindow:
    """Visible row range [start_index, end_index) for the given scroll state."""
    if row_height <= 0:
        raise ValueError(f"row_height must be positive, got {row_height}")

    start = max(0, math.floor(scroll_top / row_height) - overscan)
    end = max(0, min(total_rows, math.ceil((scroll_top + viewport_height) / row_height) + overscan))
    # Scrolled past the content (e.g. after the list shrank)
    start = min(start, end)
    edge_start, edge_end = edge_range(start, end, total_rows)
    return VisibleWindow(start, end, edge_start, edge_end)


def edge_range(start_index: int, end_index: int, total_rows: int) -> tuple[int, int]:
    """Widen a row range by one row on each side so edges enter and leave smoothly."""
    return max(0, start_index - 1), min(total_rows, end_index + 1)


def content_height(total_rows: int, row_height: float) -> float:
    """Full scrollable height without instantiating any rows."""
    return total_rows * row_height


@dataclass
class RenderPass:
    """Everything the drawing layer needs for one frame."""

    window: VisibleWindow
    rows: list[CommitRecord]
    nodes: list[NodeDescriptor]
    edges: list[EdgeDescriptor]
    content_height: float
    graph_width: float
    max_lane: int = 0
    lanes: dict[str, LaneAssignment] = field(default_factory=dict, repr=False)


class GraphLayout:
    """
    Lane layout for a commit list, recomputed only when the list changes.

    The memo is keyed on list identity: callers replace the list wholesale on
    every fetch, so scrolling never reruns the O(n) lane pass.
    """

    def __init__(self, geometry: GraphGeometry | None = None) -> None:
        self.geometry = geometry or GraphGeometry()
        self._commits: Sequence[CommitRecord] | None = None
        self._lanes: dict[str, LaneAssignment] = {}
        self._index: dict[str, int] = {}
        self._max_lane = 0
        self.recompute_count = 0

    def _ensure(self, commits: Sequence[CommitRecord]) -> None:
        if commits is self._commits:
            return
        self._commits = commits
        self._lanes = assign_lanes(commits)
        self._index = {commit.hash: i for i, commit in enumerate(commits)}
        self._max_lane = max_lane_of(self._lanes)
        self.recompute_count += 1

    def lanes_for(self, commits: Sequence[CommitRecord]) -> dict[str, LaneAssignment]:
        self._ensure(commits)
        return self._lanes

    def index_for(self, commits: Sequence[CommitRecord]) -> dict[str, int]:
        self._ensure(commits)
        return self._index

    def max_lane_for(self, commits: Sequence[CommitRecord]) -> int:
        self._ensure(commits)
        return self._max_lane

    def row_at(self, y: float, total_rows: int) -> int | None:
        """Row under a content-space y coordinate, or None past the ends."""
        if y < 0:
            return None
        row = int(y // self.geometry.row_height)
        return row if row < total_rows else None

    def render(
        self,
        commits: Sequence[CommitRecord],
        scroll_top: float,
        viewport_height: float,
        selected_hash: str | None = None,
    ) -> RenderPass:
        """Compute nodes for the visible rows and edges for the widened range."""
        self._ensure(commits)
        geo = self.geometry
        window = compute_window(
            scroll_top, viewport_height, geo.row_height, geo.overscan, len(commits)
        )

        rows = list(commits[window.start_index : window.end_index])
        nodes: list[NodeDescriptor] = []
        for offset, commit in enumerate(rows):
            assignment = self._lanes.get(commit.hash)
            if assignment is None:
                continue
            nodes.append(
                NodeDescriptor(
                    hash=commit.hash,
                    center_x=geo.lane_x(assignment.lane),
                    center_y=geo.row_y(window.start_index + offset),
                    color=get_lane_color(assignment.lane),
                    is_merge=commit.is_merge,
                    is_root=commit.is_root,
                    is_selected=commit.hash == selected_hash,
                )
            )

        edges = project_edges(
            commits, self._lanes, self._index, window.edge_start, window.edge_end, geo
        )

        return RenderPass(
            window=window,
            rows=rows,
            nodes=nodes,
            edges=edges,
            content_height=content_height(len(commits), geo.row_height),
            graph_width=geo.graph_width(self._max_lane),
            max_lane=self._max_lane,
            lanes=self._lanes,
        )
