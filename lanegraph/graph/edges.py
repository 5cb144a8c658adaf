"""Edge projection - connector geometry between commits and their parents."""

from collections.abc import Mapping, Sequence

from lanegraph.constants import EDGE_CURVE_FACTOR, EDGE_CURVE_MAX_ROWS
from lanegraph.graph.types import (
    CommitRecord,
    EdgeDescriptor,
    GraphGeometry,
    LaneAssignment,
    get_lane_color,
)


def project_edges(
    commits: Sequence[CommitRecord],
    lanes: Mapping[str, LaneAssignment],
    index_of: Mapping[str, int],
    edge_start: int,
    edge_end: int,
    geometry: GraphGeometry,
) -> list[EdgeDescriptor]:
    """
    Build edges for every commit row in [edge_start, edge_end).

    Each edge runs from the commit's node down to a parent's node, even when
    the parent row lies outside the range. Parents that are not loaded
    (truncated history) produce no edge.
    """
    edges: list[EdgeDescriptor] = []
    edge_start = max(0, edge_start)
    edge_end = min(len(commits), edge_end)

    for row in range(edge_start, edge_end):
        commit = commits[row]
        assignment = lanes.get(commit.hash)
        if assignment is None:
            continue
        cx = geometry.lane_x(assignment.lane)
        cy = geometry.row_y(row)

        for parent_hash in commit.parents:
            parent_row = index_of.get(parent_hash)
            parent_assignment = lanes.get(parent_hash)
            if parent_row is None or parent_assignment is None:
                continue
            px = geometry.lane_x(parent_assignment.lane)
            py = geometry.row_y(parent_row)

            edges.append(
                EdgeDescriptor(
                    origin_x=cx,
                    origin_y=cy,
                    target_x=px,
                    target_y=py,
                    color=edge_color(assignment.lane, parent_assignment.lane),
                    child_hash=commit.hash,
                    parent_hash=parent_hash,
                )
            )

    return edges


def edge_color(child_lane: int, parent_lane: int) -> str:
    """Straight edges keep the lane color; lane changes take the parent's."""
    if child_lane == parent_lane:
        return get_lane_color(child_lane)
    return get_lane_color(parent_lane)


def edge_control_points(
    edge: EdgeDescriptor, row_height: float
) -> tuple[tuple[float, float], tuple[float, float]] | None:
    """
    Cubic Bezier control points for an S-curve edge.

    Returns None for a straight vertical edge. The vertical offset grows with
    the distance between rows, capped at a couple of rows so long edges do
    not bulge.
    """
    if edge.is_straight:
        return None
    dy = edge.target_y - edge.origin_y
    offset = min(abs(dy) * EDGE_CURVE_FACTOR, row_height * EDGE_CURVE_MAX_ROWS)
    return (
        (edge.origin_x, edge.origin_y + offset),
        (edge.target_x, edge.target_y - offset),
    )
