"""Tests for edge projection and curve geometry."""

import pytest
from history import make_commits

from lanegraph.graph.edges import edge_color, edge_control_points, project_edges
from lanegraph.graph.lanes import assign_lanes
from lanegraph.graph.types import EdgeDescriptor, GraphGeometry, get_lane_color

GEO = GraphGeometry(row_height=24, lane_width=16, left_padding=8, overscan=5)


def merge_history():
    return make_commits([("c1", ["c2", "c4"]), ("c2", ["c3"]), ("c4", []), ("c3", [])])


def project(commits, start=0, end=None):
    lanes = assign_lanes(commits)
    index_of = {c.hash: i for i, c in enumerate(commits)}
    return project_edges(
        commits, lanes, index_of, start, len(commits) if end is None else end, GEO
    )


class TestProjectEdges:
    def test_merge_edges(self):
        """A merge yields one straight and one lane-changing edge."""
        edges = project(merge_history())
        pairs = [(e.child_hash, e.parent_hash) for e in edges]
        assert pairs == [("c1", "c2"), ("c1", "c4"), ("c2", "c3")]

        straight, merge_in, trunk = edges
        assert (straight.origin_x, straight.origin_y) == (16, 12)
        assert (straight.target_x, straight.target_y) == (16, 36)
        assert straight.is_straight
        assert straight.color == get_lane_color(0)

        assert (merge_in.target_x, merge_in.target_y) == (32, 60)
        assert not merge_in.is_straight
        assert merge_in.color == get_lane_color(1)

        assert trunk.target_y == 84

    def test_edges_leave_range(self):
        """An edge starting inside the range reaches parents outside it."""
        edges = project(merge_history(), start=0, end=1)
        assert [e.parent_hash for e in edges] == ["c2", "c4"]
        assert edges[1].target_y == GEO.row_y(2)

    def test_range_clamped(self):
        """Out-of-bounds ranges are clamped to the list."""
        assert project(merge_history(), start=-3, end=99) == project(merge_history())

    def test_missing_parent_skipped(self):
        """Parents outside the loaded list produce no edge."""
        commits = make_commits([("a", ["gone"]), ("b", ["c"]), ("c", [])])
        edges = project(commits)
        assert [(e.child_hash, e.parent_hash) for e in edges] == [("b", "c")]

    def test_roots_have_no_edges(self):
        """Root commits contribute nothing."""
        assert project(make_commits([("x", []), ("y", [])])) == []


class TestEdgeColor:
    def test_same_lane_uses_lane_color(self):
        assert edge_color(2, 2) == get_lane_color(2)

    def test_lane_change_uses_parent_color(self):
        """Both branch-out and merge-in take the parent's lane color."""
        assert edge_color(0, 3) == get_lane_color(3)
        assert edge_color(3, 0) == get_lane_color(0)


class TestControlPoints:
    def test_straight_edge_has_no_curve(self):
        edge = EdgeDescriptor(16, 12, 16, 60, "#000000")
        assert edge_control_points(edge, 24) is None

    def test_s_curve_offset(self):
        """Control points are pushed vertically by 0.4 of the row distance."""
        edge = EdgeDescriptor(16, 12, 32, 60, "#000000")
        (c1x, c1y), (c2x, c2y) = edge_control_points(edge, 24)
        assert c1x == 16
        assert c2x == 32
        assert c1y == pytest.approx(12 + 19.2)
        assert c2y == pytest.approx(60 - 19.2)

    def test_offset_capped_at_two_rows(self):
        """Long edges bulge no more than two row heights."""
        edge = EdgeDescriptor(16, 12, 32, 12 + 240, "#000000")
        (_, c1y), (_, c2y) = edge_control_points(edge, 24)
        assert c1y == pytest.approx(12 + 48)
        assert c2y == pytest.approx(252 - 48)
