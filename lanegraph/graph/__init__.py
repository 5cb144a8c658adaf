"""Commit graph engine: lane assignment, edge projection and virtualization."""

from lanegraph.graph.controller import (
    ContextAction,
    GraphCallbacks,
    GraphController,
    LoadState,
    NavKey,
    SelectionState,
)
from lanegraph.graph.edges import edge_control_points, project_edges
from lanegraph.graph.lanes import assign_lanes
from lanegraph.graph.types import (
    LANE_COLORS,
    CommitRecord,
    EdgeDescriptor,
    GraphGeometry,
    LaneAssignment,
    NodeDescriptor,
    get_lane_color,
)
from lanegraph.graph.window import GraphLayout, RenderPass, VisibleWindow, compute_window

__all__ = [
    "LANE_COLORS",
    "CommitRecord",
    "ContextAction",
    "EdgeDescriptor",
    "GraphCallbacks",
    "GraphController",
    "GraphGeometry",
    "GraphLayout",
    "LaneAssignment",
    "LoadState",
    "NavKey",
    "NodeDescriptor",
    "RenderPass",
    "SelectionState",
    "VisibleWindow",
    "assign_lanes",
    "compute_window",
    "edge_control_points",
    "get_lane_color",
    "project_edges",
]
