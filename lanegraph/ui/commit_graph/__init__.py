"""Commit graph widgets."""

from lanegraph.ui.commit_graph.toolbar import GraphToolbar
from lanegraph.ui.commit_graph.widget import CommitGraphView

__all__ = ["CommitGraphView", "GraphToolbar"]
