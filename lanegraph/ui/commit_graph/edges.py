"""Edge rendering for the commit graph - curved connections between commits."""

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainter, QPainterPath, QPen

from lanegraph.graph.edges import edge_control_points
from lanegraph.graph.types import EdgeDescriptor


class EdgePath(QPainterPath):
    """
    Path from a child commit down to one of its parents.

    COORDINATE SYSTEM NOTE:
    Newer commits (children) sit at the TOP of the list (lower y values) and
    parents further down, so origin.y < target.y and edges are drawn DOWN.
    Edges within one lane are straight; lane changes are a cubic S-curve whose
    bend grows with the row distance up to a fixed cap.
    """

    def __init__(self, edge: EdgeDescriptor, row_height: float) -> None:
        super().__init__()
        self.edge = edge
        self._build_path(row_height)

    def _build_path(self, row_height: float) -> None:
        origin = QPointF(self.edge.origin_x, self.edge.origin_y)
        target = QPointF(self.edge.target_x, self.edge.target_y)
        self.moveTo(origin)

        controls = edge_control_points(self.edge, row_height)
        if controls is None:
            self.lineTo(target)
            return

        (c1x, c1y), (c2x, c2y) = controls
        self.cubicTo(QPointF(c1x, c1y), QPointF(c2x, c2y), target)


EDGE_WIDTH = 1.5
EDGE_OPACITY = 0.55


def paint_edges(painter: QPainter, edges: list[EdgeDescriptor], row_height: float) -> None:
    """Draw edges with the lane colors, behind the nodes."""
    painter.save()
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.setOpacity(EDGE_OPACITY)
    for edge in edges:
        pen = QPen(QColor(edge.color), EDGE_WIDTH)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        painter.setPen(pen)
        painter.drawPath(EdgePath(edge, row_height))
    painter.restore()
