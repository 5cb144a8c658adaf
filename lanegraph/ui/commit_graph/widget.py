"""Commit graph view - virtualized list of commits with the lane graph on the left."""

import math

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt
from PySide6.QtGui import (
    QColor,
    QContextMenuEvent,
    QFocusEvent,
    QFont,
    QFontMetrics,
    QHelpEvent,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QPen,
    QPolygonF,
    QResizeEvent,
)
from PySide6.QtWidgets import QAbstractScrollArea, QMenu, QToolTip, QWidget

from lanegraph.constants import MAX_VISIBLE_REFS, MERGE_NODE_SIZE, NODE_RADIUS
from lanegraph.graph.controller import ContextAction, GraphController, NavKey
from lanegraph.graph.types import CommitRecord, NodeDescriptor
from lanegraph.graph.window import RenderPass
from lanegraph.ui.commit_graph.edges import paint_edges
from lanegraph.ui.commit_graph.text import elide_refs, format_relative_date
from lanegraph.ui.commit_graph.worker import FetchExecutor

KEY_MAP = {
    Qt.Key.Key_Up: NavKey.UP,
    Qt.Key.Key_Down: NavKey.DOWN,
    Qt.Key.Key_Home: NavKey.HOME,
    Qt.Key.Key_End: NavKey.END,
    Qt.Key.Key_Return: NavKey.ENTER,
    Qt.Key.Key_Enter: NavKey.ENTER,
}

# Context menu layout: groups are separated by a divider
MENU_GROUPS = [
    [ContextAction.COPY_HASH],
    [ContextAction.CREATE_BRANCH, ContextAction.CREATE_TAG],
    [ContextAction.CHERRY_PICK, ContextAction.REVERT],
]

MENU_LABELS = {
    ContextAction.COPY_HASH: "Copy hash",
    ContextAction.CREATE_BRANCH: "Create branch…",
    ContextAction.CREATE_TAG: "Create tag…",
    ContextAction.CHERRY_PICK: "Cherry-pick",
    ContextAction.REVERT: "Revert",
}


class CommitGraphView(QAbstractScrollArea):
    """
    Scrollable commit list that only ever draws the rows in view.

    Plain commit records are kept for every row; painting asks the controller
    for the current render pass and draws just those nodes, edges and row
    texts. The scroll bar range comes from the total content height, so no
    per-row widgets exist at all.
    """

    # Right-hand text columns (pixels)
    HASH_WIDTH = 56
    DATE_WIDTH = 60
    AUTHOR_WIDTH = 100
    AUTHOR_MIN_VIEW_WIDTH = 720  # Hide the author column on narrow views
    COLUMN_GAP = 6
    BADGE_HEIGHT = 14

    SELECTED_BG = QColor("#E3F2FD")
    TEXT_COLOR = QColor("#333333")
    MUTED_COLOR = QColor("#888888")

    def __init__(
        self,
        controller: GraphController,
        node_radius: float = NODE_RADIUS,
        merge_node_size: float = MERGE_NODE_SIZE,
        max_visible_refs: int = MAX_VISIBLE_REFS,
        threaded: bool = True,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.controller = controller
        self.node_radius = node_radius
        self.merge_node_size = merge_node_size
        self.max_visible_refs = max_visible_refs

        # Fetch on worker threads instead of blocking the UI
        self._executor: FetchExecutor | None = None
        if threaded:
            self._executor = FetchExecutor(self)
            controller.executor = self._executor

        self._font = QFont("sans-serif", 9)
        self._mono_font = QFont("monospace", 9)
        self._badge_font = QFont("monospace", 7)

        # Keyboard navigation only while the list itself has focus
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setMinimumWidth(400)

        self.verticalScrollBar().valueChanged.connect(self._on_scrolled)
        controller.commits_changed.connect(self._on_commits_changed)
        controller.focus_changed.connect(self._on_focus_changed)
        controller.scroll_requested.connect(self._on_scroll_requested)
        controller.loading_changed.connect(self._on_loading_changed)

        self._update_scroll_range()

    # --- Scroll bookkeeping ---

    def _update_scroll_range(self) -> None:
        """Size the scroll bar from the total content height."""
        geometry = self.controller.layout.geometry
        viewport_height = self.viewport().height()
        content = self.controller.total_rows * geometry.row_height
        bar = self.verticalScrollBar()
        bar.setRange(0, max(0, math.ceil(content - viewport_height)))
        bar.setPageStep(max(1, viewport_height))
        bar.setSingleStep(max(1, int(geometry.row_height)))
        self._sync_viewport()

    def _sync_viewport(self) -> None:
        self.controller.set_viewport(self.verticalScrollBar().value(), self.viewport().height())

    def _on_scrolled(self, _value: int) -> None:
        self._sync_viewport()
        self.viewport().update()

    def _on_scroll_requested(self, scroll_top: float) -> None:
        self.verticalScrollBar().setValue(math.ceil(scroll_top))

    def _on_commits_changed(self) -> None:
        self._update_scroll_range()
        self.viewport().update()

    def _on_focus_changed(self, _index: int) -> None:
        self.viewport().update()

    def _on_loading_changed(self, _loading: bool) -> None:
        self.viewport().update()

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802
        """Viewport height feeds the virtualization window."""
        super().resizeEvent(event)
        self._update_scroll_range()

    def row_at(self, viewport_y: float) -> int | None:
        """Row index under a viewport y coordinate."""
        return self.controller.layout.row_at(
            viewport_y + self.controller.scroll_top, self.controller.total_rows
        )

    def shutdown(self) -> None:
        """Stop background fetches. Call before the window goes away."""
        if self._executor is not None:
            self._executor.shutdown()

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802
        """Paint the visible slice: row text, then edges, then nodes."""
        painter = QPainter(self.viewport())
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.viewport().rect(), self.palette().base())

        if not self.controller.commits:
            painter.setPen(self.MUTED_COLOR)
            painter.setFont(self._font)
            text = "Loading history…" if self.controller.loading else "No commits"
            painter.drawText(QRectF(self.viewport().rect()), Qt.AlignmentFlag.AlignCenter, text)
            painter.end()
            return

        render = self.controller.render()
        painter.translate(0, -self.controller.scroll_top)

        self._paint_rows(painter, render)
        paint_edges(painter, render.edges, self.controller.layout.geometry.row_height)
        for node in render.nodes:
            self._paint_node(painter, node)

        painter.end()

    def _paint_rows(self, painter: QPainter, render: RenderPass) -> None:
        row_height = self.controller.layout.geometry.row_height
        width = self.viewport().width()
        focused = self.controller.focused_index
        selected = self.controller.selected_hash

        for offset, commit in enumerate(render.rows):
            row = render.window.start_index + offset
            row_rect = QRectF(0, row * row_height, width, row_height)

            if commit.hash == selected:
                painter.fillRect(row_rect, self.SELECTED_BG)
            if row == focused and self.hasFocus():
                painter.setPen(QPen(QColor("#2196F3"), 1, Qt.PenStyle.DotLine))
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(row_rect.adjusted(0.5, 0.5, -0.5, -0.5))

            self._paint_row_text(painter, commit, row_rect, render.graph_width)

    def _paint_row_text(
        self, painter: QPainter, commit: CommitRecord, rect: QRectF, graph_width: float
    ) -> None:
        """Message, ref badges, author, relative date and short hash."""
        gap = self.COLUMN_GAP
        left = graph_width + gap
        right = rect.right() - gap
        top = rect.top()
        height = rect.height()
        align_left = Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter
        align_right = Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter

        # Short hash
        painter.setFont(self._mono_font)
        painter.setPen(self.MUTED_COLOR)
        painter.drawText(
            QRectF(right - self.HASH_WIDTH, top, self.HASH_WIDTH, height),
            align_left,
            commit.short_hash,
        )
        right -= self.HASH_WIDTH + gap

        # Relative date
        painter.setFont(self._font)
        painter.drawText(
            QRectF(right - self.DATE_WIDTH, top, self.DATE_WIDTH, height),
            align_right,
            format_relative_date(commit.timestamp),
        )
        right -= self.DATE_WIDTH + gap

        # Author
        if self.viewport().width() >= self.AUTHOR_MIN_VIEW_WIDTH:
            fm = QFontMetrics(self._font)
            author = fm.elidedText(
                commit.author_name, Qt.TextElideMode.ElideRight, self.AUTHOR_WIDTH
            )
            painter.drawText(
                QRectF(right - self.AUTHOR_WIDTH, top, self.AUTHOR_WIDTH, height),
                align_left,
                author,
            )
            right -= self.AUTHOR_WIDTH + gap

        # Ref badges, right-aligned against the author column
        shown, overflow = elide_refs(commit.display_refs, self.max_visible_refs)
        labels = shown + ([f"+{overflow}"] if overflow else [])
        badge_fm = QFontMetrics(self._badge_font)
        painter.setFont(self._badge_font)
        for label in reversed(labels):
            badge_width = badge_fm.horizontalAdvance(label) + 8
            if right - badge_width < left:
                break
            badge = QRectF(
                right - badge_width,
                top + (height - self.BADGE_HEIGHT) / 2,
                badge_width,
                self.BADGE_HEIGHT,
            )
            painter.setBrush(QColor("#F5F5F5"))
            painter.setPen(QPen(QColor("#BDBDBD"), 1))
            painter.drawRoundedRect(badge, 3, 3)
            painter.setPen(self.TEXT_COLOR)
            painter.drawText(badge, Qt.AlignmentFlag.AlignCenter, label)
            right -= badge_width + 4

        # Message fills what is left
        painter.setFont(self._font)
        painter.setPen(self.TEXT_COLOR)
        available = max(0, int(right - left - gap))
        message = QFontMetrics(self._font).elidedText(
            commit.message, Qt.TextElideMode.ElideRight, available
        )
        painter.drawText(QRectF(left, top, available, height), align_left, message)

    def _paint_node(self, painter: QPainter, node: NodeDescriptor) -> None:
        """Merges are diamonds, roots hollow circles, everything else a dot."""
        color = QColor(node.color)
        center = QPointF(node.center_x, node.center_y)

        if node.is_selected:
            painter.setPen(QPen(self.palette().text().color(), 1.5))
        else:
            painter.setPen(Qt.PenStyle.NoPen)

        if node.is_merge:
            s = self.merge_node_size
            painter.setBrush(color)
            painter.drawPolygon(
                QPolygonF(
                    [
                        QPointF(center.x(), center.y() - s),
                        QPointF(center.x() + s, center.y()),
                        QPointF(center.x(), center.y() + s),
                        QPointF(center.x() - s, center.y()),
                    ]
                )
            )
            return

        radius = self.node_radius + (1.5 if node.is_selected else 0)
        if node.is_root:
            painter.setBrush(self.palette().base())
            if not node.is_selected:
                painter.setPen(QPen(color, 1.5))
        else:
            painter.setBrush(color)
        painter.drawEllipse(center, radius, radius)

    # --- Input ---

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        """Arrow keys, Home/End and Enter drive focus; everything else scrolls as usual."""
        key = KEY_MAP.get(event.key())
        if key is not None and self.controller.handle_key(key):
            event.accept()
            return
        super().keyPressEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Left click focuses and selects the row under the cursor."""
        if event.button() == Qt.MouseButton.LeftButton:
            row = self.row_at(event.position().y())
            if row is not None:
                self.setFocus(Qt.FocusReason.MouseFocusReason)
                self.controller.click_row(row)
                event.accept()
                return
        super().mousePressEvent(event)

    def focusInEvent(self, event: QFocusEvent) -> None:  # noqa: N802
        super().focusInEvent(event)
        self.viewport().update()

    def focusOutEvent(self, event: QFocusEvent) -> None:  # noqa: N802
        super().focusOutEvent(event)
        self.viewport().update()

    def build_context_menu(self, commit_hash: str) -> QMenu | None:
        """Menu with the actions the host provides, or None when it provides none."""
        available = set(self.controller.callbacks.context_actions)
        if not available:
            return None

        menu = QMenu(self)
        for group in MENU_GROUPS:
            actions = [action for action in group if action in available]
            if not actions:
                continue
            if not menu.isEmpty():
                menu.addSeparator()
            for action in actions:
                qaction = menu.addAction(MENU_LABELS[action])
                qaction.setData(action.value)
                qaction.triggered.connect(
                    lambda _checked=False, a=action, h=commit_hash: self.controller.dispatch_action(
                        a, h
                    )
                )
        return menu

    def contextMenuEvent(self, event: QContextMenuEvent) -> None:  # noqa: N802
        """Per-commit actions for the row under the cursor."""
        row = self.row_at(event.pos().y())
        commit = self.controller.commit_at(row) if row is not None else None
        menu = self.build_context_menu(commit.hash) if commit is not None else None
        if menu is None:
            super().contextMenuEvent(event)
            return
        menu.exec(event.globalPos())
        event.accept()

    def viewportEvent(self, event: QEvent) -> bool:  # noqa: N802
        """Tooltips with the short hash, author and message of the hovered row."""
        if event.type() == QEvent.Type.ToolTip and isinstance(event, QHelpEvent):
            row = self.row_at(event.pos().y())
            commit = self.controller.commit_at(row) if row is not None else None
            if commit is None:
                QToolTip.hideText()
                event.ignore()
            else:
                QToolTip.showText(
                    event.globalPos(),
                    f"{commit.short_hash} - {commit.author_name}\n{commit.message}",
                    self,
                )
            return True
        return super().viewportEvent(event)
