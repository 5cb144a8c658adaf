"""Widget tests for the commit graph view, toolbar and threaded fetching."""

from unittest.mock import MagicMock

import pytest
from history import branchy_history, linear_history
from PySide6.QtCore import QPoint, Qt
from PySide6.QtTest import QTest

from lanegraph.graph.controller import GraphCallbacks, GraphController
from lanegraph.graph.types import GraphGeometry
from lanegraph.graph.window import GraphLayout
from lanegraph.ui.commit_graph import CommitGraphView, GraphToolbar
from lanegraph.ui.commit_graph.worker import FetchExecutor

pytestmark = pytest.mark.usefixtures("qapp")

ROW = 24


def make_loader(history):
    return MagicMock(side_effect=lambda limit, *_: history[:limit])


def make_view(history=None, callbacks=None, loader=None):
    history = linear_history(250) if history is None else history
    loader = loader or make_loader(history)
    controller = GraphController(
        loader,
        callbacks=callbacks,
        layout=GraphLayout(GraphGeometry(row_height=ROW, lane_width=16, left_padding=8, overscan=5)),
    )
    view = CommitGraphView(controller, threaded=False)
    view.resize(800, 300)
    view.show()
    controller.start()
    return view, controller, loader


def wait_until(condition, timeout_ms=5000):
    """Pump the event loop until condition() holds."""
    waited = 0
    while not condition():
        if waited >= timeout_ms:
            return False
        QTest.qWait(10)
        waited += 10
    return True


class TestCommitGraphView:
    def test_scroll_range_from_content_height(self):
        """The scroll bar covers every loaded row without creating widgets."""
        view, _, _ = make_view()
        bar = view.verticalScrollBar()
        assert bar.maximum() == 100 * ROW - view.viewport().height()
        view.close()

    def test_scroll_range_grows_with_load_more(self):
        view, controller, _ = make_view()
        controller.load_more()
        assert view.verticalScrollBar().maximum() == 200 * ROW - view.viewport().height()
        view.close()

    def test_arrow_keys(self):
        view, controller, _ = make_view()
        view.setFocus()
        QTest.keyClick(view, Qt.Key.Key_Down)
        QTest.keyClick(view, Qt.Key.Key_Down)
        assert controller.focused_index == 1
        QTest.keyClick(view, Qt.Key.Key_Up)
        assert controller.selected_hash == "c0"
        view.close()

    def test_end_key_scrolls_to_bottom(self):
        """End focuses the last row and scrolls just far enough to show it."""
        view, controller, _ = make_view()
        QTest.keyClick(view, Qt.Key.Key_End)
        assert controller.focused_index == 99
        assert view.verticalScrollBar().value() == 100 * ROW - view.viewport().height()
        QTest.keyClick(view, Qt.Key.Key_Home)
        assert view.verticalScrollBar().value() == 0
        view.close()

    def test_click_selects_row(self):
        on_select = MagicMock()
        view, controller, _ = make_view(callbacks=GraphCallbacks(on_select_commit=on_select))
        QTest.mouseClick(view.viewport(), Qt.MouseButton.LeftButton, pos=QPoint(200, ROW + 5))
        assert controller.focused_index == 1
        on_select.assert_called_once_with("c1")
        view.close()

    def test_row_at_accounts_for_scroll(self):
        view, controller, _ = make_view()
        view.verticalScrollBar().setValue(10 * ROW)
        assert controller.scroll_top == 10 * ROW
        assert view.row_at(5) == 10
        view.close()

    def test_paints_visible_window(self):
        """Rendering a frame works for merges, roots and empty lists."""
        view, _, _ = make_view(branchy_history(40))
        assert not view.grab().isNull()
        view.close()

        empty, _, _ = make_view(history=[])
        assert not empty.grab().isNull()
        empty.close()


class TestContextMenu:
    def test_only_provided_actions(self):
        on_revert = MagicMock()
        callbacks = GraphCallbacks(on_copy_hash=MagicMock(), on_revert=on_revert)
        view, _, _ = make_view(callbacks=callbacks)

        menu = view.build_context_menu("c5")
        labels = [a.text() for a in menu.actions() if not a.isSeparator()]
        assert labels == ["Copy hash", "Revert"]
        assert len(menu.actions()) == 3

        menu.actions()[-1].trigger()
        on_revert.assert_called_once_with("c5")
        view.close()

    def test_no_menu_without_callbacks(self):
        view, _, _ = make_view()
        assert view.build_context_menu("c5") is None
        view.close()


class TestGraphToolbar:
    def test_branch_selector(self):
        view, controller, loader = make_view()
        toolbar = GraphToolbar(controller, ["main", "dev"])
        assert toolbar.all_branches_check is None

        toolbar.branch_combo.setCurrentIndex(2)
        assert controller.branch == "dev"
        assert loader.call_args.args == (100, False, False, "dev")

        toolbar.branch_combo.setCurrentIndex(0)
        assert controller.branch is None
        assert controller.all_branches
        view.close()

    def test_toggles_and_count(self):
        view, controller, _ = make_view()
        toolbar = GraphToolbar(controller)
        assert toolbar.branch_combo is None
        assert toolbar.count_label.text() == "100"
        assert not toolbar.load_more_button.isHidden()

        toolbar.first_parent_check.setChecked(True)
        assert controller.first_parent

        toolbar.load_more_button.click()
        assert toolbar.count_label.text() == "200"
        view.close()

    def test_failed_fetch_resets_controls(self):
        """When a filter fetch fails the toolbar goes back to the filters on screen."""
        history = linear_history(250)

        def load(limit, all_branches, first_parent, branch):
            if first_parent or branch == "dev":
                raise RuntimeError("walk failed")
            return history[:limit]

        view, controller, _ = make_view(loader=load)
        toolbar = GraphToolbar(controller, ["main", "dev"])

        toolbar.first_parent_check.setChecked(True)
        assert not controller.first_parent
        assert not toolbar.first_parent_check.isChecked()

        toolbar.branch_combo.setCurrentIndex(2)
        assert controller.branch is None
        assert toolbar.branch_combo.currentIndex() == 0
        assert toolbar.count_label.text() == "100"
        assert not toolbar.load_more_button.isHidden()
        view.close()

    def test_load_more_hidden_at_end(self):
        view, controller, _ = make_view(linear_history(30))
        toolbar = GraphToolbar(controller)
        assert toolbar.load_more_button.isHidden()
        view.close()


class TestFetchExecutor:
    def test_threaded_fetch(self):
        """Fetches run on a worker thread and land back on the controller."""
        controller = GraphController(make_loader(linear_history(150)))
        executor = FetchExecutor()
        controller.executor = executor

        controller.start()
        assert wait_until(lambda: not controller.loading)
        assert controller.total_rows == 100
        assert executor.pending == 0

    def test_threaded_failure(self):
        controller = GraphController(MagicMock(side_effect=RuntimeError("broken repo")))
        controller.executor = FetchExecutor()

        controller.start()
        assert wait_until(lambda: not controller.loading)
        assert controller.last_error == "broken repo"

    def test_latest_request_wins(self):
        history = linear_history(300)
        controller = GraphController(make_loader(history))
        executor = FetchExecutor()
        controller.executor = executor

        controller.start()
        controller.load_more()
        controller.set_first_parent(True)
        assert wait_until(lambda: executor.pending == 0)
        assert controller.total_rows == 100
        assert controller.first_parent
