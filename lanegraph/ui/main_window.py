"""
Main window - hosts the commit graph and implements its per-commit actions
"""

import logging
from collections.abc import Callable

from PySide6.QtGui import QCloseEvent, QGuiApplication
from PySide6.QtWidgets import (
    QInputDialog,
    QMainWindow,
    QMessageBox,
    QVBoxLayout,
    QWidget,
)

from lanegraph.config.settings import Settings
from lanegraph.git_backend.repository import GraphRepository
from lanegraph.graph.controller import GraphCallbacks, GraphController
from lanegraph.graph.window import GraphLayout
from lanegraph.ui.commit_graph import CommitGraphView, GraphToolbar

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Commit graph browser for one repository"""

    STATUS_TIMEOUT_MS = 4000

    def __init__(self, repo: GraphRepository, settings: Settings | None = None) -> None:
        super().__init__()
        self.repo = repo
        self.settings = settings or Settings()

        self.setWindowTitle(f"lanegraph - {repo.path}")
        width, height = self.settings.get("ui.window_size", [1100, 700])
        self.resize(width, height)

        callbacks = GraphCallbacks(
            on_select_commit=self._on_select_commit,
            on_copy_hash=self._copy_hash,
            on_create_branch=self._create_branch,
            on_create_tag=self._create_tag,
            on_cherry_pick=self._cherry_pick,
            on_revert=self._revert,
        )
        self.controller = GraphController(
            repo.load_graph,
            callbacks=callbacks,
            layout=GraphLayout(self.settings.get_geometry()),
            page_size=self.settings.get_page_size(),
            all_branches=bool(self.settings.get("graph.all_branches", True)),
            first_parent=bool(self.settings.get("graph.first_parent", False)),
            parent=self,
        )
        self.controller.load_failed.connect(self._on_load_failed)

        self.view = CommitGraphView(
            self.controller,
            node_radius=float(self.settings.get("graph.node_radius", 4)),
            merge_node_size=float(self.settings.get("graph.merge_node_size", 5)),
            max_visible_refs=int(self.settings.get("graph.max_visible_refs", 3)),
        )
        self.toolbar = GraphToolbar(self.controller, repo.list_branches())

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.toolbar)
        layout.addWidget(self.view, 1)
        self.setCentralWidget(central)

        self.controller.start()
        self.view.setFocus()

    def _show_status(self, message: str) -> None:
        self.statusBar().showMessage(message, self.STATUS_TIMEOUT_MS)

    def _on_select_commit(self, commit_hash: str) -> None:
        index = self.controller.index_of(commit_hash)
        commit = self.controller.commit_at(index) if index is not None else None
        if commit is not None:
            self._show_status(f"{commit.short_hash}  {commit.author_name}  {commit.message}")

    def _on_load_failed(self, message: str) -> None:
        self._show_status(f"Failed to load history: {message}")

    def _copy_hash(self, commit_hash: str) -> None:
        QGuiApplication.clipboard().setText(commit_hash)
        self._show_status(f"Copied {commit_hash[:7]}")

    def _ask_name(self, title: str, label: str) -> str | None:
        name, ok = QInputDialog.getText(self, title, label)
        name = name.strip()
        return name if ok and name else None

    def _create_branch(self, commit_hash: str) -> None:
        name = self._ask_name("Create Branch", f"Branch name at {commit_hash[:7]}:")
        if name is None:
            return
        self._run_action(lambda: self.repo.create_branch(name, commit_hash), "Cannot Create Branch")

    def _create_tag(self, commit_hash: str) -> None:
        name = self._ask_name("Create Tag", f"Tag name at {commit_hash[:7]}:")
        if name is None:
            return
        self._run_action(lambda: self.repo.create_tag(name, commit_hash), "Cannot Create Tag")

    def _confirm(self, title: str, text: str) -> bool:
        result = QMessageBox.question(
            self,
            title,
            text,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return result == QMessageBox.StandardButton.Yes

    def _cherry_pick(self, commit_hash: str) -> None:
        if not self._confirm("Cherry-pick", f"Cherry-pick {commit_hash[:7]} onto the current branch?"):
            return
        self._run_action(lambda: self.repo.cherry_pick(commit_hash), "Cherry-pick Failed")

    def _revert(self, commit_hash: str) -> None:
        if not self._confirm("Revert", f"Create a commit reverting {commit_hash[:7]}?"):
            return
        self._run_action(lambda: self.repo.revert(commit_hash), "Revert Failed")

    def _run_action(self, action: Callable[[], None], error_title: str) -> None:
        """Run a repository action, then reload so new refs and commits show up"""
        try:
            action()
        except ValueError as e:
            logger.warning("%s: %s", error_title, e)
            QMessageBox.warning(self, error_title, str(e))
            return
        self.controller.reload()

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """Stop fetch threads before the window is destroyed"""
        self.view.shutdown()
        super().closeEvent(event)
