"""Toolbar for the commit graph: filters, commit count and paging."""

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QWidget,
)

from lanegraph.graph.controller import GraphController


class GraphToolbar(QWidget):
    """
    Branch selector, first-parent/all-branches toggles and "Load more".

    When a branch list is given the branch selector replaces the
    all-branches toggle, since picking "All branches" there means the same.
    """

    def __init__(
        self,
        controller: GraphController,
        branches: list[str] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.controller = controller

        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)
        layout.setSpacing(8)

        title = QLabel("Commit graph")
        title.setStyleSheet("font-weight: bold;")
        layout.addWidget(title)

        self.count_label = QLabel("0")
        self.count_label.setStyleSheet(
            "background: #EEEEEE; border-radius: 6px; padding: 0 6px; color: #555;"
        )
        layout.addWidget(self.count_label)
        layout.addStretch(1)

        self.branch_combo: QComboBox | None = None
        self.all_branches_check: QCheckBox | None = None

        if branches:
            self.branch_combo = QComboBox()
            self.branch_combo.addItem("All branches", None)
            for name in branches:
                self.branch_combo.addItem(name, name)
            if controller.branch is not None:
                index = self.branch_combo.findData(controller.branch)
                if index >= 0:
                    self.branch_combo.setCurrentIndex(index)
            self.branch_combo.currentIndexChanged.connect(self._on_branch_changed)
            layout.addWidget(self.branch_combo)

        self.first_parent_check = QCheckBox("First parent")
        self.first_parent_check.setChecked(controller.first_parent)
        self.first_parent_check.toggled.connect(controller.set_first_parent)
        layout.addWidget(self.first_parent_check)

        if not branches:
            self.all_branches_check = QCheckBox("All branches")
            self.all_branches_check.setChecked(controller.all_branches)
            self.all_branches_check.toggled.connect(controller.set_all_branches)
            layout.addWidget(self.all_branches_check)

        self.loading_label = QLabel("Loading…")
        self.loading_label.setStyleSheet("color: #888;")
        layout.addWidget(self.loading_label)

        self.load_more_button = QPushButton("Load more")
        self.load_more_button.clicked.connect(controller.load_more)
        layout.addWidget(self.load_more_button)

        controller.commits_changed.connect(self.refresh)
        controller.loading_changed.connect(self.refresh)
        controller.load_failed.connect(self.refresh)
        self.refresh()

    def _on_branch_changed(self, index: int) -> None:
        assert self.branch_combo is not None
        self.controller.set_branch(self.branch_combo.itemData(index))

    def refresh(self, *_args: object) -> None:
        """Sync filters, count, spinner and paging button with the controller."""
        controller = self.controller
        loading = controller.loading
        self.count_label.setText(str(controller.total_rows))
        self.loading_label.setVisible(loading)
        self.load_more_button.setVisible(controller.has_more)
        self.load_more_button.setEnabled(not loading)

        # A failed fetch rolls the filters back; don't re-trigger fetches while following it
        self._set_checked(self.first_parent_check, controller.first_parent)
        if self.all_branches_check is not None:
            self._set_checked(self.all_branches_check, controller.all_branches)
        if self.branch_combo is not None:
            index = max(0, self.branch_combo.findData(controller.branch))
            if index != self.branch_combo.currentIndex():
                blocked = self.branch_combo.blockSignals(True)
                self.branch_combo.setCurrentIndex(index)
                self.branch_combo.blockSignals(blocked)

    @staticmethod
    def _set_checked(check: QCheckBox, checked: bool) -> None:
        if check.isChecked() != checked:
            blocked = check.blockSignals(True)
            check.setChecked(checked)
            check.blockSignals(blocked)
