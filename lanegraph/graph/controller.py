"""
Graph controller - paged history loading plus focus/selection for the graph.

The controller owns the commit list, the fetch parameters and the selection.
Fetching is delegated to an executor so the same logic runs inline (tests,
scripts) or on a worker thread (the Qt view installs one). Every fetch
replaces the list wholesale; the layout memo notices the new list object and
reruns lane assignment once.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from PySide6.QtCore import QObject, Signal

from lanegraph.constants import DEFAULT_PAGE_SIZE
from lanegraph.graph.types import CommitRecord
from lanegraph.graph.window import GraphLayout, RenderPass

logger = logging.getLogger(__name__)

# load_graph(limit, all_branches, first_parent, branch) -> commits, newest first
LoadGraph = Callable[[int, bool, bool, str | None], Sequence[CommitRecord]]


class LoadState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class NavKey(Enum):
    """Keyboard navigation commands understood by the controller."""

    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    ENTER = "enter"


class ContextAction(Enum):
    """Per-commit actions offered in the context menu."""

    COPY_HASH = "copy"
    CREATE_BRANCH = "branch"
    CREATE_TAG = "tag"
    CHERRY_PICK = "cherrypick"
    REVERT = "revert"


@dataclass
class GraphCallbacks:
    """Host callbacks. All are fire-and-forget; unset ones are skipped."""

    on_select_commit: Callable[[str], None] | None = None
    on_copy_hash: Callable[[str], None] | None = None
    on_create_branch: Callable[[str], None] | None = None
    on_create_tag: Callable[[str], None] | None = None
    on_revert: Callable[[str], None] | None = None
    on_cherry_pick: Callable[[str], None] | None = None

    def for_action(self, action: ContextAction) -> Callable[[str], None] | None:
        return {
            ContextAction.COPY_HASH: self.on_copy_hash,
            ContextAction.CREATE_BRANCH: self.on_create_branch,
            ContextAction.CREATE_TAG: self.on_create_tag,
            ContextAction.CHERRY_PICK: self.on_cherry_pick,
            ContextAction.REVERT: self.on_revert,
        }[action]

    @property
    def context_actions(self) -> list[ContextAction]:
        """Actions that have a handler, in menu order."""
        return [action for action in ContextAction if self.for_action(action) is not None]

    @property
    def has_context_menu(self) -> bool:
        return bool(self.context_actions)


@dataclass
class SelectionState:
    selected_hash: str | None = None
    focused_index: int = -1


@dataclass(frozen=True)
class FetchRequest:
    """One call to the graph loader, tagged with a serial for staleness checks."""

    serial: int
    limit: int
    all_branches: bool
    first_parent: bool
    branch: str | None
    load_graph: LoadGraph

    def run(self) -> list[CommitRecord]:
        return list(self.load_graph(self.limit, self.all_branches, self.first_parent, self.branch))


FetchDone = Callable[[FetchRequest, list[CommitRecord]], None]
FetchFailed = Callable[[FetchRequest, Exception], None]
FetchExecutor = Callable[[FetchRequest, FetchDone, FetchFailed], None]


def run_inline(request: FetchRequest, on_done: FetchDone, on_error: FetchFailed) -> None:
    """Run a fetch synchronously on the calling thread."""
    try:
        commits = request.run()
    except Exception as e:
        on_error(request, e)
        return
    on_done(request, commits)


class GraphController(QObject):
    """Loads history page by page and tracks which commit is focused."""

    commits_changed = Signal()
    loading_changed = Signal(bool)
    focus_changed = Signal(int)  # focused row index, -1 for none
    scroll_requested = Signal(float)  # new scroll top in pixels
    load_failed = Signal(str)  # error message

    def __init__(
        self,
        load_graph: LoadGraph,
        callbacks: GraphCallbacks | None = None,
        layout: GraphLayout | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        all_branches: bool = True,
        first_parent: bool = False,
        executor: FetchExecutor | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self._load_graph = load_graph
        self.callbacks = callbacks or GraphCallbacks()
        self.layout = layout or GraphLayout()
        self.executor: FetchExecutor = executor or run_inline

        # Fetch parameters
        self.page_size = page_size
        self.limit = page_size
        self.all_branches = all_branches
        self.first_parent = first_parent
        self.branch: str | None = None

        self.state = LoadState.IDLE
        self.last_error: str | None = None
        self.selection = SelectionState()

        # Scroll state, fed by the view
        self.scroll_top = 0.0
        self.viewport_height = 0.0

        self._commits: list[CommitRecord] = []
        self._serial = 0
        self._pending_serial: int | None = None
        # Parameters of the list on screen, restored when a fetch fails
        self._loaded_params = self._params()

    # --- Read-only state ---

    @property
    def commits(self) -> list[CommitRecord]:
        return self._commits

    @property
    def total_rows(self) -> int:
        return len(self._commits)

    @property
    def loading(self) -> bool:
        return self._pending_serial is not None

    @property
    def has_more(self) -> bool:
        """A full page came back, so there may be older history to load."""
        return len(self._commits) >= self.limit

    @property
    def focused_index(self) -> int:
        return self.selection.focused_index

    @property
    def selected_hash(self) -> str | None:
        return self.selection.selected_hash

    def index_of(self, commit_hash: str) -> int | None:
        return self.layout.index_for(self._commits).get(commit_hash)

    def commit_at(self, index: int) -> CommitRecord | None:
        if 0 <= index < len(self._commits):
            return self._commits[index]
        return None

    def render(self) -> RenderPass:
        """Layout for the current scroll window."""
        return self.layout.render(
            self._commits, self.scroll_top, self.viewport_height, self.selection.selected_hash
        )

    # --- Loading ---

    def start(self) -> None:
        """Initial load with the current parameters."""
        self._fetch()

    def reload(self) -> None:
        """Re-fetch with the current limit and parameters."""
        self._fetch()

    def load_more(self) -> bool:
        """Fetch one more page. Ignored while a fetch is outstanding."""
        if self.loading:
            return False
        self.limit += self.page_size
        self._fetch()
        return True

    def set_branch(self, branch: str | None) -> None:
        """Show one branch, or every branch when branch is None."""
        self.branch = branch
        self.all_branches = branch is None
        self._refetch_from_first_page()

    def set_all_branches(self, all_branches: bool) -> None:
        self.all_branches = all_branches
        self._refetch_from_first_page()

    def set_first_parent(self, first_parent: bool) -> None:
        self.first_parent = first_parent
        self._refetch_from_first_page()

    def _refetch_from_first_page(self) -> None:
        self.limit = self.page_size
        self._fetch()

    def _fetch(self) -> None:
        self._serial += 1
        request = FetchRequest(
            serial=self._serial,
            limit=self.limit,
            all_branches=self.all_branches,
            first_parent=self.first_parent,
            branch=self.branch,
            load_graph=self._load_graph,
        )
        # A newer request supersedes whatever is still in flight
        self._pending_serial = request.serial
        self._set_state(LoadState.LOADING)
        logger.debug(
            "Fetching graph #%d: limit=%d all_branches=%s first_parent=%s branch=%s",
            request.serial,
            request.limit,
            request.all_branches,
            request.first_parent,
            request.branch,
        )
        self.executor(request, self._on_fetch_done, self._on_fetch_failed)

    def _on_fetch_done(self, request: FetchRequest, commits: list[CommitRecord]) -> None:
        if request.serial != self._pending_serial:
            logger.debug("Dropping stale graph response #%d", request.serial)
            return

        self._pending_serial = None
        self.last_error = None
        self._loaded_params = (
            request.limit,
            request.all_branches,
            request.first_parent,
            request.branch,
        )
        self._commits = list(commits)
        logger.debug("Graph #%d loaded %d commits", request.serial, len(self._commits))
        self._sync_selection()
        self._set_state(LoadState.IDLE)
        self.commits_changed.emit()

    def _on_fetch_failed(self, request: FetchRequest, error: Exception) -> None:
        if request.serial != self._pending_serial:
            logger.debug("Dropping stale graph failure #%d: %s", request.serial, error)
            return

        # Keep the last good list on screen, with the parameters that produced it
        self._pending_serial = None
        self.limit, self.all_branches, self.first_parent, self.branch = self._loaded_params
        self.last_error = str(error) or type(error).__name__
        logger.warning("Failed to load commit graph: %s", self.last_error, exc_info=error)
        self._set_state(LoadState.ERROR)
        self.load_failed.emit(self.last_error)

    def _params(self) -> tuple[int, bool, bool, str | None]:
        return self.limit, self.all_branches, self.first_parent, self.branch

    def _set_state(self, state: LoadState) -> None:
        was_loading = self.state is LoadState.LOADING
        self.state = state
        is_loading = state is LoadState.LOADING
        if was_loading != is_loading:
            self.loading_changed.emit(is_loading)

    def _sync_selection(self) -> None:
        """Keep the selection only if its commit survived the reload."""
        selected = self.selection.selected_hash
        index = self.index_of(selected) if selected is not None else None
        if index is None:
            self.selection.selected_hash = None
            index = -1
        if index != self.selection.focused_index:
            self.selection.focused_index = index
            self.focus_changed.emit(index)

    # --- Focus & selection ---

    def set_viewport(self, scroll_top: float, viewport_height: float) -> None:
        self.scroll_top = max(0.0, scroll_top)
        self.viewport_height = max(0.0, viewport_height)

    def click_row(self, index: int) -> None:
        """Pointer selection of a row."""
        if 0 <= index < len(self._commits):
            self._focus(index)

    def handle_key(self, key: NavKey) -> bool:
        """Apply a navigation key. Returns False when there was nothing to do."""
        total = len(self._commits)
        if total == 0:
            return False

        focused = self.selection.focused_index
        if key is NavKey.ENTER:
            if 0 <= focused < total:
                self._notify_select(self._commits[focused].hash)
            return True

        if key is NavKey.DOWN:
            target = min(focused + 1, total - 1)
        elif key is NavKey.UP:
            target = max(focused - 1, 0)
        elif key is NavKey.HOME:
            target = 0
        else:
            target = total - 1

        self._focus(target)
        return True

    def set_selected_hash(self, commit_hash: str | None, reveal: bool = False) -> None:
        """
        Selection driven from outside the graph.

        Re-derives the focused row; scrolls only when asked to reveal it.
        A hash that is not loaded (or None) clears the focus.
        """
        self.selection.selected_hash = commit_hash
        index = self.index_of(commit_hash) if commit_hash is not None else None
        if index is None:
            if self.selection.focused_index != -1:
                self.selection.focused_index = -1
                self.focus_changed.emit(-1)
            return
        if index != self.selection.focused_index:
            self.selection.focused_index = index
            self.focus_changed.emit(index)
        if reveal:
            self.reveal_row(index)

    def reveal_row(self, index: int) -> None:
        """Scroll by the least amount that shows the whole row."""
        row_height = self.layout.geometry.row_height
        row_top = index * row_height
        row_bottom = row_top + row_height

        if row_top < self.scroll_top:
            new_top = row_top
        elif row_bottom > self.scroll_top + self.viewport_height:
            new_top = row_bottom - self.viewport_height
        else:
            return

        self.scroll_top = max(0.0, new_top)
        self.scroll_requested.emit(self.scroll_top)

    def _focus(self, index: int) -> None:
        commit = self._commits[index]
        changed = index != self.selection.focused_index
        self.selection.focused_index = index
        self.selection.selected_hash = commit.hash
        if changed:
            self.focus_changed.emit(index)
        self._notify_select(commit.hash)
        self.reveal_row(index)

    def _notify_select(self, commit_hash: str) -> None:
        if self.callbacks.on_select_commit is not None:
            self.callbacks.on_select_commit(commit_hash)

    # --- Context actions ---

    def dispatch_action(self, action: ContextAction, commit_hash: str) -> bool:
        """Forward a context action to its host callback, if one is set."""
        handler = self.callbacks.for_action(action)
        if handler is None:
            return False
        handler(commit_hash)
        return True
