"""
Background fetching for the commit graph.

The loader may hit the disk for a long time on big repositories, so each
fetch runs in a FetchWorker on its own QThread. Results come back to the UI
thread through queued signals into FetchExecutor, which then hands them to
the controller's callbacks.
"""

import logging
import time

from PySide6.QtCore import QObject, QThread, Signal, Slot

from lanegraph.graph.controller import FetchDone, FetchFailed, FetchRequest

logger = logging.getLogger(__name__)


class FetchWorker(QObject):
    """Runs one graph fetch on a worker thread"""

    finished = Signal(int, object)  # (serial, list[CommitRecord])
    error = Signal(int, object)  # (serial, Exception)

    def __init__(self, request: FetchRequest) -> None:
        super().__init__()
        self.request = request

    def run(self) -> None:
        """Load the commits"""
        started = time.monotonic()
        try:
            commits = self.request.run()
        except Exception as e:
            logger.debug("FetchWorker #%d failed: %s", self.request.serial, e)
            self.error.emit(self.request.serial, e)
            return
        logger.debug(
            "FetchWorker #%d loaded %d commits in %.1f ms",
            self.request.serial,
            len(commits),
            (time.monotonic() - started) * 1000,
        )
        self.finished.emit(self.request.serial, commits)


class FetchExecutor(QObject):
    """Controller executor that runs each fetch on a fresh QThread"""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._jobs: dict[int, tuple[QThread, FetchWorker, FetchDone, FetchFailed]] = {}

    def __call__(self, request: FetchRequest, on_done: FetchDone, on_error: FetchFailed) -> None:
        thread = QThread()
        worker = FetchWorker(request)
        worker.moveToThread(thread)

        # Receiver lives on the UI thread, so these are queued connections
        worker.finished.connect(self._on_finished)
        worker.error.connect(self._on_error)
        thread.started.connect(worker.run)

        self._jobs[request.serial] = (thread, worker, on_done, on_error)
        thread.start()

    @property
    def pending(self) -> int:
        return len(self._jobs)

    def _take(self, serial: int) -> tuple[FetchWorker, FetchDone, FetchFailed] | None:
        job = self._jobs.pop(serial, None)
        if job is None:
            return None
        thread, worker, on_done, on_error = job
        thread.quit()
        thread.wait()
        return worker, on_done, on_error

    @Slot(int, object)
    def _on_finished(self, serial: int, commits: object) -> None:
        job = self._take(serial)
        if job is None:
            return
        worker, on_done, _ = job
        on_done(worker.request, list(commits))  # type: ignore[call-overload]

    @Slot(int, object)
    def _on_error(self, serial: int, error: object) -> None:
        job = self._take(serial)
        if job is None:
            return
        worker, _, on_error = job
        if not isinstance(error, Exception):
            error = RuntimeError(str(error))
        on_error(worker.request, error)

    def shutdown(self) -> None:
        """Stop all worker threads, dropping their results"""
        for thread, _, _, _ in self._jobs.values():
            thread.quit()
            thread.wait()
        self._jobs.clear()
