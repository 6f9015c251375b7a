"""Background execution for store and image-edit calls."""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

logger = logging.getLogger(__name__)


class _Task(QRunnable):
    def __init__(self, runner: "QtTaskRunner", task_id: int, fn: Callable[[], Any]) -> None:
        super().__init__()
        self._runner = runner
        self._task_id = task_id
        self._fn = fn

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as exc:
            self._runner.failed.emit(self._task_id, exc)
            return
        self._runner.finished.emit(self._task_id, result)


class QtTaskRunner(QObject):
    """Runs callables on a worker pool and calls back on the GUI thread.

    The default pool has a single thread, so tasks settle in submission order.
    """

    finished = Signal(int, object)
    failed = Signal(int, object)

    def __init__(self, parent: QObject | None = None, max_threads: int = 1) -> None:
        super().__init__(parent)
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(max_threads)
        self._ids = itertools.count(1)
        self._callbacks: dict[int, tuple[Optional[Callable], Optional[Callable]]] = {}
        self.finished.connect(self._on_finished)
        self.failed.connect(self._on_failed)

    def submit(
        self,
        fn: Callable[[], Any],
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        task_id = next(self._ids)
        self._callbacks[task_id] = (on_success, on_error)
        self._pool.start(_Task(self, task_id, fn))

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    @Slot(int, object)
    def _on_finished(self, task_id: int, result: object) -> None:
        on_success, _ = self._callbacks.pop(task_id, (None, None))
        if on_success is not None:
            on_success(result)

    @Slot(int, object)
    def _on_failed(self, task_id: int, exc: object) -> None:
        _, on_error = self._callbacks.pop(task_id, (None, None))
        if on_error is None:
            logger.error("Background task failed: %s", exc, exc_info=exc)
            return
        on_error(exc)
