# Path: gui/workers.py
# Purpose: Run backend calls on QThreadPool workers and deliver outcomes on the GUI thread.
# Layer: gui.
# Details: Implements the core TaskRunner protocol with QRunnable tasks and a queued Qt signal.

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from core.models.domain import FetchKey
from core.tasks.base import TaskCallback, TaskOutcome, run_task


class _TaskSignals(QObject):
    finished = Signal(int, object)


class _BackgroundTask(QRunnable):
    """Execute one backend call off the UI thread."""

    def __init__(self, ticket: int, key: FetchKey, work: Callable[[], Any], signals: _TaskSignals) -> None:
        super().__init__()
        self.ticket = ticket
        self.key = key
        self.work = work
        self.signals = signals

    def run(self) -> None:  # type: ignore[override]
        self.signals.finished.emit(self.ticket, run_task(self.key, self.work))


class ThreadPoolRunner(QObject):
    """TaskRunner backed by a QThreadPool.

    The signals object lives on the thread that created the runner, so the
    cross-thread emit from a worker is queued and callbacks run on the GUI
    thread.
    """

    def __init__(self, max_workers: int = 4, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(max(1, max_workers))
        self._signals = _TaskSignals(self)
        self._signals.finished.connect(self._on_finished)
        self._callbacks: Dict[int, TaskCallback] = {}
        self._tickets = itertools.count(1)

    def submit(self, key: FetchKey, work: Callable[[], Any], on_done: TaskCallback) -> None:
        ticket = next(self._tickets)
        self._callbacks[ticket] = on_done
        self._pool.start(_BackgroundTask(ticket, key, work, self._signals))

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    def _on_finished(self, ticket: int, outcome: TaskOutcome) -> None:
        callback = self._callbacks.pop(ticket, None)
        if callback is not None:
            callback(outcome)
