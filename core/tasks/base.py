# Path: core/tasks/base.py
# Purpose: Define background fetch task interfaces and in-flight bookkeeping.
# Layer: core/tasks.
# Details: Provides TaskOutcome, TaskRunner, SynchronousRunner, and InflightRegistry.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from core.models.domain import FetchKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome:
    """Result of one background call, tagged with the key it was issued for.

    Exactly one of ``result`` and ``error`` is meaningful: ``error`` is set
    when the call raised, otherwise ``result`` holds its return value.
    """

    key: FetchKey
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


TaskCallback = Callable[[TaskOutcome], None]


class TaskRunner(Protocol):
    """Execute a callable away from the caller and report back on the caller's thread."""

    def submit(self, key: FetchKey, work: Callable[[], Any], on_done: TaskCallback) -> None:
        """Schedule ``work``; ``on_done`` receives the TaskOutcome on the owning thread."""


def run_task(key: FetchKey, work: Callable[[], Any]) -> TaskOutcome:
    """Invoke ``work`` and capture either its value or the exception it raised."""

    try:
        return TaskOutcome(key=key, result=work())
    except Exception as exc:  # noqa: BLE001 - delivered to the store as a value
        logger.debug("Task %s failed: %s", key, exc)
        return TaskOutcome(key=key, error=exc)


class SynchronousRunner:
    """Run tasks inline on the calling thread.

    Used wherever no Qt event loop is running, such as the test suite.
    """

    def submit(self, key: FetchKey, work: Callable[[], Any], on_done: TaskCallback) -> None:
        on_done(run_task(key, work))


class InflightRegistry:
    """Track which operations have a request in flight, and for which corpus generation.

    Requests are de-duplicated by operation name within one generation: while
    one is registered, ``begin`` for the same operation and generation returns
    False and the caller must not issue a second request. A request for a newer
    generation supersedes the registered one, whose outcome ``finish`` then
    reports as stale.
    """

    def __init__(self) -> None:
        self._inflight: Dict[str, Tuple[FetchKey, int]] = {}

    def begin(self, key: FetchKey, generation: int = 0) -> bool:
        current = self._inflight.get(key.operation)
        if current is not None and current[1] >= generation:
            logger.debug("Skipping %s; %s already in flight", key, current[0])
            return False
        self._inflight[key.operation] = (key, generation)
        return True

    def finish(self, key: FetchKey, generation: int = 0) -> bool:
        """Unregister the request; False when it was superseded and its outcome must be dropped."""

        if self._inflight.get(key.operation) != (key, generation):
            return False
        del self._inflight[key.operation]
        return True

    def is_active(self, operation: str) -> bool:
        return operation in self._inflight
