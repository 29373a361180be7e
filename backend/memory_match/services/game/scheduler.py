"""Delayed callbacks for the session engine.

Sessions schedule two kinds of work: the one-shot match resolution and the
1 Hz display tick. Both go through a scheduler so the same engine can run
on Socket.IO background tasks in the server and on a virtual clock in tests
and headless replays.
"""

import heapq
import itertools
import logging
import time
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class TaskHandle:
    """Cancellable reference to a scheduled callback."""

    def __init__(self, callback: Callable[[], None], due: float):
        self.callback = callback
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self.callback()


class SocketIOScheduler:
    """Runs callbacks via ``socketio.start_background_task``.

    With eventlet/gevent this is a cooperative green thread; with the
    threading backend it is a real thread, which is why ``GameSession``
    serialises its entry points.
    """

    def __init__(self, socketio, clock: Callable[[], float] = time.time):
        self.socketio = socketio
        self.clock = clock

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(callback, self.clock() + delay)

        def _runner():
            self.socketio.sleep(delay)
            try:
                handle.run()
            except Exception:
                logger.exception("[task-failed] scheduled callback raised")

        self.socketio.start_background_task(_runner)
        return handle


class ManualScheduler:
    """Deterministic scheduler driven by a virtual clock.

    Nothing runs until ``advance`` is called; callbacks then fire inline in
    due order, each seeing ``clock()`` equal to its own due time.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, TaskHandle]] = []
        self._seq = itertools.count()

    def clock(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(callback, self._now + delay)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            handle.run()
        self._now = target
