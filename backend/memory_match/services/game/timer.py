import math
import time
from typing import Callable, Optional


class GameTimer:
    """Elapsed play time derived from a wall-clock anchor.

    The elapsed value is never incremented in place; it is always
    ``floor(now - anchor)`` while running, so periodic sampling cannot drift.
    Resuming moves the anchor back by the time already accumulated, which
    excludes the paused interval from the total.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._anchor: Optional[float] = None
        self._frozen = 0

    @property
    def running(self) -> bool:
        return self._anchor is not None

    @property
    def anchor(self) -> Optional[float]:
        return self._anchor

    def start(self) -> None:
        self._frozen = 0
        self._anchor = self._clock()

    def pause(self) -> int:
        self._frozen = self.elapsed()
        self._anchor = None
        return self._frozen

    def resume(self) -> None:
        self._anchor = self._clock() - self._frozen

    def stop(self) -> int:
        return self.pause()

    def reset(self) -> None:
        self._anchor = None
        self._frozen = 0

    def elapsed(self) -> int:
        if self._anchor is None:
            return self._frozen
        # Clock skew backwards must not shrink the accumulated time.
        return max(self._frozen, math.floor(self._clock() - self._anchor))
