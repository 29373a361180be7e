"""Memory game session state machine.

ready -> playing <-> paused -> completed, with ``initialize`` and ``reset``
returning to ready from anywhere. Intents issued in the wrong state are
ignored (the mutator returns False) since stale or doubled UI events are
routine.

A second flipped tile schedules a resolution one second later; until it
fires the board is locked because ``flip`` requires fewer than two face-up
tiles. The resolution carries the index pair and the session generation it
was scheduled in and does nothing if either no longer matches.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .board import Tile
from .levels import Level
from .scoring import calculate_score
from .timer import GameTimer

logger = logging.getLogger(__name__)

RESOLVE_DELAY_SEC = 1.0
TICK_INTERVAL_SEC = 1.0


class GameState(str, enum.Enum):
    READY = 'ready'
    PLAYING = 'playing'
    PAUSED = 'paused'
    COMPLETED = 'completed'


@dataclass(frozen=True)
class Snapshot:
    state: GameState
    level: Optional[Level]
    tiles: Tuple[Tile, ...]
    flipped: Tuple[int, ...]
    matched: Tuple[int, ...]
    moves: int
    elapsed_seconds: int
    score: Optional[int]

    @property
    def live_score(self) -> int:
        return calculate_score(self.moves, self.elapsed_seconds)

    @property
    def matched_pairs(self) -> int:
        return len(self.matched) // 2

    @property
    def total_pairs(self) -> int:
        return len(self.tiles) // 2

    @property
    def progress(self) -> float:
        return (self.matched_pairs / self.total_pairs) * 100 if self.total_pairs else 0.0

    def to_dict(self):
        return {
            'state': self.state.value,
            'level': self.level.to_dict() if self.level else None,
            'tiles': [t.to_dict() for t in self.tiles],
            'flipped': list(self.flipped),
            'matched': list(self.matched),
            'moves': self.moves,
            'elapsed_seconds': self.elapsed_seconds,
            'score': self.score,
            'live_score': self.live_score,
            'matched_pairs': self.matched_pairs,
            'total_pairs': self.total_pairs,
            'progress': self.progress,
        }


Listener = Callable[[Snapshot], None]


class GameSession:
    def __init__(self, scheduler, leaderboard=None, clock: Optional[Callable[[], float]] = None, name: str = ''):
        self.scheduler = scheduler
        self.leaderboard = leaderboard
        self.name = name
        if clock is None:
            clock = scheduler.clock
        self._timer = GameTimer(clock)
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

        self._state = GameState.READY
        self._level: Optional[Level] = None
        self._tiles: Tuple[Tile, ...] = ()
        self._flipped: List[int] = []
        self._matched: List[int] = []
        self._moves = 0
        self._elapsed = 0
        self._score: Optional[int] = None
        self._generation = 0
        self._tick = None

    # ---- read-only views ----

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def level(self) -> Optional[Level]:
        return self._level

    @property
    def tiles(self) -> Tuple[Tile, ...]:
        return self._tiles

    @property
    def flipped(self) -> Tuple[int, ...]:
        return tuple(self._flipped)

    @property
    def matched(self) -> Tuple[int, ...]:
        return tuple(self._matched)

    @property
    def moves(self) -> int:
        return self._moves

    @property
    def elapsed_seconds(self) -> int:
        return self._elapsed

    @property
    def anchor(self) -> Optional[float]:
        return self._timer.anchor

    @property
    def score(self) -> Optional[int]:
        return self._score if self._state == GameState.COMPLETED else None

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(
                state=self._state,
                level=self._level,
                tiles=self._tiles,
                flipped=tuple(self._flipped),
                matched=tuple(self._matched),
                moves=self._moves,
                elapsed_seconds=self._elapsed,
                score=self.score,
            )

    # ---- observers ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snap: Snapshot) -> None:
        # called with the lock held so listeners see snapshots in mutation order
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception(f"[listener-failed] session={self.name}")

    # ---- lifecycle ----

    def initialize(self, tiles: Sequence[Tile], level: Level) -> bool:
        assert len(tiles) % 2 == 0, 'board must hold an even number of tiles'
        with self._lock:
            self._clear()
            self._tiles = tuple(tiles)
            self._level = level
            logger.info(f"[initialize] session={self.name} level={level.name} tiles={len(self._tiles)}")
            self._notify(self.snapshot())
        return True

    def start(self) -> bool:
        with self._lock:
            if self._state != GameState.READY or self._level is None:
                logger.debug(f"[start-ignored] session={self.name} state={self._state.value}")
                return False
            self._state = GameState.PLAYING
            self._elapsed = 0
            self._timer.start()
            self._schedule_tick()
            logger.info(f"[start] session={self.name} anchor={self._timer.anchor}")
            self._notify(self.snapshot())
        return True

    def pause(self) -> bool:
        with self._lock:
            if self._state != GameState.PLAYING:
                logger.debug(f"[pause-ignored] session={self.name} state={self._state.value}")
                return False
            self._cancel_tick()
            self._elapsed = self._timer.pause()
            self._state = GameState.PAUSED
            logger.info(f"[pause] session={self.name} elapsed={self._elapsed}")
            self._notify(self.snapshot())
        return True

    def resume(self) -> bool:
        with self._lock:
            if self._state != GameState.PAUSED:
                logger.debug(f"[resume-ignored] session={self.name} state={self._state.value}")
                return False
            self._timer.resume()
            self._state = GameState.PLAYING
            self._schedule_tick()
            logger.info(f"[resume] session={self.name} elapsed={self._elapsed} anchor={self._timer.anchor}")
            self._notify(self.snapshot())
        return True

    def reset(self) -> bool:
        with self._lock:
            self._clear()
            logger.info(f"[reset] session={self.name} generation={self._generation}")
            self._notify(self.snapshot())
        return True

    def _clear(self) -> None:
        self._cancel_tick()
        self._timer.reset()
        self._generation += 1
        self._state = GameState.READY
        self._flipped = []
        self._matched = []
        self._moves = 0
        self._elapsed = 0
        self._score = None

    # ---- matching ----

    def flip(self, index: int) -> bool:
        with self._lock:
            if (
                self._state != GameState.PLAYING
                or len(self._flipped) >= 2
                or index in self._flipped
                or index in self._matched
                or not 0 <= index < len(self._tiles)
            ):
                logger.debug(f"[flip-ignored] session={self.name} index={index} state={self._state.value} flipped={self._flipped}")
                return False
            self._flipped.append(index)
            if len(self._flipped) == 2:
                self._moves += 1
                pair = (self._flipped[0], self._flipped[1])
                generation = self._generation
                self.scheduler.call_later(RESOLVE_DELAY_SEC, lambda: self._resolve(pair, generation))
            logger.debug(f"[flip] session={self.name} index={index} moves={self._moves}")
            self._notify(self.snapshot())
        return True

    def _resolve(self, pair: Tuple[int, int], generation: int) -> None:
        with self._lock:
            if generation != self._generation or list(pair) != self._flipped:
                logger.info(f"[resolve-skip] session={self.name} pair={pair} stale")
                return
            first, second = pair
            if self._tiles[first].pair_id == self._tiles[second].pair_id:
                self._matched.extend(pair)
                self._flipped = []
                logger.debug(f"[match] session={self.name} pair={pair}")
                if len(self._matched) == len(self._tiles):
                    self._complete()
            else:
                self._flipped = []
                logger.debug(f"[mismatch] session={self.name} pair={pair}")
            self._notify(self.snapshot())

    def _complete(self) -> None:
        self._cancel_tick()
        # authoritative value comes from the anchor, not the last tick sample
        self._elapsed = self._timer.stop()
        self._state = GameState.COMPLETED
        self._score = calculate_score(self._moves, self._elapsed)
        logger.info(f"[complete] session={self.name} moves={self._moves} elapsed={self._elapsed} score={self._score}")
        if self.leaderboard is not None and self._level is not None:
            self.leaderboard.record_result(self._level.name, self._moves, self._elapsed)

    # ---- display tick ----

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        generation = self._generation
        self._tick = self.scheduler.call_later(TICK_INTERVAL_SEC, lambda: self._on_tick(generation))

    def _cancel_tick(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != GameState.PLAYING:
                return
            self._elapsed = max(self._elapsed, self._timer.elapsed())
            self._schedule_tick()
            self._notify(self.snapshot())
