import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from .scoring import calculate_score

logger = logging.getLogger(__name__)

MAX_ENTRIES = 10
KEY_PREFIX = 'highScores_'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HighScoreEntry:
    score: int
    moves: int
    time_seconds: int
    recorded_at: datetime

    def to_dict(self):
        return {
            'score': self.score,
            'moves': self.moves,
            'time_seconds': self.time_seconds,
            'recorded_at': self.recorded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data) -> 'HighScoreEntry':
        return cls(
            score=int(data['score']),
            moves=int(data['moves']),
            time_seconds=int(data['time_seconds']),
            recorded_at=datetime.fromisoformat(data['recorded_at']),
        )


class Leaderboard:
    """Per-level top ten results on top of a key/value store.

    Persistence is best effort: unreadable data is treated as an empty list
    and failed writes are logged and dropped, so finishing a game never
    fails because of storage.
    """

    def __init__(self, storage, clock: Callable[[], datetime] = _utcnow):
        self.storage = storage
        self.clock = clock

    @staticmethod
    def storage_key(level_name: str) -> str:
        return f"{KEY_PREFIX}{level_name}"

    def entries(self, level_name: str) -> List[HighScoreEntry]:
        key = self.storage_key(level_name)
        try:
            raw = self.storage.load(key)
        except Exception as exc:
            logger.warning(f"[storage-read-failed] key={key} error={exc!r}")
            return []
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"[storage-corrupt] key={key} expected list got {type(raw).__name__}")
            return []
        entries = []
        for item in raw:
            try:
                entries.append(HighScoreEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as exc:
                logger.warning(f"[storage-corrupt] key={key} skipping record {item!r}: {exc!r}")
        # stable sort, ties keep insertion order
        return sorted(entries, key=lambda e: e.score, reverse=True)

    def record_result(self, level_name: str, moves: int, elapsed_seconds: int) -> HighScoreEntry:
        entry = HighScoreEntry(
            score=calculate_score(moves, elapsed_seconds),
            moves=moves,
            time_seconds=elapsed_seconds,
            recorded_at=self.clock(),
        )
        combined = self.entries(level_name)
        combined.append(entry)
        top = sorted(combined, key=lambda e: e.score, reverse=True)[:MAX_ENTRIES]

        key = self.storage_key(level_name)
        try:
            self.storage.save(key, [e.to_dict() for e in top])
        except Exception as exc:
            logger.warning(f"[storage-write-failed] key={key} error={exc!r}")
        else:
            rank = next((i + 1 for i, e in enumerate(top) if e is entry), None)
            logger.info(f"[highscore] level={level_name} score={entry.score} rank={rank}")
        return entry

    def best(self, level_name: str) -> Optional[HighScoreEntry]:
        entries = self.entries(level_name)
        return entries[0] if entries else None

    def for_levels(self, level_names: Iterable[str]) -> Dict[str, List[HighScoreEntry]]:
        return {name: self.entries(name) for name in level_names}
